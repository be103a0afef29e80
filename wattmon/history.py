"""Key arithmetic for the one-minute history log built from the current log."""

from __future__ import annotations

from collections.abc import Iterator


def _check_interval(interval: int) -> None:
    if interval <= 0:
        raise ValueError("interval must be positive")


def align_up(key: int, interval: int) -> int:
    """Round ``key`` up to the next multiple of ``interval``.

    A key already on a boundary is returned unchanged. This gives the first
    history entry taken from a current log that starts at ``key``.
    """
    _check_interval(interval)
    remainder = key % interval
    if remainder:
        key += interval - remainder
    return key


def fill_keys(last_key: int, target: int, interval: int) -> Iterator[int]:
    """Yield the keys of records that replicate the last entry up to ``target``.

    Keys start one interval after ``last_key`` and stop before ``target``;
    they are used to fill a gap ahead of the start of the current log.
    """
    _check_interval(interval)
    key = last_key + interval
    while key < target:
        yield key
        key += interval