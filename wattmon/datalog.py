"""Choice between the current and history data logs, and gap skipping."""

from __future__ import annotations

from typing import Protocol, TypeVar

GAP_FILL = 600


class LogSpan(Protocol):
    """The extent of a keyed data log."""

    is_open: bool
    interval: int
    first_key: int
    last_key: int


L = TypeVar("L", bound=LogSpan)


def select_log(key: int, current: L, history: L) -> L:
    """Return the log a keyed read for ``key`` should be served from.

    Keys on a history interval boundary inside the history log come from the
    history log. Other keys come from the current log, unless they fall
    before it but within the history log.
    """
    if not history.is_open:
        return current
    if key % history.interval:
        if key >= current.first_key or key < history.first_key:
            return current
        return history
    if history.first_key <= key <= history.last_key:
        return history
    return current


def gap_start(last_time: int, now: int, interval: int, gap: int = GAP_FILL) -> int:
    """Time of the next log entry after ``last_time``.

    When more than ``gap`` seconds have passed, or the last entry lies in the
    future, logging restarts at ``now`` rounded down to the interval.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    if now < last_time or now - last_time > gap:
        return now - now % interval
    return last_time