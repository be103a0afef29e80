from dataclasses import dataclass

import pytest

from wattmon.datalog import GAP_FILL, gap_start, select_log


@dataclass
class Span:
    is_open: bool
    interval: int
    first_key: int
    last_key: int


def make_logs(history_open=True):
    history = Span(history_open, 60, 6000, 12000)
    current = Span(True, 5, 9000, 15000)
    return current, history


def test_closed_history_uses_current():
    current, history = make_logs(history_open=False)
    assert select_log(6000, current, history) is current
    assert select_log(10005, current, history) is current


def test_boundary_key_in_history():
    current, history = make_logs()
    assert select_log(7200, current, history) is history
    assert select_log(history.last_key, current, history) is history
    assert select_log(history.first_key, current, history) is history


def test_boundary_key_beyond_history_uses_current():
    current, history = make_logs()
    assert select_log(history.last_key + 60, current, history) is current


def test_off_boundary_key_in_current_uses_current():
    current, history = make_logs()
    assert select_log(current.first_key + 5, current, history) is current


def test_off_boundary_key_before_current_uses_history():
    current, history = make_logs()
    assert select_log(history.first_key + 5, current, history) is history


def test_off_boundary_key_before_history_uses_current():
    current, history = make_logs()
    assert select_log(history.first_key - 5, current, history) is current


def test_small_gap_keeps_last_time():
    assert gap_start(1000, 1000 + GAP_FILL, 5) == 1000
    assert gap_start(1000, 1001, 5) == 1000


@pytest.mark.parametrize("now", [1000 + GAP_FILL + 1, 50003, 99999])
def test_large_gap_restarts_on_interval(now):
    start = gap_start(1000, now, 5)
    assert start % 5 == 0
    assert start <= now
    assert now - start < 5


def test_future_last_time_restarts():
    start = gap_start(5000, 4003, 5)
    assert start <= 4003
    assert start % 5 == 0


def test_custom_gap():
    assert gap_start(100, 150, 10, gap=60) == 100
    assert gap_start(100, 175, 10, gap=60) == 170


def test_bad_interval():
    with pytest.raises(ValueError):
        gap_start(0, 10, 0)