from __future__ import annotations

import numpy as np
import pytest

from oscillation_analyzer.analysis.crossings import (
    average_period,
    detect_crossings,
    estimate_baseline,
    find_rising_crossings,
    lock_period,
)
from oscillation_analyzer.models.results import Crossing


def _crossings(times) -> tuple:
    return tuple(Crossing(time_us=float(t), index=i) for i, t in enumerate(times))


# -----------------------------------------------------------------------
# Baseline
# -----------------------------------------------------------------------


def test_baseline_uses_last_twenty_percent() -> None:
    # 100 samples -> tail of 20; a large transient at the start must not matter.
    v = np.concatenate([np.full(80, 50.0), np.full(20, 0.3)])
    assert estimate_baseline(v) == pytest.approx(0.3)


def test_baseline_uses_at_least_ten_samples() -> None:
    # 30 samples -> 20 % would be 6, minimum of 10 applies.
    v = np.concatenate([np.full(20, 1.0), np.full(4, 5.0), np.full(6, 0.0)])
    assert estimate_baseline(v) == pytest.approx((4 * 5.0) / 10.0)


def test_baseline_short_series_uses_everything() -> None:
    assert estimate_baseline(np.array([1.0, 2.0, 6.0])) == pytest.approx(3.0)


def test_baseline_empty_is_undefined() -> None:
    assert estimate_baseline(np.array([])) is None


# -----------------------------------------------------------------------
# Raw crossings
# -----------------------------------------------------------------------


def test_rising_crossing_is_interpolated() -> None:
    t = np.array([0.0, 10.0, 20.0, 30.0, 40.0])
    v = np.array([-1.0, 3.0, 1.0, -2.0, 2.0])

    raw = find_rising_crossings(t, v, 0.0)

    assert len(raw) == 2
    assert raw[0].index == 0
    assert raw[0].time_us == pytest.approx(2.5)
    assert raw[1].index == 3
    assert raw[1].time_us == pytest.approx(35.0)


def test_sample_on_baseline_counts_as_below() -> None:
    t = np.arange(4, dtype=float)
    v = np.array([0.0, 1.0, 0.0, 0.0])

    raw = find_rising_crossings(t, v, 0.0)

    assert len(raw) == 1
    assert raw[0].index == 0
    assert raw[0].time_us == pytest.approx(0.0)


def test_falling_crossings_are_ignored() -> None:
    t = np.arange(3, dtype=float)
    v = np.array([1.0, 0.5, -1.0])
    assert find_rising_crossings(t, v, 0.0) == ()


def test_length_mismatch_raises() -> None:
    with pytest.raises(ValueError):
        find_rising_crossings(np.arange(3.0), np.arange(4.0), 0.0)


# -----------------------------------------------------------------------
# Period locking
# -----------------------------------------------------------------------


def test_period_lock_stops_at_first_outlier() -> None:
    raw = _crossings([0, 10, 20, 31, 42])
    valid = lock_period(raw, 0.05)

    assert [c.index for c in valid] == [0, 1, 2]


def test_period_lock_does_not_resume_after_outlier() -> None:
    raw = _crossings([0, 10, 20, 35, 45, 55])
    valid = lock_period(raw, 0.1)
    assert [c.time_us for c in valid] == [0.0, 10.0, 20.0]


def test_period_lock_boundary_is_inclusive() -> None:
    # Deviation exactly equal to tolerance * T_ref keeps the crossing.
    assert len(lock_period(_crossings([0, 10, 21]), 0.1)) == 3
    assert len(lock_period(_crossings([0, 10, 21.5]), 0.1)) == 2


def test_period_lock_uses_last_accepted_crossing() -> None:
    # Gaps of 10.9 each stay within 10 % of T_ref=10 even though the drift accumulates.
    raw = _crossings([0, 10, 20.9, 31.8, 42.7])
    assert len(lock_period(raw, 0.1)) == 5


def test_fewer_than_two_raw_crossings_gives_empty_set() -> None:
    assert lock_period((), 0.1) == ()
    assert lock_period(_crossings([5.0]), 0.1) == ()


def test_first_two_crossings_always_accepted() -> None:
    valid = lock_period(_crossings([0, 7]), 0.0)
    assert len(valid) == 2


def test_detect_crossings_on_sine() -> None:
    t = np.arange(0, 1000, 1.0)  # us
    v = np.sin(2 * np.pi * t / 100.0 - 0.3)
    valid = detect_crossings(t, v, 0.0, 0.05)

    assert len(valid) == 10
    assert average_period(valid) == pytest.approx(100.0, rel=1e-3)


def test_average_period() -> None:
    assert average_period(_crossings([0, 10, 22])) == pytest.approx(11.0)
    assert average_period(_crossings([3.0])) == 0.0
    assert average_period(()) == 0.0
