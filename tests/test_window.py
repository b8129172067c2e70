"""Tests for the rolling sample window."""

from __future__ import annotations

import random

import pytest

from taptempo.window import (
    InvalidConfiguration,
    SampleWindow,
    WindowState,
    bpm_from_interval,
    format_tempo,
)

MS = 1_000_000  # nanoseconds


def _filled(capacity: int, times_ms) -> SampleWindow:
    window = SampleWindow(capacity)
    for t in times_ms:
        window.record(t * MS)
    return window


@pytest.mark.parametrize("capacity", [-3, 0, 1])
def test_construct_rejects_capacity_below_two(capacity: int) -> None:
    with pytest.raises(InvalidConfiguration) as excinfo:
        SampleWindow(capacity)
    assert "at least two" in str(excinfo.value)


def test_construct_accepts_capacity_two() -> None:
    window = SampleWindow(2)
    assert window.capacity == 2
    assert len(window) == 0
    assert window.state is WindowState.EMPTY


@pytest.mark.parametrize("precision", [-1, 6])
def test_construct_rejects_out_of_range_precision(precision: int) -> None:
    with pytest.raises(InvalidConfiguration):
        SampleWindow(5, precision=precision)


@pytest.mark.parametrize("reset", [0, -1])
def test_construct_rejects_non_positive_reset(reset: int) -> None:
    with pytest.raises(InvalidConfiguration):
        SampleWindow(5, idle_reset_duration=reset)


def test_record_returns_sample_count() -> None:
    window = SampleWindow(3)
    assert [window.record(t) for t in range(5)] == [1, 2, 3, 3, 3]


@pytest.mark.parametrize("seed", range(20))
def test_capacity_never_exceeded_and_order_kept(seed: int) -> None:
    rng = random.Random(seed)
    capacity = rng.randint(2, 12)
    window = SampleWindow(capacity)
    now = 0
    for _ in range(rng.randint(0, 60)):
        now += rng.randint(1, 2_000) * MS
        window.record(now)
        samples = window.samples
        assert len(samples) <= capacity
        assert list(samples) == sorted(samples)


@pytest.mark.parametrize("extra", [0, 1, 4, 17])
def test_eviction_keeps_last_capacity_samples(extra: int) -> None:
    capacity = 5
    inserted = [i * 250 * MS for i in range(capacity + extra)]
    window = SampleWindow(capacity)
    for t in inserted:
        window.record(t)
    assert window.samples == tuple(inserted[-capacity:])


def test_late_timestamp_is_clamped_to_newest() -> None:
    window = _filled(4, [0, 500])
    window.record(200 * MS)
    assert window.samples == (0, 500 * MS, 500 * MS)


@pytest.mark.parametrize("times_ms", [[], [42]])
def test_no_estimate_with_fewer_than_two_samples(times_ms) -> None:
    window = _filled(5, times_ms)
    assert window.estimate() is None
    assert window.tempo() is None


def test_mean_interval_over_full_window() -> None:
    window = _filled(5, [0, 100, 200, 300, 400])
    assert window.estimate() == pytest.approx(0.1)
    assert window.tempo() == pytest.approx(600.0)


def test_estimate_averages_rather_than_last_interval() -> None:
    # Intervals of 400, 600, 500 ms: the last pair alone would say 120 BPM.
    window = _filled(4, [0, 400, 1000, 1500])
    assert window.estimate() == pytest.approx(0.5)
    assert window.tempo() == pytest.approx(120.0)


def test_estimate_follows_sliding_window() -> None:
    window = _filled(3, [0, 1000, 1500, 2000])
    # Only 1000, 1500, 2000 remain.
    assert window.estimate() == pytest.approx(0.5)


def test_estimate_does_not_consume_samples() -> None:
    window = _filled(5, [0, 100, 250])
    before = window.samples
    first = window.estimate()
    assert window.estimate() == first
    assert window.tempo() == window.tempo()
    assert window.samples == before


def test_zero_interval_is_a_measurement_without_tempo() -> None:
    window = _filled(5, [10, 10])
    assert window.estimate() == 0.0
    assert window.tempo() is None


def test_reset_clears_samples_only() -> None:
    window = SampleWindow(4, precision=2, idle_reset_duration=3)
    for t in range(10):
        window.record(t * 300 * MS)
    window.reset()
    assert len(window) == 0
    assert window.estimate() is None
    assert window.capacity == 4
    assert window.precision == 2
    assert window.idle_reset_duration == 3


def test_reset_on_empty_window_is_noop() -> None:
    window = SampleWindow(2)
    window.reset()
    window.reset()
    assert window.samples == ()
    assert window.state is WindowState.EMPTY


def test_state_transitions() -> None:
    window = SampleWindow(3)
    assert window.state is WindowState.EMPTY
    window.record(0)
    assert window.state is WindowState.WARMING
    window.record(1)
    assert window.state is WindowState.WARMING
    window.record(2)
    assert window.state is WindowState.FULL
    window.record(3)
    assert window.state is WindowState.FULL
    window.reset()
    assert window.state is WindowState.EMPTY


def test_is_idle_uses_strict_threshold() -> None:
    window = SampleWindow(5, idle_reset_duration=5)
    assert not window.is_idle(10**12)
    window.record(0)
    assert not window.is_idle(5_000 * MS)
    assert window.is_idle(5_000 * MS + 1)


def test_bpm_from_interval() -> None:
    assert bpm_from_interval(0.5) == pytest.approx(120.0)
    assert bpm_from_interval(0.0) is None


def test_format_tempo_rounds_for_display() -> None:
    assert format_tempo(120.456, 0) == "120"
    assert format_tempo(120.456, 2) == "120.46"
    assert format_tempo(600.0, 5) == "600.00000"
    window = SampleWindow(5, precision=1)
    assert window.format(99.96) == "100.0"
