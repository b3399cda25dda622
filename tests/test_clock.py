"""
Unit tests for timestamps and clocks.
"""

import pytest

from roadsmq_core.engine.clock import ManualClock, SystemClock, Timestamp


class TestTimestamp:
    """Tests for Timestamp."""

    def test_ms_truncates_microseconds(self):
        """Test millisecond conversion drops sub-millisecond digits."""
        ts = Timestamp(seconds=1_700_000_000, microseconds=123_999)
        assert ts.ms == 1_700_000_000_123

    def test_micro_digits_pads_fraction(self):
        """Test the fraction is always six digits."""
        ts = Timestamp(seconds=12, microseconds=5)
        assert ts.micro_digits == "12000005"

    def test_from_redis_accepts_strings(self):
        """Test a TIME reply of strings is parsed."""
        ts = Timestamp.from_redis(["1700000000", "250000"])
        assert ts == Timestamp(seconds=1_700_000_000, microseconds=250_000)

    def test_rejects_out_of_range_microseconds(self):
        """Test microseconds must be below one second."""
        with pytest.raises(ValueError):
            Timestamp(seconds=1, microseconds=1_000_000)

    def test_add_seconds_carries(self):
        """Test fractional seconds carry into whole seconds."""
        ts = Timestamp(seconds=10, microseconds=900_000).add_seconds(0.2)
        assert ts == Timestamp(seconds=11, microseconds=100_000)


class TestClocks:
    """Tests for clock implementations."""

    def test_manual_clock_only_moves_when_advanced(self):
        """Test the manual clock is frozen between advances."""
        clock = ManualClock(start=100.0)
        assert clock.now() == clock.now()

        after = clock.advance(1.5)
        assert after.ms == 101_500
        assert clock.now() == after

    def test_manual_clock_set(self):
        """Test jumping to an explicit time."""
        clock = ManualClock()
        clock.set(Timestamp(seconds=5))
        assert clock.now().ms == 5000

    def test_system_clock_is_monotonic_enough(self):
        """Test two reads of the wall clock do not go backwards."""
        clock = SystemClock()
        first = clock.now()
        second = clock.now()
        assert second.ms >= first.ms
