"""Tests for price memory move detection."""

import math

import pytest

from coinboard.price_memory import MoveDirection, MoveSignal, PriceMemory


@pytest.fixture
def memory():
    """Create a price memory with the default 5% threshold."""
    return PriceMemory()


class TestPriceMemory:
    """Tests for PriceMemory.observe."""

    def test_first_observation_has_no_baseline(self, memory):
        assert memory.observe("x", 100) is None
        assert memory.previous("x") == 100

    def test_up_move_then_no_change(self, memory):
        """Test 100 -> 106 signals up, then 106 -> 106 is quiet."""
        memory.observe("x", 100)

        signal = memory.observe("x", 106)
        assert signal is not None
        assert signal.direction == MoveDirection.UP
        assert signal.percent_change == pytest.approx(6.0)
        assert signal.previous_price == 100
        assert signal.current_price == 106

        assert memory.observe("x", 106) is None

    def test_down_move(self, memory):
        memory.observe("x", 100)
        signal = memory.observe("x", 90)
        assert signal.direction == MoveDirection.DOWN
        assert signal.percent_change == pytest.approx(10.0)

    def test_exact_threshold_does_not_signal(self, memory):
        memory.observe("x", 100)
        assert memory.observe("x", 105) is None

    def test_compares_against_prior_value_only(self, memory):
        """Test that small steps never add up to a signal."""
        memory.observe("x", 100)
        assert memory.observe("x", 104) is None
        assert memory.observe("x", 108) is None
        assert memory.previous("x") == 108

    def test_coins_tracked_independently(self, memory):
        memory.observe("a", 100)
        memory.observe("b", 1)
        assert memory.observe("b", 2).coin_id == "b"
        assert memory.observe("a", 101) is None
        assert len(memory) == 2
        assert "a" in memory

    def test_zero_previous_never_signals(self, memory):
        memory.observe("x", 0)
        assert memory.observe("x", 50) is None
        assert memory.previous("x") == 50

    def test_non_finite_price_ignored(self, memory):
        memory.observe("x", 100)
        assert memory.observe("x", math.nan) is None
        assert memory.previous("x") == 100

    def test_custom_threshold(self):
        memory = PriceMemory(threshold_percent=1.0)
        memory.observe("x", 100)
        assert memory.observe("x", 102) is not None


def test_move_signal_is_frozen():
    signal = MoveSignal(
        coin_id="x",
        direction=MoveDirection.UP,
        percent_change=6.0,
        previous_price=100,
        current_price=106,
    )
    with pytest.raises(Exception):
        signal.percent_change = 1.0  # type: ignore[misc]
