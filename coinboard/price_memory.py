"""Last-seen price memory used to detect significant moves between refreshes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

DEFAULT_THRESHOLD_PERCENT = 5.0


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class MoveSignal:
    """A price move larger than the alert threshold."""

    coin_id: str
    direction: MoveDirection
    percent_change: float
    previous_price: float
    current_price: float


class PriceMemory:
    """In-memory map of coin id to the last observed price.

    Each observation compares against the prior value and then replaces it,
    so a coin should be observed at most once per refresh cycle for the
    comparison to mean anything. Entries are never evicted; ids that drop out
    of the snapshot simply stop being read.
    """

    def __init__(self, threshold_percent: float = DEFAULT_THRESHOLD_PERCENT) -> None:
        """Initialize the memory.

        Args:
            threshold_percent: Moves strictly above this percentage signal (default: 5)
        """
        self.threshold_percent = threshold_percent
        self._prices: Dict[str, float] = {}

    def observe(self, coin_id: str, price: float) -> Optional[MoveSignal]:
        """Record a price and report whether it moved past the threshold.

        Args:
            coin_id: Stable coin identifier
            price: Current price

        Returns:
            MoveSignal when a non-zero previous price exists and the absolute
            change exceeds the threshold, otherwise None
        """
        if price is None or not math.isfinite(price):
            return None

        previous = self._prices.get(coin_id)
        self._prices[coin_id] = price

        if not previous:
            return None

        percent = abs(price - previous) / previous * 100
        if percent <= self.threshold_percent:
            return None

        return MoveSignal(
            coin_id=coin_id,
            direction=MoveDirection.UP if price > previous else MoveDirection.DOWN,
            percent_change=percent,
            previous_price=previous,
            current_price=price,
        )

    def previous(self, coin_id: str) -> Optional[float]:
        return self._prices.get(coin_id)

    def __contains__(self, coin_id: object) -> bool:
        return coin_id in self._prices

    def __len__(self) -> int:
        return len(self._prices)
