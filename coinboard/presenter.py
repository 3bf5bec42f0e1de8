"""Render models for coin cards, sparklines, the detail view and global stats.

Everything here is plain data: labels and already-formatted strings plus a
few color/direction flags. Renderers only lay these out.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from coinboard.formatting import (
    NOT_AVAILABLE,
    format_change,
    format_count,
    format_currency,
    format_large_number,
    format_percent,
)
from coinboard.price_memory import MoveDirection, MoveSignal
from coinboard.types import Coin, CoinDetail, GlobalStats

SPARKLINE_WIDTH = 280
SPARKLINE_HEIGHT = 60
POSITIVE_COLOR = "#10b981"
NEGATIVE_COLOR = "#ef4444"

FAVORITE_ICON = "⭐"
NOT_FAVORITE_ICON = "☆"

DESCRIPTION_SENTENCES = 3

_BLOCKS = "▁▂▃▄▅▆▇█"
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class StatItem:
    label: str
    value: str


@dataclass
class SparklineModel:
    """Normalized polyline for a price history.

    Points span ``[0, width]`` on x; y is inverted so the highest price sits
    at 0 and the lowest at ``height``.
    """

    points: List[Tuple[float, float]]
    width: int
    height: int
    color: str
    min_price: float
    max_price: float

    def polyline(self) -> str:
        return " ".join(f"{x:g},{y:g}" for x, y in self.points)

    def area_polyline(self) -> str:
        """Polyline closed along the bottom edge, for a filled area."""
        return f"{self.polyline()} {self.width},{self.height} 0,{self.height}"

    def blocks(self, columns: int = 24) -> str:
        """Compress the line into unicode block characters for a terminal."""
        if not self.points:
            return ""
        step = max(1, math.ceil(len(self.points) / columns))
        top = len(_BLOCKS) - 1
        chars = []
        for i in range(0, len(self.points), step):
            chunk = self.points[i:i + step]
            y = sum(point[1] for point in chunk) / len(chunk)
            level = round((1 - y / self.height) * top) if self.height else 0
            chars.append(_BLOCKS[min(max(level, 0), top)])
        return "".join(chars)


@dataclass
class CardModel:
    """One grid card."""

    coin_id: str
    name: str
    symbol: str
    icon_url: str
    price: str
    change: str
    is_positive: bool
    is_favorite: bool
    favorite_icon: str
    stats: List[StatItem] = field(default_factory=list)
    sparkline: Optional[SparklineModel] = None
    alert: Optional[MoveSignal] = None


@dataclass
class DetailModel:
    """Detail view for a single coin."""

    coin_id: str
    name: str
    icon_url: str
    subtitle: str
    price: str
    change: str
    is_positive: bool
    stats: List[StatItem] = field(default_factory=list)
    description: str = ""
    links: List[StatItem] = field(default_factory=list)


@dataclass
class GlobalStatsModel:
    total_market_cap: str
    total_volume: str
    btc_dominance: str
    active_cryptocurrencies: str


def build_sparkline(
    prices: Sequence[float],
    is_positive: bool,
    width: int = SPARKLINE_WIDTH,
    height: int = SPARKLINE_HEIGHT,
) -> Optional[SparklineModel]:
    """Scale a price history into a polyline.

    Returns None when there are no usable samples. A flat series (zero range)
    is drawn at mid-height, and a single sample as a flat line across the
    full width.
    """
    samples = [p for p in prices if p is not None and math.isfinite(p)]
    if not samples:
        return None

    low = min(samples)
    high = max(samples)
    price_range = high - low

    def scale_y(price: float) -> float:
        if price_range == 0:
            return height / 2
        return height - (price - low) / price_range * height

    if len(samples) == 1:
        y = scale_y(samples[0])
        points = [(0.0, y), (float(width), y)]
    else:
        last = len(samples) - 1
        points = [(i / last * width, scale_y(price)) for i, price in enumerate(samples)]

    return SparklineModel(
        points=points,
        width=width,
        height=height,
        color=POSITIVE_COLOR if is_positive else NEGATIVE_COLOR,
        min_price=low,
        max_price=high,
    )


def present_card(
    coin: Coin,
    is_favorite: bool,
    move_signal: Optional[MoveSignal] = None,
) -> CardModel:
    change = coin.price_change_percentage_24h or 0.0
    is_positive = change >= 0
    rank = f"#{coin.market_cap_rank}" if coin.market_cap_rank is not None else NOT_AVAILABLE

    return CardModel(
        coin_id=coin.id,
        name=coin.name,
        symbol=coin.symbol.upper(),
        icon_url=coin.image,
        price=format_currency(coin.current_price),
        change=format_change(change),
        is_positive=is_positive,
        is_favorite=is_favorite,
        favorite_icon=FAVORITE_ICON if is_favorite else NOT_FAVORITE_ICON,
        stats=[
            StatItem("Market Cap", format_large_number(coin.market_cap)),
            StatItem("Volume 24h", format_large_number(coin.total_volume)),
            StatItem("Rank", rank),
            StatItem("Supply", format_large_number(coin.circulating_supply)),
        ],
        sparkline=build_sparkline(coin.sparkline, is_positive),
        alert=move_signal,
    )


def _summarize(description: str) -> str:
    """Strip markup and keep the first few sentences."""
    text = _TAG_RE.sub("", description).strip()
    if not text:
        return ""
    sentences = text.split(". ")[:DESCRIPTION_SENTENCES]
    return ". ".join(sentences).rstrip(".") + "."


def present_detail(detail: CoinDetail) -> DetailModel:
    change = detail.price_change_percentage_24h or 0.0
    symbol = detail.symbol.upper()
    rank = f"#{detail.market_cap_rank}" if detail.market_cap_rank is not None else NOT_AVAILABLE

    links = []
    if detail.homepage:
        links.append(StatItem("🌐 Website", detail.homepage))
    if detail.blockchain_site:
        links.append(StatItem("🔗 Explorer", detail.blockchain_site))
    if detail.github:
        links.append(StatItem("💻 GitHub", detail.github))

    return DetailModel(
        coin_id=detail.id,
        name=detail.name,
        icon_url=detail.image,
        subtitle=f"{symbol} • Rank {rank}",
        price=format_currency(detail.current_price),
        change=f"{format_change(change)} (24h)",
        is_positive=change >= 0,
        stats=[
            StatItem("Market Cap", format_currency(detail.market_cap)),
            StatItem("24h Volume", format_currency(detail.total_volume)),
            StatItem(
                "Circulating Supply",
                f"{format_large_number(detail.circulating_supply)} {symbol}",
            ),
            StatItem("Total Supply", format_large_number(detail.total_supply)),
            StatItem("All-Time High", format_currency(detail.ath)),
            StatItem("All-Time Low", format_currency(detail.atl)),
        ],
        description=_summarize(detail.description),
        links=links,
    )


def present_global_stats(stats: GlobalStats) -> GlobalStatsModel:
    return GlobalStatsModel(
        total_market_cap=format_currency(stats.total_market_cap),
        total_volume=format_currency(stats.total_volume),
        btc_dominance=format_percent(stats.btc_dominance),
        active_cryptocurrencies=format_count(stats.active_cryptocurrencies),
    )


def format_move_alert(coin: Coin, signal: MoveSignal) -> str:
    verb = "surged" if signal.direction == MoveDirection.UP else "dropped"
    return f"{coin.symbol.upper()} {verb} {signal.percent_change:.2f}%!"
