"""Shared types for the application."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FilterMode(str, Enum):
    """Grid filter selector."""

    ALL = "all"
    FAVORITES = "favorites"
    GAINERS = "gainers"
    LOSERS = "losers"


class SortKey(str, Enum):
    """Grid sort selector. Every key sorts descending."""

    MARKET_CAP = "market_cap"
    PRICE = "price"
    CHANGE = "change"
    VOLUME = "volume"


def _to_float(value: Any) -> Optional[float]:
    """Coerce an API number to float, returning None for null or garbage."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    return result if math.isfinite(result) else None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _first_link(values: Any) -> Optional[str]:
    """Return the first non-empty string of a CoinGecko link list."""
    if isinstance(values, str):
        return values or None
    if isinstance(values, list):
        for value in values:
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def _usd(values: Any, currency: str = "usd") -> Optional[float]:
    if not isinstance(values, dict):
        return None
    return _to_float(values.get(currency))


@dataclass
class Coin:
    """One tracked asset from a market snapshot."""

    id: str
    name: str
    symbol: str
    current_price: float
    image: str = ""
    price_change_percentage_24h: float = 0.0
    market_cap: Optional[float] = None
    total_volume: float = 0.0
    market_cap_rank: Optional[int] = None
    circulating_supply: Optional[float] = None
    sparkline: List[float] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Coin":
        """Build a Coin from a ``/coins/markets`` item.

        Raises:
            ValueError: if the item is not an object or lacks a required key.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected coin object, got {type(data).__name__}")
        missing = [key for key in ("id", "name", "symbol", "current_price") if key not in data]
        if missing:
            raise ValueError(f"Coin record missing fields: {', '.join(missing)}")

        sparkline_data = data.get("sparkline_in_7d")
        prices: List[float] = []
        if isinstance(sparkline_data, dict) and isinstance(sparkline_data.get("price"), list):
            prices = [p for p in (_to_float(v) for v in sparkline_data["price"]) if p is not None]

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            symbol=str(data["symbol"]),
            current_price=_to_float(data["current_price"]) or 0.0,
            image=str(data.get("image") or ""),
            price_change_percentage_24h=_to_float(data.get("price_change_percentage_24h")) or 0.0,
            market_cap=_to_float(data.get("market_cap")),
            total_volume=_to_float(data.get("total_volume")) or 0.0,
            market_cap_rank=_to_int(data.get("market_cap_rank")),
            circulating_supply=_to_float(data.get("circulating_supply")),
            sparkline=prices,
        )


@dataclass
class GlobalStats:
    """Aggregate market figures from the ``/global`` endpoint."""

    total_market_cap: float
    total_volume: float
    btc_dominance: float
    active_cryptocurrencies: int

    @classmethod
    def from_api(cls, payload: Dict[str, Any], currency: str = "usd") -> "GlobalStats":
        """Build GlobalStats from the ``data`` envelope of ``/global``."""
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise ValueError("Global payload missing 'data' envelope")
        data = payload["data"]

        total_market_cap = _usd(data.get("total_market_cap"), currency)
        total_volume = _usd(data.get("total_volume"), currency)
        btc_dominance = _usd(data.get("market_cap_percentage"), "btc")
        active = _to_int(data.get("active_cryptocurrencies"))
        if total_market_cap is None or total_volume is None or btc_dominance is None or active is None:
            raise ValueError("Global payload missing market totals")

        return cls(
            total_market_cap=total_market_cap,
            total_volume=total_volume,
            btc_dominance=btc_dominance,
            active_cryptocurrencies=active,
        )


@dataclass
class CoinDetail:
    """Full record for a single coin from ``/coins/{id}``."""

    id: str
    name: str
    symbol: str
    image: str = ""
    market_cap_rank: Optional[int] = None
    current_price: Optional[float] = None
    price_change_percentage_24h: float = 0.0
    market_cap: Optional[float] = None
    total_volume: Optional[float] = None
    circulating_supply: Optional[float] = None
    total_supply: Optional[float] = None
    ath: Optional[float] = None
    atl: Optional[float] = None
    description: str = ""
    homepage: Optional[str] = None
    blockchain_site: Optional[str] = None
    github: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], currency: str = "usd") -> "CoinDetail":
        if not isinstance(data, dict):
            raise ValueError(f"Expected coin detail object, got {type(data).__name__}")
        missing = [key for key in ("id", "name", "symbol", "market_data") if key not in data]
        if missing:
            raise ValueError(f"Coin detail missing fields: {', '.join(missing)}")

        market = data["market_data"]
        if not isinstance(market, dict):
            raise ValueError("Coin detail 'market_data' is not an object")

        image = data.get("image")
        description = data.get("description")
        links = data.get("links") if isinstance(data.get("links"), dict) else {}
        repos = links.get("repos_url") if isinstance(links.get("repos_url"), dict) else {}

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            symbol=str(data["symbol"]),
            image=str(image.get("large") or "") if isinstance(image, dict) else "",
            market_cap_rank=_to_int(data.get("market_cap_rank")),
            current_price=_usd(market.get("current_price"), currency),
            price_change_percentage_24h=_to_float(market.get("price_change_percentage_24h")) or 0.0,
            market_cap=_usd(market.get("market_cap"), currency),
            total_volume=_usd(market.get("total_volume"), currency),
            circulating_supply=_to_float(market.get("circulating_supply")),
            total_supply=_to_float(market.get("total_supply")),
            ath=_usd(market.get("ath"), currency),
            atl=_usd(market.get("atl"), currency),
            description=str(description.get("en") or "") if isinstance(description, dict) else "",
            homepage=_first_link(links.get("homepage")),
            blockchain_site=_first_link(links.get("blockchain_site")),
            github=_first_link(repos.get("github")),
        )


@dataclass
class ViewState:
    """Current grid selectors. Lives only for the session."""

    filter_mode: FilterMode = FilterMode.ALL
    sort_key: SortKey = SortKey.MARKET_CAP
    search_text: str = ""
