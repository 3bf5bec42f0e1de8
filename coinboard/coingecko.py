"""Async client for the public CoinGecko REST API."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from coinboard.types import Coin, CoinDetail, GlobalStats

logger = logging.getLogger(__name__)

COINGECKO_API_BASE = "https://api.coingecko.com/api/v3"


class MarketDataError(Exception):
    """Base class for failures fetching or decoding market data."""


class TransportError(MarketDataError):
    """Network failure, timeout or non-success HTTP status."""


class ParseError(MarketDataError):
    """Response body was not valid JSON or lacked expected fields."""


@dataclass
class MarketSnapshot:
    """A complete refresh: coins and global stats fetched together."""

    coins: List[Coin]
    global_stats: GlobalStats
    fetched_at: datetime


class CoinGeckoClient:
    """Fetches market snapshots and coin details.

    The underlying ``httpx.AsyncClient`` is created lazily and reused across
    refreshes; call :meth:`close` when done.
    """

    def __init__(
        self,
        base_url: str = COINGECKO_API_BASE,
        vs_currency: str = "usd",
        per_page: int = 50,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.vs_currency = vs_currency
        self.per_page = per_page
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {path} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"GET {path} returned invalid JSON: {exc}") from exc

    async def fetch_markets(self) -> List[Coin]:
        """Fetch the top coins by market cap with 7-day sparklines."""
        params = {
            "vs_currency": self.vs_currency,
            "order": "market_cap_desc",
            "per_page": self.per_page,
            "page": 1,
            "sparkline": "true",
            "price_change_percentage": "24h",
        }
        payload = await self._get_json("/coins/markets", params)
        if not isinstance(payload, list):
            raise ParseError(f"Markets response is not a list: {type(payload).__name__}")

        try:
            return [Coin.from_api(item) for item in payload]
        except ValueError as exc:
            raise ParseError(str(exc)) from exc

    async def fetch_global(self) -> GlobalStats:
        payload = await self._get_json("/global")
        try:
            return GlobalStats.from_api(payload, self.vs_currency)
        except ValueError as exc:
            raise ParseError(str(exc)) from exc

    async def fetch_snapshot(self) -> MarketSnapshot:
        """Fetch markets and global stats concurrently.

        Either call failing fails the whole snapshot, so callers never see a
        mix of old and new data.
        """
        coins, global_stats = await asyncio.gather(
            self.fetch_markets(),
            self.fetch_global(),
        )
        logger.debug(f"Fetched snapshot with {len(coins)} coins")
        return MarketSnapshot(
            coins=coins,
            global_stats=global_stats,
            fetched_at=datetime.now(timezone.utc),
        )

    async def fetch_coin_detail(self, coin_id: str) -> CoinDetail:
        """Fetch one coin without localization, tickers, community or developer data."""
        params = {
            "localization": "false",
            "tickers": "false",
            "community_data": "false",
            "developer_data": "false",
        }
        payload = await self._get_json(f"/coins/{coin_id}", params)
        try:
            return CoinDetail.from_api(payload, self.vs_currency)
        except ValueError as exc:
            raise ParseError(str(exc)) from exc
