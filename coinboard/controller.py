"""Dashboard state owner: applies user commands and builds render models."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from coinboard.coingecko import CoinGeckoClient, MarketDataError
from coinboard.favorites import FavoritesStore
from coinboard.preferences import Theme, ThemeStore
from coinboard.presenter import (
    CardModel,
    DetailModel,
    GlobalStatsModel,
    format_move_alert,
    present_card,
    present_detail,
    present_global_stats,
)
from coinboard.price_memory import MoveDirection, PriceMemory
from coinboard.types import Coin, FilterMode, GlobalStats, SortKey, ViewState
from coinboard.view_pipeline import apply_view

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch crypto data"
DETAIL_FAILED_MESSAGE = "Failed to load coin details"


class LoadStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    """Transient user-visible message."""

    message: str
    level: NotificationLevel = NotificationLevel.SUCCESS


# --- Commands ---


@dataclass(frozen=True)
class SetFilter:
    mode: FilterMode


@dataclass(frozen=True)
class SetSort:
    key: SortKey


@dataclass(frozen=True)
class SetSearch:
    text: str


@dataclass(frozen=True)
class ToggleFavorite:
    coin_id: str


@dataclass(frozen=True)
class ToggleTheme:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class ShowDetail:
    coin_id: str


@dataclass(frozen=True)
class CloseDetail:
    pass


Command = Union[
    SetFilter, SetSort, SetSearch, ToggleFavorite, ToggleTheme, Refresh, ShowDetail, CloseDetail
]


@dataclass
class AppState:
    """Everything the dashboard shows, owned by the controller."""

    coins: List[Coin] = field(default_factory=list)
    global_stats: Optional[GlobalStats] = None
    view: ViewState = field(default_factory=ViewState)
    status: LoadStatus = LoadStatus.LOADING
    last_updated: Optional[datetime] = None
    detail: Optional[DetailModel] = None


@dataclass
class RenderModel:
    """A complete frame for a renderer."""

    status: LoadStatus
    theme: Theme
    view: ViewState
    cards: List[CardModel] = field(default_factory=list)
    global_stats: Optional[GlobalStatsModel] = None
    detail: Optional[DetailModel] = None
    notifications: List[Notification] = field(default_factory=list)
    last_updated: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        """True when data is loaded but nothing matches the current view."""
        return self.status == LoadStatus.READY and not self.cards


class DashboardController:
    """Single writer for dashboard state.

    Refreshes are serialized: a refresh triggered while another is in flight
    waits for it and then fetches again, so the newest request always lands
    last.
    """

    def __init__(
        self,
        client: CoinGeckoClient,
        favorites: FavoritesStore,
        theme: ThemeStore,
        price_memory: Optional[PriceMemory] = None,
    ) -> None:
        self.client = client
        self.favorites = favorites
        self.theme = theme
        self.price_memory = price_memory or PriceMemory()
        self.state = AppState()

        self._pending: List[Notification] = []
        self._refresh_lock = asyncio.Lock()

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        self._pending.append(Notification(message=message, level=level))

    def drain_notifications(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending

    async def dispatch(self, command: Command) -> RenderModel:
        """Apply a user command and return the resulting frame."""
        await self.apply(command)
        return self.render()

    async def apply(self, command: Command) -> None:
        """Apply a user command without rendering.

        Queued notifications stay pending until the next `render`.
        """
        view = self.state.view
        if isinstance(command, SetFilter):
            view.filter_mode = command.mode
        elif isinstance(command, SetSort):
            view.sort_key = command.key
        elif isinstance(command, SetSearch):
            view.search_text = command.text
        elif isinstance(command, ToggleFavorite):
            added = await self.favorites.toggle(command.coin_id)
            self.notify("Added to favorites" if added else "Removed from favorites")
        elif isinstance(command, ToggleTheme):
            await self.theme.toggle()
        elif isinstance(command, Refresh):
            self.notify("Refreshing data...")
            await self.refresh()
        elif isinstance(command, ShowDetail):
            await self.show_detail(command.coin_id)
        elif isinstance(command, CloseDetail):
            self.state.detail = None
        else:
            raise TypeError(f"Unknown command: {command!r}")

    async def refresh(self) -> bool:
        """Fetch a new snapshot and swap it in.

        Returns True on success. Failures keep whatever was shown before;
        only a failed first load moves the dashboard to the failed state.
        """
        async with self._refresh_lock:
            try:
                snapshot = await self.client.fetch_snapshot()
            except MarketDataError as exc:
                logger.warning(f"Snapshot refresh failed: {exc}")
                self.notify(FETCH_FAILED_MESSAGE, NotificationLevel.ERROR)
                if self.state.last_updated is None:
                    self.state.status = LoadStatus.FAILED
                return False

            self.state.coins = snapshot.coins
            self.state.global_stats = snapshot.global_stats
            self.state.last_updated = snapshot.fetched_at
            self.state.status = LoadStatus.READY
            logger.info(f"Loaded {len(snapshot.coins)} coins")
            return True

    async def show_detail(self, coin_id: str) -> Optional[DetailModel]:
        try:
            detail = await self.client.fetch_coin_detail(coin_id)
        except MarketDataError as exc:
            logger.warning(f"Detail fetch for {coin_id} failed: {exc}")
            self.notify(DETAIL_FAILED_MESSAGE, NotificationLevel.ERROR)
            self.state.detail = None
            return None

        self.state.detail = present_detail(detail)
        return self.state.detail

    def visible_coins(self) -> List[Coin]:
        return apply_view(self.state.coins, self.state.view, self.favorites)

    def render(self) -> RenderModel:
        """Build a frame from the current state.

        Presenting a card observes its price, so move alerts are raised here.
        """
        cards: List[CardModel] = []
        if self.state.status == LoadStatus.READY:
            for coin in self.visible_coins():
                signal = self.price_memory.observe(coin.id, coin.current_price)
                if signal:
                    level = (
                        NotificationLevel.SUCCESS
                        if signal.direction == MoveDirection.UP
                        else NotificationLevel.WARNING
                    )
                    self.notify(format_move_alert(coin, signal), level)
                cards.append(present_card(coin, self.favorites.is_favorite(coin.id), signal))

        stats = self.state.global_stats
        return RenderModel(
            status=self.state.status,
            theme=self.theme.theme,
            view=ViewState(
                filter_mode=self.state.view.filter_mode,
                sort_key=self.state.view.sort_key,
                search_text=self.state.view.search_text,
            ),
            cards=cards,
            global_stats=present_global_stats(stats) if stats else None,
            detail=self.state.detail,
            notifications=self.drain_notifications(),
            last_updated=self.state.last_updated,
        )
