"""Search, filter and sort rules that turn a snapshot into the visible grid."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from coinboard.favorites import FavoritesStore
from coinboard.types import Coin, FilterMode, SortKey, ViewState

MOVERS_LIMIT = 20

_SORT_FIELDS: Dict[SortKey, Callable[[Coin], float]] = {
    SortKey.MARKET_CAP: lambda coin: coin.market_cap or 0.0,
    SortKey.PRICE: lambda coin: coin.current_price or 0.0,
    SortKey.CHANGE: lambda coin: coin.price_change_percentage_24h or 0.0,
    SortKey.VOLUME: lambda coin: coin.total_volume or 0.0,
}


def search_coins(snapshot: Sequence[Coin], query: str) -> List[Coin]:
    """Case-insensitive substring match on name or symbol, in snapshot order."""
    needle = query.lower()
    return [
        coin for coin in snapshot
        if needle in coin.name.lower() or needle in coin.symbol.lower()
    ]


def filter_coins(
    snapshot: Sequence[Coin],
    mode: FilterMode,
    favorites: FavoritesStore,
) -> List[Coin]:
    """Apply a filter mode.

    Gainers and losers come back already ordered by 24h change and capped at
    ``MOVERS_LIMIT``; the other modes preserve snapshot order.
    """
    if mode == FilterMode.FAVORITES:
        return [coin for coin in snapshot if favorites.is_favorite(coin.id)]
    if mode == FilterMode.GAINERS:
        gainers = [coin for coin in snapshot if coin.price_change_percentage_24h > 0]
        gainers.sort(key=lambda coin: coin.price_change_percentage_24h, reverse=True)
        return gainers[:MOVERS_LIMIT]
    if mode == FilterMode.LOSERS:
        losers = [coin for coin in snapshot if coin.price_change_percentage_24h < 0]
        losers.sort(key=lambda coin: coin.price_change_percentage_24h)
        return losers[:MOVERS_LIMIT]
    return list(snapshot)


def sort_coins(coins: Sequence[Coin], key: SortKey) -> List[Coin]:
    """Sort descending by *key*. Stable, so ties keep their incoming order."""
    return sorted(coins, key=_SORT_FIELDS[key], reverse=True)


def apply_view(
    snapshot: Sequence[Coin],
    state: ViewState,
    favorites: FavoritesStore,
) -> List[Coin]:
    """Return the ordered coins to display for *state*.

    An active search replaces filtering and sorting entirely. Otherwise the
    filter runs first and the sort key is always applied on top, so a
    gainers/losers view is re-ordered unless the sort key is ``change``.
    """
    query = state.search_text.strip()
    if query:
        return search_coins(snapshot, query)

    coins = filter_coins(snapshot, state.filter_mode, favorites)
    return sort_coins(coins, state.sort_key)
