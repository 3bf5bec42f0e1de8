"""Persisted set of starred coin ids."""

from __future__ import annotations

import json
import logging
from typing import Dict, FrozenSet

from coinboard.preferences import PreferencesDB

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"


class FavoritesStore:
    """Favorite coin ids backed by the preferences table.

    Membership lives in memory for fast lookups during rendering and is
    written through to storage on every mutation. The stored form is a JSON
    list in insertion order.
    """

    def __init__(self, db: PreferencesDB) -> None:
        self.db = db
        # dict keeps insertion order for a stable serialized form
        self._ids: Dict[str, None] = {}

    async def load(self) -> FrozenSet[str]:
        """Load favorites from storage.

        Absent or corrupt values load as an empty set rather than failing.
        """
        raw = await self.db.get(FAVORITES_KEY)
        self._ids = {}
        if raw is None:
            return self.all()

        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning(f"Discarding corrupt favorites value: {exc}")
            return self.all()

        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.warning("Discarding favorites value that is not a list of ids")
            return self.all()

        self._ids = dict.fromkeys(data)
        return self.all()

    async def toggle(self, coin_id: str) -> bool:
        """Add or remove *coin_id*. Returns the new membership state."""
        if coin_id in self._ids:
            del self._ids[coin_id]
            is_favorite = False
        else:
            self._ids[coin_id] = None
            is_favorite = True
        await self._save()
        return is_favorite

    def is_favorite(self, coin_id: str) -> bool:
        return coin_id in self._ids

    def all(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    async def clear(self) -> None:
        self._ids = {}
        await self._save()

    def serialize(self) -> str:
        return json.dumps(list(self._ids))

    async def _save(self) -> None:
        await self.db.set(FAVORITES_KEY, self.serialize())

    def __len__(self) -> int:
        return len(self._ids)
