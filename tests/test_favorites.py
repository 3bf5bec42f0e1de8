"""Tests for the persisted favorites store."""

import json
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from coinboard.favorites import FAVORITES_KEY, FavoritesStore
from coinboard.preferences import PreferencesDB


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test_preferences.db"


@pytest_asyncio.fixture
async def db(temp_db_path):
    """Create and connect to a test database."""
    database = PreferencesDB(db_path=temp_db_path)
    await database.connect()
    yield database
    await database.close()


@pytest.mark.asyncio
async def test_load_absent_is_empty(db):
    """Test that a fresh store has no favorites."""
    store = FavoritesStore(db)
    assert await store.load() == frozenset()
    assert store.is_favorite("bitcoin") is False


@pytest.mark.asyncio
async def test_toggle_returns_membership(db):
    """Test toggle adds then removes."""
    store = FavoritesStore(db)
    await store.load()

    assert await store.toggle("bitcoin") is True
    assert store.is_favorite("bitcoin")
    assert store.all() == frozenset({"bitcoin"})

    assert await store.toggle("bitcoin") is False
    assert not store.is_favorite("bitcoin")
    assert len(store) == 0


@pytest.mark.asyncio
async def test_favorites_survive_restart(db):
    """Test that toggles are written through and reloaded."""
    store = FavoritesStore(db)
    await store.load()
    await store.toggle("bitcoin")
    await store.toggle("solana")

    reloaded = FavoritesStore(db)
    assert await reloaded.load() == frozenset({"bitcoin", "solana"})
    assert json.loads(await db.get(FAVORITES_KEY)) == ["bitcoin", "solana"]


@pytest.mark.asyncio
async def test_double_toggle_leaves_storage_unchanged(db):
    """Test that toggling the same id twice is a net no-op when serialized."""
    await db.set(FAVORITES_KEY, json.dumps(["ethereum", "bitcoin"]))
    store = FavoritesStore(db)
    await store.load()
    before = await db.get(FAVORITES_KEY)

    await store.toggle("solana")
    await store.toggle("solana")

    assert await db.get(FAVORITES_KEY) == before
    assert store.serialize() == before


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"bitcoin": True}),
        json.dumps(["bitcoin", 42]),
        "null",
    ],
)
async def test_corrupt_value_loads_empty(db, raw):
    """Test that corrupt persisted data degrades to an empty set."""
    await db.set(FAVORITES_KEY, raw)
    store = FavoritesStore(db)
    assert await store.load() == frozenset()

    # store stays usable and overwrites the bad value
    await store.toggle("bitcoin")
    assert json.loads(await db.get(FAVORITES_KEY)) == ["bitcoin"]


@pytest.mark.asyncio
async def test_clear(db):
    """Test clearing all favorites."""
    store = FavoritesStore(db)
    await store.toggle("bitcoin")
    await store.clear()
    assert store.all() == frozenset()
    assert await db.get(FAVORITES_KEY) == "[]"
