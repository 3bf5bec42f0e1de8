"""Tests for API payload parsing into dataclasses."""

import pytest

from coinboard.types import Coin, CoinDetail, FilterMode, GlobalStats, SortKey, ViewState


MARKET_ITEM = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
    "current_price": 67000.5,
    "market_cap": 1_320_000_000_000,
    "market_cap_rank": 1,
    "total_volume": 25_000_000_000,
    "price_change_percentage_24h": -1.25,
    "circulating_supply": 19_700_000.0,
    "sparkline_in_7d": {"price": [66000, 66500.5, None, 67000]},
}


def test_view_state_defaults():
    """Test ViewState starts on all / market cap / no search."""
    state = ViewState()
    assert state.filter_mode == FilterMode.ALL
    assert state.sort_key == SortKey.MARKET_CAP
    assert state.search_text == ""


class TestCoin:
    """Tests for Coin.from_api."""

    def test_full_record(self):
        coin = Coin.from_api(MARKET_ITEM)
        assert coin.id == "bitcoin"
        assert coin.symbol == "btc"
        assert coin.current_price == 67000.5
        assert coin.market_cap_rank == 1
        assert coin.price_change_percentage_24h == -1.25
        # null sample dropped
        assert coin.sparkline == [66000.0, 66500.5, 67000.0]

    def test_null_change_treated_as_zero(self):
        item = dict(MARKET_ITEM, price_change_percentage_24h=None)
        assert Coin.from_api(item).price_change_percentage_24h == 0.0

    def test_optional_fields_absent(self):
        coin = Coin.from_api(
            {"id": "x", "name": "X", "symbol": "x", "current_price": 1}
        )
        assert coin.market_cap is None
        assert coin.market_cap_rank is None
        assert coin.circulating_supply is None
        assert coin.total_volume == 0.0
        assert coin.sparkline == []

    def test_missing_required_field(self):
        item = {k: v for k, v in MARKET_ITEM.items() if k != "id"}
        with pytest.raises(ValueError, match="id"):
            Coin.from_api(item)

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            Coin.from_api(["bitcoin"])  # type: ignore[arg-type]


class TestGlobalStats:
    """Tests for GlobalStats.from_api."""

    def test_parse_envelope(self):
        stats = GlobalStats.from_api(
            {
                "data": {
                    "active_cryptocurrencies": 14000,
                    "total_market_cap": {"usd": 2.4e12, "eur": 2.2e12},
                    "total_volume": {"usd": 9.1e10},
                    "market_cap_percentage": {"btc": 54.2, "eth": 16.8},
                }
            }
        )
        assert stats.total_market_cap == 2.4e12
        assert stats.total_volume == 9.1e10
        assert stats.btc_dominance == 54.2
        assert stats.active_cryptocurrencies == 14000

    def test_missing_envelope(self):
        with pytest.raises(ValueError):
            GlobalStats.from_api({"total_market_cap": {"usd": 1}})

    def test_missing_totals(self):
        with pytest.raises(ValueError):
            GlobalStats.from_api({"data": {"active_cryptocurrencies": 1}})


class TestCoinDetail:
    """Tests for CoinDetail.from_api."""

    def test_parse_nested_objects(self):
        detail = CoinDetail.from_api(
            {
                "id": "ethereum",
                "symbol": "eth",
                "name": "Ethereum",
                "market_cap_rank": 2,
                "image": {"large": "https://example.com/eth.png"},
                "description": {"en": "Ethereum is a platform."},
                "links": {
                    "homepage": ["", "https://ethereum.org"],
                    "blockchain_site": ["https://etherscan.io"],
                    "repos_url": {"github": []},
                },
                "market_data": {
                    "current_price": {"usd": 3100.0},
                    "price_change_percentage_24h": None,
                    "market_cap": {"usd": 3.7e11},
                    "total_volume": {"usd": 1.5e10},
                    "circulating_supply": 120_000_000,
                    "total_supply": None,
                    "ath": {"usd": 4878.26},
                    "atl": {"usd": 0.432979},
                },
            }
        )
        assert detail.image == "https://example.com/eth.png"
        assert detail.current_price == 3100.0
        assert detail.price_change_percentage_24h == 0.0
        assert detail.total_supply is None
        assert detail.homepage == "https://ethereum.org"
        assert detail.blockchain_site == "https://etherscan.io"
        assert detail.github is None
        assert detail.description == "Ethereum is a platform."

    def test_missing_market_data(self):
        with pytest.raises(ValueError, match="market_data"):
            CoinDetail.from_api({"id": "x", "name": "X", "symbol": "x"})
