from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Sequence

import pytest

from moonshot.screener.models import (
    CatalystAlert,
    CatalystRecord,
    OnchainRecord,
    PriceRecord,
    ScoredRecord,
    SentimentRecord,
    UnifiedRecord,
)
from moonshot.screener.pipeline import ScreenerPipeline
from moonshot.sources.errors import AuxiliarySourceError, PriceSourceError


@pytest.fixture
def record_factory() -> Callable[..., UnifiedRecord]:
    def _factory(id: str = "bitcoin", **overrides: object) -> UnifiedRecord:
        payload: dict[str, object] = {
            "id": id,
            "symbol": overrides.pop("symbol", id[:3]),
            "name": overrides.pop("name", id.title()),
            "current_price": overrides.pop("current_price", 100.0),
        }
        payload.update(overrides)
        return UnifiedRecord(**payload)  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def scored_factory(record_factory) -> Callable[..., ScoredRecord]:
    def _factory(id: str = "bitcoin", score: float = 0.0, **overrides: object) -> ScoredRecord:
        return ScoredRecord(**dict(record_factory(id, **overrides)), score=score)

    return _factory


def make_alert(rank: int | None) -> CatalystAlert:
    return CatalystAlert(
        title="trending",
        description="on the trending list",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        rank=rank,
    )


class FakeSources:
    """In-memory stand-ins for the price/auxiliary/search collaborators."""

    def __init__(self) -> None:
        self.prices: dict[str, PriceRecord] = {
            "bitcoin": PriceRecord(
                id="bitcoin", symbol="btc", name="Bitcoin", current_price=60_000.0,
                change_24h=2.0, change_7d=5.0, market_cap=1.2e12, total_volume=3e10,
            ),
            "solana": PriceRecord(
                id="solana", symbol="sol", name="Solana", current_price=150.0,
                change_24h=10.0, change_7d=-2.0, market_cap=7e10, total_volume=4e9,
            ),
            "dogecoin": PriceRecord(
                id="dogecoin", symbol="doge", name="Dogecoin", current_price=0.12,
                change_24h=-5.0, change_7d=1.0,
            ),
        }
        self.search_results: dict[str, list[str]] = {}
        self.fail_prices = False
        self.fail: set[str] = set()
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    async def fetch_prices(self, ids: Sequence[str]) -> list[PriceRecord]:
        self.calls.append(("prices", tuple(ids)))
        if self.fail_prices:
            raise PriceSourceError("prices", "Failed to fetch prices: 429 Too Many Requests", 429)
        return [self.prices[i] for i in ids if i in self.prices]

    async def fetch_sentiment(self, ids: Sequence[str]) -> list[SentimentRecord]:
        self.calls.append(("sentiment", tuple(ids)))
        if "sentiment" in self.fail:
            raise AuxiliarySourceError("sentiment", "sentiment down")
        return [SentimentRecord(id=i, bullish_score=60, bearish_score=20, mention_volume=100) for i in ids]

    async def fetch_onchain(self, ids: Sequence[str]) -> list[OnchainRecord]:
        self.calls.append(("onchain", tuple(ids)))
        if "onchain" in self.fail:
            raise AuxiliarySourceError("onchain", "onchain down")
        return [OnchainRecord(id=i, liquidity=1e6, holders=20_000) for i in ids]

    async def fetch_catalysts(self, ids: Sequence[str]) -> list[CatalystRecord]:
        self.calls.append(("catalysts", tuple(ids)))
        if "catalysts" in self.fail:
            raise AuxiliarySourceError("catalysts", "trending down")
        return [CatalystRecord(id=i, alerts=(make_alert(1),) if i == "solana" else ()) for i in ids]

    async def search(self, query: str) -> list[str]:
        self.calls.append(("search", (query,)))
        if "search" in self.fail:
            raise AuxiliarySourceError("search", "search down")
        return self.search_results.get(query, [])

    def pipeline(self, search_limit: int = 10) -> ScreenerPipeline:
        return ScreenerPipeline(
            self.fetch_prices,
            {
                "sentiment": self.fetch_sentiment,
                "onchain": self.fetch_onchain,
                "catalysts": self.fetch_catalysts,
            },
            self.search,
            search_limit=search_limit,
        )


@pytest.fixture
def fake_sources() -> FakeSources:
    return FakeSources()
