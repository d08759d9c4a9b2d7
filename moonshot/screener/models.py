"""Record types flowing through the screener pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import AbstractSet, Literal

from pydantic import BaseModel, ConfigDict, Field

Identifier = str


class _Record(BaseModel):
    # Closed shape: unknown upstream fields are dropped, records never mutate
    model_config = ConfigDict(frozen=True, extra="ignore")


# --- Per-source partial records ---


class PriceRecord(_Record):
    id: Identifier
    symbol: str
    name: str
    current_price: float
    change_24h: float | None = None
    change_7d: float | None = None
    market_cap: float | None = None
    total_volume: float | None = None


class SentimentRecord(_Record):
    id: Identifier
    bullish_score: float | None = None  # 0-100
    bearish_score: float | None = None  # 0-100
    mention_volume: int | None = None


class OnchainRecord(_Record):
    id: Identifier
    liquidity: float | None = None
    holders: int | None = None


class CatalystAlert(_Record):
    title: str
    description: str
    created_at: datetime
    rank: int | None = None


class CatalystRecord(_Record):
    id: Identifier
    alerts: tuple[CatalystAlert, ...] = ()


AuxiliaryRecord = SentimentRecord | OnchainRecord | CatalystRecord


# --- Merged records ---


class UnifiedRecord(_Record):
    id: Identifier
    symbol: str
    name: str
    current_price: float

    change_24h: float | None = None
    change_7d: float | None = None
    market_cap: float | None = None
    total_volume: float | None = None

    bullish_score: float | None = None
    bearish_score: float | None = None
    mention_volume: int | None = None

    liquidity: float | None = None
    holders: int | None = None

    alerts: tuple[CatalystAlert, ...] = ()


class ScoredRecord(UnifiedRecord):
    score: float


# --- Caller-supplied options ---


class FilterCriteria(BaseModel):
    """Optional inclusive bounds; a blank or non-numeric bound is no constraint."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    min_price: float | str | None = Field(default=None, alias="minPrice")
    max_price: float | str | None = Field(default=None, alias="maxPrice")
    min_change_24h: float | str | None = Field(default=None, alias="min24hChange")
    max_change_24h: float | str | None = Field(default=None, alias="max24hChange")
    min_change_7d: float | str | None = Field(default=None, alias="min7dChange")
    max_change_7d: float | str | None = Field(default=None, alias="max7dChange")
    min_volume: float | str | None = Field(default=None, alias="minVolume")
    min_market_cap: float | str | None = Field(default=None, alias="minMarketCap")
    min_bullish: float | str | None = Field(default=None, alias="minBullish")
    max_bearish: float | str | None = Field(default=None, alias="maxBearish")
    min_liquidity: float | str | None = Field(default=None, alias="minLiquidity")
    min_holders: float | str | None = Field(default=None, alias="minHolders")
    text_query: str | None = Field(default=None, alias="textQuery")


class SortKey(str, Enum):
    NAME = "name"
    PRICE = "price"
    CHANGE_24H = "change24h"
    CHANGE_7D = "change7d"
    VOLUME = "volume"
    MARKET_CAP = "marketCap"
    BULLISH = "bullish"
    BEARISH = "bearish"
    MENTIONS = "mentions"
    LIQUIDITY = "liquidity"
    HOLDERS = "holders"
    ALERT_RANK = "alertRank"
    SCORE = "score"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: SortKey = SortKey.SCORE
    direction: SortDirection = SortDirection.DESC

    def toggled(self, key: SortKey) -> SortSpec:
        """Column-header click: flip direction on the same key, else new key descending."""
        if key == self.key:
            flipped = SortDirection.ASC if self.direction == SortDirection.DESC else SortDirection.DESC
            return SortSpec(key=key, direction=flipped)
        return SortSpec(key=key, direction=SortDirection.DESC)


class PinSet:
    """User-pinned (watchlisted) identifiers.

    Single writer; readers take a frozen snapshot so they never observe a
    half-applied toggle.
    """

    def __init__(self, ids: AbstractSet[Identifier] | None = None) -> None:
        self._ids: frozenset[Identifier] = frozenset(ids or ())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def snapshot(self) -> frozenset[Identifier]:
        return self._ids

    def add(self, identifier: Identifier) -> None:
        self._ids = self._ids | {identifier}

    def remove(self, identifier: Identifier) -> None:
        self._ids = self._ids - {identifier}

    def toggle(self, identifier: Identifier) -> bool:
        """Flip membership; returns True if the identifier is now pinned."""
        if identifier in self._ids:
            self.remove(identifier)
            return False
        self.add(identifier)
        return True

    def clear(self) -> None:
        self._ids = frozenset()


# --- Pipeline outcomes ---

Status = Literal["ok", "failed"]


@dataclass
class SourceResult:
    """Outcome of one auxiliary fetch; a failure carries no records."""

    name: str
    records: list = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FetchResult:
    status: Status = "ok"
    records: list[UnifiedRecord] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> FetchResult:
        return cls(status="failed", error=error)


@dataclass
class ScreenerView:
    """Ordered, filtered, scored rows. ``failed`` means "no data", not "no matches"."""

    status: Status = "ok"
    records: list[ScoredRecord] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "error": self.error,
            "failed_sources": list(self.failed_sources),
            "count": len(self.records),
            "records": [r.model_dump(mode="json") for r in self.records],
        }
