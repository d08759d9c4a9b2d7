"""Pin-first ordering with a caller-chosen sort key and direction."""

from __future__ import annotations

from functools import lru_cache
from typing import AbstractSet, Callable, Sequence

from pyuca import Collator

from moonshot.screener.models import (
    Identifier,
    ScoredRecord,
    SortDirection,
    SortKey,
    SortSpec,
)


def alert_rank(record: ScoredRecord) -> float:
    """Rank of the first catalyst alert, 0 when there is none.

    Lower rank is a more prominent catalyst, but it sorts as a plain number.
    """
    if not record.alerts:
        return 0
    return record.alerts[0].rank or 0


_NUMERIC_KEYS: dict[SortKey, Callable[[ScoredRecord], float]] = {
    SortKey.PRICE: lambda r: r.current_price,
    SortKey.CHANGE_24H: lambda r: r.change_24h or 0.0,
    SortKey.CHANGE_7D: lambda r: r.change_7d or 0.0,
    SortKey.VOLUME: lambda r: r.total_volume or 0.0,
    SortKey.MARKET_CAP: lambda r: r.market_cap or 0.0,
    SortKey.BULLISH: lambda r: r.bullish_score or 0.0,
    SortKey.BEARISH: lambda r: r.bearish_score or 0.0,
    SortKey.MENTIONS: lambda r: r.mention_volume or 0,
    SortKey.LIQUIDITY: lambda r: r.liquidity or 0.0,
    SortKey.HOLDERS: lambda r: r.holders or 0,
    SortKey.ALERT_RANK: alert_rank,
    SortKey.SCORE: lambda r: r.score,
}


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # DUCET table, loaded once
    return Collator()


def _name_key(record: ScoredRecord) -> tuple:
    return _collator().sort_key(record.name)


def sort_records(
    records: Sequence[ScoredRecord],
    pins: AbstractSet[Identifier],
    sort_spec: SortSpec,
) -> list[ScoredRecord]:
    """Return a new list: pinned rows first, then by ``sort_spec``.

    Both passes are stable, so ties keep their input order and pin priority
    ignores the direction.
    """
    key_fn = _name_key if sort_spec.key == SortKey.NAME else _NUMERIC_KEYS[sort_spec.key]
    ordered = sorted(records, key=key_fn, reverse=sort_spec.direction == SortDirection.DESC)
    ordered.sort(key=lambda r: r.id not in pins)
    return ordered
