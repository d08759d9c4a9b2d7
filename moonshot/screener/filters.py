"""Range and text predicates over unified records."""

from __future__ import annotations

import math
from typing import Callable, Iterable, TypeVar

from moonshot.screener.models import FilterCriteria, UnifiedRecord

R = TypeVar("R", bound=UnifiedRecord)

# (criteria field, record accessor, is_lower_bound)
# A missing record field compares as 0, so e.g. unknown volume fails minVolume > 0.
_BOUNDS: list[tuple[str, Callable[[UnifiedRecord], float], bool]] = [
    ("min_price", lambda r: r.current_price, True),
    ("max_price", lambda r: r.current_price, False),
    ("min_change_24h", lambda r: r.change_24h or 0.0, True),
    ("max_change_24h", lambda r: r.change_24h or 0.0, False),
    ("min_change_7d", lambda r: r.change_7d or 0.0, True),
    ("max_change_7d", lambda r: r.change_7d or 0.0, False),
    ("min_volume", lambda r: r.total_volume or 0.0, True),
    ("min_market_cap", lambda r: r.market_cap or 0.0, True),
    ("min_bullish", lambda r: r.bullish_score or 0.0, True),
    ("max_bearish", lambda r: r.bearish_score or 0.0, False),
    ("min_liquidity", lambda r: r.liquidity or 0.0, True),
    ("min_holders", lambda r: r.holders or 0, True),
]


def parse_bound(value: float | str | None) -> float | None:
    """Return a finite float, or None when the bound should be ignored."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _text_matches(record: UnifiedRecord, term: str) -> bool:
    return term in record.name.lower() or term in record.symbol.lower()


def matches(
    record: UnifiedRecord,
    criteria: FilterCriteria,
    search_text: str | None = None,
) -> bool:
    """True when the record passes the text predicate and every active bound.

    ``search_text`` takes precedence over ``criteria.text_query``.
    """
    text = search_text if search_text is not None else criteria.text_query
    term = (text or "").strip().lower()
    if term and not _text_matches(record, term):
        return False

    for field_name, accessor, is_lower in _BOUNDS:
        bound = parse_bound(getattr(criteria, field_name))
        if bound is None:
            continue
        value = accessor(record)
        if is_lower and value < bound:
            return False
        if not is_lower and value > bound:
            return False

    return True


def apply_filters(
    records: Iterable[R],
    criteria: FilterCriteria,
    search_text: str | None = None,
) -> list[R]:
    return [r for r in records if matches(r, criteria, search_text)]
