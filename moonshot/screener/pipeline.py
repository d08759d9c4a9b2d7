"""Screener pipeline: fetch -> merge -> filter -> score -> sort."""

from __future__ import annotations

import asyncio
import logging
from typing import AbstractSet, Awaitable, Callable, Sequence

from moonshot.screener.filters import apply_filters
from moonshot.screener.merger import merge_records
from moonshot.screener.models import (
    AuxiliaryRecord,
    FetchResult,
    FilterCriteria,
    Identifier,
    PriceRecord,
    ScreenerView,
    SortSpec,
    SourceResult,
)
from moonshot.screener.ordering import sort_records
from moonshot.screener.scorer import score_records
from moonshot.sources.errors import SourceError

logger = logging.getLogger(__name__)

PriceFetcher = Callable[[Sequence[Identifier]], Awaitable[list[PriceRecord]]]
AuxiliaryFetcher = Callable[[Sequence[Identifier]], Awaitable[list[AuxiliaryRecord]]]
SearchFn = Callable[[str], Awaitable[list[Identifier]]]


def _dedupe(ids: Sequence[Identifier]) -> list[Identifier]:
    seen: dict[Identifier, None] = {}
    for i in ids:
        i = i.strip()
        if i:
            seen.setdefault(i, None)
    return list(seen)


def build_view(
    fetched: FetchResult,
    risk_bias: float,
    criteria: FilterCriteria,
    search_text: str | None,
    sort_spec: SortSpec,
    pins: AbstractSet[Identifier],
) -> ScreenerView:
    """Pure second half of a refresh; re-run it when only the options change."""
    if fetched.status == "failed":
        return ScreenerView(status="failed", error=fetched.error)

    kept = apply_filters(fetched.records, criteria, search_text)
    scored = score_records(kept, risk_bias)
    return ScreenerView(
        records=sort_records(scored, pins, sort_spec),
        failed_sources=list(fetched.failed_sources),
    )


class ScreenerPipeline:
    """Runs one screener refresh against injected source collaborators.

    The price fetcher is authoritative and its failure fails the run. The
    auxiliary fetchers are best effort: each failure is logged and merged as
    an empty result.
    """

    def __init__(
        self,
        fetch_prices: PriceFetcher,
        auxiliary: dict[str, AuxiliaryFetcher],
        search: SearchFn | None = None,
        *,
        search_limit: int = 10,
    ) -> None:
        self._fetch_prices = fetch_prices
        self._auxiliary = dict(auxiliary)
        self._search = search
        self._search_limit = search_limit

    async def _fetch_auxiliary(self, ids: list[Identifier]) -> list[SourceResult]:
        names = list(self._auxiliary)
        outcomes = await asyncio.gather(
            *(self._auxiliary[name](ids) for name in names),
            return_exceptions=True,
        )

        results: list[SourceResult] = []
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning("%s source failed, merging without it: %s", name, outcome)
                results.append(SourceResult(name=name, error=str(outcome) or type(outcome).__name__))
            else:
                results.append(SourceResult(name=name, records=list(outcome)))
        return results

    async def fetch(self, identifiers: Sequence[Identifier]) -> FetchResult:
        ids = _dedupe(identifiers)
        if not ids:
            return FetchResult()

        try:
            prices = await self._fetch_prices(ids)
        except SourceError as exc:
            logger.error("Price source failed, no data for this refresh: %s", exc)
            return FetchResult.failed(str(exc))
        except Exception as exc:
            logger.exception("Price source raised unexpectedly, no data for this refresh")
            return FetchResult.failed(f"Failed to fetch prices: {str(exc) or type(exc).__name__}")

        if not prices:
            return FetchResult()

        price_ids = _dedupe([p.id for p in prices])
        aux_results = await self._fetch_auxiliary(price_ids)
        merged = merge_records(prices, *(r.records for r in aux_results))

        failed = [r.name for r in aux_results if not r.ok]
        logger.info(
            "Fetched %d assets (%d requested), failed auxiliary sources: %s",
            len(merged), len(ids), ", ".join(failed) or "none",
        )
        return FetchResult(records=merged, failed_sources=failed)

    async def refresh(
        self,
        identifiers: Sequence[Identifier],
        risk_bias: float,
        criteria: FilterCriteria,
        search_text: str | None,
        sort_spec: SortSpec,
        pins: AbstractSet[Identifier],
    ) -> ScreenerView:
        fetched = await self.fetch(identifiers)
        return build_view(fetched, risk_bias, criteria, search_text, sort_spec, pins)

    async def search(self, query: str) -> list[Identifier]:
        """Candidate identifiers for ``query``, capped to bound fetch fan-out.

        Raises SourceError when the search collaborator fails.
        """
        term = query.strip()
        if not term or self._search is None:
            return []
        ids = await self._search(term)
        return _dedupe(ids)[: self._search_limit]
