"""Caller-side screener state: watchlist, options and debounced search."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from moonshot.screener.debounce import Debouncer
from moonshot.screener.models import (
    FetchResult,
    FilterCriteria,
    Identifier,
    PinSet,
    ScreenerView,
    SortSpec,
)
from moonshot.screener.pipeline import ScreenerPipeline, build_view
from moonshot.sources.errors import SourceError

logger = logging.getLogger(__name__)


class ScreenerSession:
    """One user's screener: owns the PinSet and the current view options.

    Option changes and pin toggles re-derive the view from the last fetch;
    only search changes (or a reload) go back to the sources.
    """

    def __init__(
        self,
        pipeline: ScreenerPipeline,
        *,
        default_ids: Sequence[Identifier],
        debounce_seconds: float = 0.5,
        risk_bias: float = 0.5,
    ) -> None:
        self._pipeline = pipeline
        self._default_ids = list(default_ids)
        self._debouncer: Debouncer[FetchResult] = Debouncer(debounce_seconds)

        self.pins = PinSet()
        self.risk_bias = risk_bias
        self.criteria = FilterCriteria()
        self.sort_spec = SortSpec()
        self.search_text = ""

        self._fetched = FetchResult()
        self.loading = False

    # --- Fetch triggers ---

    def reload_default(self) -> asyncio.Task:
        """Load the default asset list now, superseding any pending search."""
        self.loading = True
        return self._debouncer.submit(
            lambda: self._pipeline.fetch(self._default_ids),
            self._on_fetched,
            on_error=self._on_fetch_error,
            delay=0,
        )

    def set_search(self, text: str) -> asyncio.Task:
        self.search_text = text
        term = text.strip().lower()
        if not term:
            return self.reload_default()
        self.loading = True
        return self._debouncer.submit(
            lambda: self._search_and_fetch(term), self._on_fetched, on_error=self._on_fetch_error,
        )

    async def _search_and_fetch(self, term: str) -> FetchResult:
        try:
            ids = await self._pipeline.search(term)
        except SourceError as exc:
            logger.warning("Search failed for %r: %s", term, exc)
            return FetchResult.failed(str(exc))
        return await self._pipeline.fetch(ids)

    def _on_fetched(self, result: FetchResult) -> None:
        self._fetched = result
        self.loading = False

    def _on_fetch_error(self, exc: Exception) -> None:
        # A failed refresh replaces the previous rows
        self._on_fetched(FetchResult.failed(str(exc) or type(exc).__name__))

    async def settle(self) -> None:
        await self._debouncer.wait()

    def close(self) -> None:
        """Cancel any pending refresh; call before closing the sources."""
        self._debouncer.cancel()
        self.loading = False

    # --- View options ---

    def update_options(
        self,
        *,
        risk_bias: float | None = None,
        criteria: FilterCriteria | None = None,
        sort_spec: SortSpec | None = None,
    ) -> None:
        if risk_bias is not None:
            self.risk_bias = risk_bias
        if criteria is not None:
            self.criteria = criteria
        if sort_spec is not None:
            self.sort_spec = sort_spec

    def toggle_pin(self, identifier: Identifier) -> bool:
        return self.pins.toggle(identifier)

    def view(self) -> ScreenerView:
        return build_view(
            self._fetched,
            self.risk_bias,
            self.criteria,
            self.search_text,
            self.sort_spec,
            self.pins.snapshot(),
        )
