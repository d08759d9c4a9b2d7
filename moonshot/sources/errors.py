"""Upstream source failures.

The price feed is authoritative: a ``PriceSourceError`` aborts a screener run.
Every other feed raises ``AuxiliarySourceError``, which the pipeline absorbs
and merges as an empty result.
"""

from __future__ import annotations


class SourceError(Exception):
    """An upstream data source was unreachable or answered with a non-2xx."""

    def __init__(self, source: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class PriceSourceError(SourceError):
    """The mandatory price feed failed."""


class AuxiliarySourceError(SourceError):
    """A best-effort feed (sentiment, on-chain, catalysts, search) failed."""
