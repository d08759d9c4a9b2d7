"""Composite ranking score: momentum + sentiment + holder breadth."""

from __future__ import annotations

from typing import Iterable

from moonshot.screener.models import ScoredRecord, UnifiedRecord

# (bullish - bearish) spans -100..100; /10 keeps it commensurate with % moves
_SENTIMENT_DIVISOR = 10.0
_HOLDERS_DIVISOR = 10_000.0


def momentum_component(record: UnifiedRecord, risk_bias: float) -> float:
    """Blend 24h and 7d change: bias 0 is pure 24h, bias 1 is pure 7d."""
    change_24h = record.change_24h or 0.0
    change_7d = record.change_7d or 0.0
    return (1 - risk_bias) * change_24h + risk_bias * change_7d


def sentiment_component(record: UnifiedRecord) -> float:
    bullish = record.bullish_score or 0.0
    bearish = record.bearish_score or 0.0
    return (bullish - bearish) / _SENTIMENT_DIVISOR


def breadth_component(record: UnifiedRecord) -> float:
    # Uncapped: holder counts for screened assets are modest
    return (record.holders or 0) / _HOLDERS_DIVISOR


def compute_score(record: UnifiedRecord, risk_bias: float) -> float:
    """Total score, unnormalized. ``risk_bias`` outside [0, 1] extrapolates."""
    return (
        momentum_component(record, risk_bias)
        + sentiment_component(record)
        + breadth_component(record)
    )


def score_record(record: UnifiedRecord, risk_bias: float) -> ScoredRecord:
    return ScoredRecord(**record.model_dump(exclude={"score"}), score=compute_score(record, risk_bias))


def score_records(records: Iterable[UnifiedRecord], risk_bias: float) -> list[ScoredRecord]:
    return [score_record(r, risk_bias) for r in records]
