"""Social sentiment feed.

Demo provider: bullish/bearish scores and mention volume derived from the
identifier, so the same asset always reports the same numbers. A real social
analytics provider (LunarCrush, Santiment) would slot in behind the same
``fetch_sentiment`` signature.
"""

import logging
from typing import Sequence

from moonshot.screener.models import SentimentRecord
from moonshot.sources.seeded import seeded_rng

logger = logging.getLogger(__name__)


def demo_sentiment(identifier: str) -> SentimentRecord:
    rng = seeded_rng(identifier, "sentiment")
    return SentimentRecord(
        id=identifier,
        bullish_score=round(rng.random() * 100),
        bearish_score=round(rng.random() * 100),
        mention_volume=round(rng.random() * 10_000),
    )


async def fetch_sentiment(ids: Sequence[str]) -> list[SentimentRecord]:
    records = [demo_sentiment(i) for i in ids]
    logger.debug("Sentiment: %d records", len(records))
    return records
