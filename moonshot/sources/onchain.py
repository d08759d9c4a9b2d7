"""On-chain metrics feed (pool liquidity, holder count).

Demo provider with stable per-identifier values; GeckoTerminal or DexScreener
pool data would replace it behind ``fetch_onchain``.
"""

import logging
from typing import Sequence

from moonshot.screener.models import OnchainRecord
from moonshot.sources.seeded import seeded_rng

logger = logging.getLogger(__name__)


def demo_onchain(identifier: str) -> OnchainRecord:
    rng = seeded_rng(identifier, "onchain")
    return OnchainRecord(
        id=identifier,
        liquidity=float(rng.randrange(500, 1_500) * 1_000),  # $500k - $1.5M
        holders=rng.randrange(1_000, 51_000),
    )


async def fetch_onchain(ids: Sequence[str]) -> list[OnchainRecord]:
    records = [demo_onchain(i) for i in ids]
    logger.debug("On-chain: %d records", len(records))
    return records
