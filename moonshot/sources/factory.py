"""Wire the concrete source clients into a ScreenerPipeline."""

import logging
from functools import partial

import httpx

from moonshot.config import settings
from moonshot.screener.pipeline import ScreenerPipeline
from moonshot.sources.coingecko import fetch_markets, fetch_trending_alerts, search_ids
from moonshot.sources.onchain import fetch_onchain
from moonshot.sources.sentiment import fetch_sentiment

logger = logging.getLogger(__name__)


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        headers={"accept": "application/json"},
    )


def create_pipeline(client: httpx.AsyncClient) -> ScreenerPipeline:
    """Pipeline backed by CoinGecko plus the sentiment and on-chain feeds."""
    logger.info("Using CoinGecko at %s (vs_currency=%s)", settings.coingecko_base_url, settings.vs_currency)
    return ScreenerPipeline(
        partial(fetch_markets, client=client),
        {
            "sentiment": fetch_sentiment,
            "onchain": fetch_onchain,
            "catalysts": partial(fetch_trending_alerts, client=client),
        },
        partial(search_ids, client=client),
        search_limit=settings.search_limit,
    )
