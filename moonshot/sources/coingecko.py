"""CoinGecko API client: market prices, coin search and trending catalysts."""

import logging
from datetime import datetime, timezone
from typing import Sequence

import httpx
from pydantic import ValidationError

from moonshot.config import settings
from moonshot.screener.models import CatalystAlert, CatalystRecord, PriceRecord
from moonshot.sources.errors import AuxiliarySourceError, PriceSourceError

logger = logging.getLogger(__name__)


def parse_market_row(row: dict) -> PriceRecord | None:
    """Map one /coins/markets row to a PriceRecord (None if it has no price)."""
    coin_id = row.get("id")
    price = row.get("current_price")
    if not coin_id or price is None:
        return None
    return PriceRecord(
        id=coin_id,
        symbol=row.get("symbol") or coin_id,
        name=row.get("name") or coin_id,
        current_price=price,
        change_24h=row.get("price_change_percentage_24h"),
        change_7d=row.get("price_change_percentage_7d_in_currency"),
        market_cap=row.get("market_cap"),
        total_volume=row.get("total_volume"),
    )


async def fetch_markets(
    ids: Sequence[str],
    client: httpx.AsyncClient,
    vs_currency: str | None = None,
) -> list[PriceRecord]:
    """Fetch price, 24h/7d change, market cap and volume for ``ids``.

    Raises PriceSourceError (with the upstream status when there is one).
    """
    if not ids:
        return []

    try:
        resp = await client.get(
            f"{settings.coingecko_base_url}/coins/markets",
            params={
                "vs_currency": vs_currency or settings.vs_currency,
                "ids": ",".join(ids),
                # Without this the API only returns the 24h change
                "price_change_percentage": "24h,7d",
            },
        )
        resp.raise_for_status()
        rows = resp.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.error("CoinGecko markets failed (%d) for %d ids", status, len(ids))
        raise PriceSourceError(
            "prices", f"Failed to fetch prices: {status} {exc.response.reason_phrase}", status,
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("CoinGecko markets request failed: %s", exc)
        raise PriceSourceError("prices", f"Failed to fetch prices: {exc}") from exc

    if not isinstance(rows, list):
        raise PriceSourceError("prices", "Failed to fetch prices: unexpected payload")

    records: list[PriceRecord] = []
    for row in rows:
        try:
            record = parse_market_row(row) if isinstance(row, dict) else None
        except ValidationError as exc:
            logger.warning("Skipping malformed CoinGecko market row %s: %s", row.get("id"), exc)
            continue
        if record is None:
            logger.warning("Skipping CoinGecko market row without price: %s", row)
            continue
        records.append(record)
    return records


async def search_coins(query: str, client: httpx.AsyncClient) -> list[dict]:
    """Coins matching ``query`` in CoinGecko's relevance order."""
    try:
        resp = await client.get(
            f"{settings.coingecko_base_url}/search",
            params={"query": query},
        )
        resp.raise_for_status()
        coins = resp.json().get("coins") or []
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.warning("CoinGecko search failed (%d) for %r", status, query)
        raise AuxiliarySourceError(
            "search", f"Failed to fetch search results: {status}", status,
        ) from exc
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.warning("CoinGecko search failed for %r: %s", query, exc)
        raise AuxiliarySourceError("search", f"Failed to fetch search results: {exc}") from exc

    return [c for c in coins if isinstance(c, dict) and c.get("id")]


async def search_ids(query: str, client: httpx.AsyncClient) -> list[str]:
    return [c["id"] for c in await search_coins(query, client)]


async def fetch_trending(client: httpx.AsyncClient) -> dict[str, tuple[int, str]]:
    """Map coin id -> (1-based trending rank, display name)."""
    try:
        resp = await client.get(
            f"{settings.coingecko_base_url}/search/trending",
            headers={"accept": "application/json"},
        )
        resp.raise_for_status()
        entries = resp.json().get("coins") or []
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise AuxiliarySourceError(
            "catalysts", f"Trending request failed: {status}", status,
        ) from exc
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        raise AuxiliarySourceError("catalysts", f"Trending request failed: {exc}") from exc

    trending: dict[str, tuple[int, str]] = {}
    for index, entry in enumerate(entries):
        item = (entry or {}).get("item") or {}
        coin_id = item.get("id")
        if coin_id:
            trending[coin_id] = (index + 1, item.get("name") or coin_id)
    return trending


def build_trending_alert(name: str, rank: int, now: datetime | None = None) -> CatalystAlert:
    return CatalystAlert(
        title=f"{name} is trending on CoinGecko",
        description=f"{name} currently ranks #{rank} on CoinGecko's trending search list.",
        created_at=now or datetime.now(timezone.utc),
        rank=rank,
    )


async def fetch_trending_alerts(
    ids: Sequence[str], client: httpx.AsyncClient,
) -> list[CatalystRecord]:
    """One catalyst alert per requested id that is on the trending list."""
    trending = await fetch_trending(client)
    now = datetime.now(timezone.utc)

    records: list[CatalystRecord] = []
    for coin_id in ids:
        hit = trending.get(coin_id)
        if hit is None:
            records.append(CatalystRecord(id=coin_id))
            continue
        rank, name = hit
        records.append(CatalystRecord(id=coin_id, alerts=(build_trending_alert(name, rank, now),)))

    logger.debug("CoinGecko trending: %d of %d ids trending", sum(1 for r in records if r.alerts), len(ids))
    return records
