import logging

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from moonshot.config import settings
from moonshot.delivery.web.dependencies import get_http_client, get_pipeline, get_session
from moonshot.screener.models import FilterCriteria, SortDirection, SortKey, SortSpec
from moonshot.screener.pipeline import ScreenerPipeline
from moonshot.screener.session import ScreenerSession
from moonshot.sources.coingecko import fetch_markets, fetch_trending_alerts, search_coins
from moonshot.sources.errors import SourceError
from moonshot.sources.onchain import fetch_onchain
from moonshot.sources.sentiment import fetch_sentiment

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _split_ids(ids: str | None) -> list[str]:
    if not ids:
        return []
    return [i.strip() for i in ids.split(",") if i.strip()]


def _missing(param: str) -> JSONResponse:
    return JSONResponse({"error": f"Missing '{param}' query parameter"}, status_code=400)


# ═══════════════════════════════════════════════════════════════════════════
# Source proxies
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/api/prices")
async def prices(
    ids: str | None = Query(None),
    vs_currency: str = Query(settings.vs_currency),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    id_list = _split_ids(ids)
    if not id_list:
        return _missing("ids")
    try:
        records = await fetch_markets(id_list, client, vs_currency=vs_currency)
    except SourceError as exc:
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code or 500)
    return [r.model_dump(mode="json") for r in records]


@router.get("/api/sentiment")
async def sentiment(ids: str | None = Query(None)):
    id_list = _split_ids(ids)
    if not id_list:
        return _missing("ids")
    return [r.model_dump(mode="json") for r in await fetch_sentiment(id_list)]


@router.get("/api/onchain")
async def onchain(ids: str | None = Query(None)):
    id_list = _split_ids(ids)
    if not id_list:
        return _missing("ids")
    return [r.model_dump(mode="json") for r in await fetch_onchain(id_list)]


@router.get("/api/news")
async def news(
    ids: str | None = Query(None),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    id_list = _split_ids(ids)
    if not id_list:
        return _missing("ids")
    try:
        records = await fetch_trending_alerts(id_list, client)
    except SourceError as exc:
        logger.warning("Trending lookup failed, returning no updates: %s", exc)
        return [{"id": i, "updates": []} for i in id_list]
    return [
        {"id": r.id, "updates": [a.model_dump(mode="json") for a in r.alerts]}
        for r in records
    ]


@router.get("/api/search")
async def search(
    query: str | None = Query(None),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    term = (query or "").strip()
    if not term:
        return _missing("query")
    try:
        coins = await search_coins(term, client)
    except SourceError as exc:
        return JSONResponse({"error": str(exc)}, status_code=500)
    return {"coins": coins}


# ═══════════════════════════════════════════════════════════════════════════
# Screener
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/api/screener")
async def screener(
    request: Request,
    ids: str | None = Query(None),
    risk_bias: float = Query(settings.default_risk_bias),
    sort: SortKey = Query(SortKey.SCORE),
    direction: SortDirection = Query(SortDirection.DESC),
    q: str | None = Query(None),
    pipeline: ScreenerPipeline = Depends(get_pipeline),
    session: ScreenerSession = Depends(get_session),
):
    """One-shot refresh; filter bounds come from the camelCase query params."""
    id_list = _split_ids(ids) or list(settings.default_ids)
    criteria = FilterCriteria.model_validate(dict(request.query_params))
    view = await pipeline.refresh(
        id_list,
        risk_bias,
        criteria,
        q,
        SortSpec(key=sort, direction=direction),
        session.pins.snapshot(),
    )
    status_code = 502 if view.status == "failed" else 200
    return JSONResponse(view.to_dict(), status_code=status_code)


class SearchBody(BaseModel):
    query: str = ""


class OptionsBody(BaseModel):
    risk_bias: float | None = None
    sort: SortKey | None = None
    direction: SortDirection | None = None
    filters: FilterCriteria | None = None


@router.get("/api/session")
async def session_view(session: ScreenerSession = Depends(get_session)):
    body = session.view().to_dict()
    body["loading"] = session.loading
    body["search"] = session.search_text
    body["risk_bias"] = session.risk_bias
    body["sort"] = {"key": session.sort_spec.key.value, "direction": session.sort_spec.direction.value}
    body["watchlist"] = sorted(session.pins.snapshot())
    return body


@router.post("/api/session/search", status_code=202)
async def session_search(body: SearchBody, session: ScreenerSession = Depends(get_session)):
    session.set_search(body.query)
    return {"search": session.search_text, "loading": session.loading}


@router.put("/api/session/options")
async def session_options(body: OptionsBody, session: ScreenerSession = Depends(get_session)):
    sort_spec = None
    if body.sort is not None and body.direction is None:
        sort_spec = session.sort_spec.toggled(body.sort)
    elif body.sort is not None or body.direction is not None:
        sort_spec = SortSpec(
            key=body.sort or session.sort_spec.key,
            direction=body.direction or session.sort_spec.direction,
        )
    session.update_options(risk_bias=body.risk_bias, criteria=body.filters, sort_spec=sort_spec)
    return await session_view(session)


# ═══════════════════════════════════════════════════════════════════════════
# Watchlist (in memory, cleared on restart)
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/api/watchlist")
async def watchlist(session: ScreenerSession = Depends(get_session)):
    return {"ids": sorted(session.pins.snapshot())}


@router.post("/api/watchlist/{coin_id}/toggle")
async def toggle_watch(coin_id: str, session: ScreenerSession = Depends(get_session)):
    pinned = session.toggle_pin(coin_id)
    return {"id": coin_id, "pinned": pinned}


@router.delete("/api/watchlist")
async def clear_watchlist(session: ScreenerSession = Depends(get_session)):
    session.pins.clear()
    return {"ids": []}
