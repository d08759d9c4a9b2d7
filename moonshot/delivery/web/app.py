from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from moonshot.config import settings
from moonshot.delivery.web.routes import router
from moonshot.screener.pipeline import ScreenerPipeline
from moonshot.screener.session import ScreenerSession
from moonshot.sources.factory import create_http_client, create_pipeline


def create_app(
    client: httpx.AsyncClient | None = None,
    pipeline: ScreenerPipeline | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client = client or create_http_client()
        app.state.http_client = http_client
        app.state.pipeline = pipeline or create_pipeline(http_client)
        app.state.session = ScreenerSession(
            app.state.pipeline,
            default_ids=settings.default_ids,
            debounce_seconds=settings.search_debounce_seconds,
            risk_bias=settings.default_risk_bias,
        )
        app.state.session.reload_default()
        try:
            yield
        finally:
            app.state.session.close()
            if client is None:
                await http_client.aclose()

    app = FastAPI(title="Moonshot Screener", version="0.1.0", lifespan=lifespan)
    app.include_router(router)
    return app
