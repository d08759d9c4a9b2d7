import httpx
from fastapi import Request

from moonshot.screener.pipeline import ScreenerPipeline
from moonshot.screener.session import ScreenerSession


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_pipeline(request: Request) -> ScreenerPipeline:
    return request.app.state.pipeline


def get_session(request: Request) -> ScreenerSession:
    return request.app.state.session
