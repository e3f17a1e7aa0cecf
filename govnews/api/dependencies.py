"""FastAPI dependency injection -- Depends() patterns using app.state from lifespan."""

from typing import Annotated, Optional

import httpx
from fastapi import Depends, Header, HTTPException, Request

from govnews.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def is_trigger_allowed(settings: Settings, method: str, authorization: Optional[str]) -> bool:
    """Empty CRON_SECRET = open. Otherwise the bearer must match, or the call is a POST."""
    secret = settings.cron_secret
    if not secret:
        return True
    if authorization == f"Bearer {secret}":
        return True
    return method.upper() == "POST"


async def verify_cron_secret(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
):
    """Fetch trigger gate: scheduled GETs carry the secret, manual POSTs pass."""
    settings = get_app_settings(request)
    if not is_trigger_allowed(settings, request.method, authorization):
        raise HTTPException(status_code=401, detail="Unauthorized")


# Type aliases for cleaner route signatures
AppSettings = Annotated[Settings, Depends(get_app_settings)]
HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]
