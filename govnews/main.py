"""
Government News Monitor - Main Entry Point.
FastAPI server and CLI interface.
"""

import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import fetch_news, news
from .config import Settings, get_settings
from .pipeline import preview_sources, run_fetch_and_store

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def http_error_handler(request, exc: StarletteHTTPException) -> JSONResponse:
    """Every HTTP error leaves the service as ``{"error": <detail>}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the API. A passed-in client is used as-is and never closed here."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_client = app.state.http_client is None
        if owns_client:
            app.state.http_client = httpx.AsyncClient()
        logger.info(
            f"Government News Monitor starting (store configured: {settings.store_configured}, "
            f"pipeline configured: {settings.pipeline_configured})"
        )
        try:
            yield
        finally:
            if owns_client:
                await app.state.http_client.aclose()
                app.state.http_client = None

    app = FastAPI(
        title="Government News Monitor",
        description="Japanese government news on foreign-worker employment, filtered by Gemini",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.http_client = http_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(news.router)
    app.include_router(fetch_news.router)

    @app.get("/health")
    async def health():
        """Liveness plus which configuration values are present."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "config": {
                "supabase_url": bool(settings.supabase_url),
                "supabase_anon_key": bool(settings.supabase_anon_key),
                "gemini_api_key": bool(settings.gemini_api_key),
                "cron_secret": bool(settings.cron_secret),
                "gemini_model": settings.gemini_model,
                "store_table": settings.store_table,
            },
        }

    return app


setup_logging(get_settings().log_level)
app = create_app()


# ══════════════════════════════════════════════════════════════════════════════
# CLI
# ══════════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Government News Monitor")
    parser.add_argument(
        "command",
        nargs="?",
        default="fetch",
        choices=["fetch", "preview"],
        help="fetch: run fetch/filter/store once (default); preview: fetch and extract only",
    )
    parser.add_argument(
        "--server",
        action="store_true",
        help="Start the FastAPI server",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Server port (default: 8000)",
    )
    return parser


async def run_fetch(settings: Settings) -> int:
    if not settings.pipeline_configured:
        print("Missing configuration: GEMINI_API_KEY, SUPABASE_URL and SUPABASE_ANON_KEY are required")
        return 1

    async with httpx.AsyncClient() as client:
        result = await run_fetch_and_store(settings, client)

    print("\n" + "=" * 60)
    print("FETCH RESULTS")
    print("=" * 60)
    print(f"Fetched:     {result.fetched}")
    print(f"Filtered:    {result.filtered}")
    print(f"Stored:      {result.stored}")
    print(f"AI filtered: {result.ai_filtered}")
    print(f"Runtime:     {result.run_time_seconds:.2f}s")
    print("=" * 60 + "\n")
    return 0


async def run_preview(settings: Settings, source_ids: Optional[List[str]] = None) -> int:
    async with httpx.AsyncClient() as client:
        items = await preview_sources(settings, client, source_ids)

    for item in items:
        print(f"[{item.source}] {item.publish_date or '-'}  {item.title}")
        if item.link:
            print(f"    {item.link}")
    print(f"\n{len(items)} candidates")
    return 0


def main():
    """Entry point for CLI."""
    args = build_parser().parse_args()
    settings = get_settings()

    if args.server:
        import uvicorn
        logger.info(f"Starting server on port {args.port}...")
        uvicorn.run(app, host="0.0.0.0", port=args.port)
        return

    if args.command == "preview":
        code = asyncio.run(run_preview(settings))
    else:
        code = asyncio.run(run_fetch(settings))
    raise SystemExit(code)


if __name__ == "__main__":
    main()
