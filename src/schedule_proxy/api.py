"""FastAPI application exposing ``GET /api/schedule``.

Responses:
  200  the portal's week document (cache hit or fresh fetch)
  400  {"error": ...} when ``type`` or ``value`` is missing
  500  {"error": ...} on any fetch failure; the cause is only logged
"""

import asyncio
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.schedule_proxy.cache import ResponseCache
from src.schedule_proxy.config import ScheduleProxyConfig, get_config
from src.schedule_proxy.errors import (
    BrowserUnavailableError,
    MissingParameterError,
    ScrapingError,
)
from src.schedule_proxy.fetcher import ScheduleFetcher
from src.schedule_proxy.logging import get_logger, setup_logging
from src.schedule_proxy.models import ScheduleQuery
from src.schedule_proxy.service import ScheduleService
from src.schedule_proxy.session import BrowserSession

log = get_logger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch schedule"


def build_service(config: ScheduleProxyConfig) -> ScheduleService:
    """Wire session, fetcher and cache into a service."""
    session = BrowserSession(config)
    cache = ResponseCache(
        ttl=config.cache_ttl_seconds,
        max_entries=config.cache_max_entries,
    )
    return ScheduleService(ScheduleFetcher(session, config), cache)


async def sweep_cache_periodically(cache: ResponseCache, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = cache.sweep()
        if removed:
            log.info("cache_sweep", removed=removed, remaining=len(cache))


def create_app(
    config: ScheduleProxyConfig | None = None,
    service: ScheduleService | None = None,
) -> FastAPI:
    """Create the application.

    Args:
        config: Configuration; defaults to the global config.
        service: Pre-built service (tests). When omitted, one backed by a
            real browser is built and owned by the app lifespan.
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_service = app.state.service is None
        if owns_service:
            setup_logging(json_output=config.log_json, log_level=config.log_level)
            app.state.service = build_service(config)
            try:
                await app.state.service.fetcher.session.start()
            except BrowserUnavailableError as e:
                # Session starts lazily on the first request instead
                log.warning("browser_start_deferred", error=str(e))

        sweeper = None
        if config.cache_sweep_interval_seconds > 0:
            sweeper = asyncio.create_task(
                sweep_cache_periodically(
                    app.state.service.cache, config.cache_sweep_interval_seconds
                )
            )
        app.state.sweeper = sweeper
        log.info("schedule_proxy_started", port=config.port)

        yield

        if sweeper is not None:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
        if owns_service:
            await app.state.service.fetcher.session.shutdown()
        log.info("schedule_proxy_stopped")

    app = FastAPI(
        title="Schedule proxy",
        description="Class schedules extracted from the rendered portal",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(MissingParameterError)
    async def missing_parameter_handler(request: Request, exc: MissingParameterError):
        log.info("schedule_request_rejected", reason=str(exc))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    @app.exception_handler(ScrapingError)
    async def scraping_error_handler(request: Request, exc: ScrapingError):
        log.error(
            "schedule_request_failed",
            error=str(exc),
            type=type(exc).__name__,
            query=str(request.url.query),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": FETCH_FAILED_MESSAGE},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log.exception(
            "schedule_request_crashed",
            error=str(exc),
            type=type(exc).__name__,
            query=str(request.url.query),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": FETCH_FAILED_MESSAGE},
        )

    @app.get("/api/schedule")
    async def get_schedule(
        request: Request,
        type: str | None = None,
        value: str | None = None,
        date_start: str | None = Query(default=None, alias="dateStart"),
        date_end: str | None = Query(default=None, alias="dateEnd"),
    ):
        query = ScheduleQuery.from_params(type, value, date_start, date_end)
        return await request.app.state.service.get_schedule(query)

    @app.get("/health")
    async def health_check(request: Request):
        service: ScheduleService = request.app.state.service
        browser_ok = service.fetcher.session.health_check()
        return {
            "status": "healthy" if browser_ok else "degraded",
            "browser": browser_ok,
            "timestamp": time.time(),
            **service.stats(),
        }

    return app
