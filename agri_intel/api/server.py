import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..agent.orchestrator import Orchestrator
from ..application.services.search_service import search_all
from ..infra.context import AppContext
from ..infra.errors import ConfigurationError, SearchServiceError
from ..observability.logging_utils import init_logging, log_error, log_event, summarize_text
from ..observability.otel import init_otel, instrument_fastapi, instrument_httpx
from ..schemas import (
    ChatRequest,
    InitializeResponse,
    OrchestrationResult,
    SearchAllResponse,
    SearchRequest,
    StatusResponse,
    SyncMarketPricesRequest,
    SyncMarketPricesResponse,
)
from .deps import get_context, get_orchestrator, require_admin


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the API application. Tests pass their own AppContext; the module
    level `app` builds one from the environment on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = context or AppContext()
        init_logging(log_path=ctx.config.log_path, level=ctx.config.log_level)
        tracing = init_otel(ctx.config)
        instrument_httpx()
        await ctx.init()
        app.state.context = ctx
        app.state.orchestrator = Orchestrator.from_context(ctx)
        log_event(
            "api_started",
            search_configured=ctx.config.search_configured,
            tracing=tracing,
        )
        try:
            yield
        finally:
            await ctx.shutdown()

    app = FastAPI(title="AgriIntel Orchestration API", lifespan=lifespan)
    instrument_fastapi(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ConfigurationError)
    async def _configuration_error_handler(request: Request, exc: ConfigurationError):
        log_error("configuration_error", exc=exc, path=request.url.path)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(SearchServiceError)
    async def _search_error_handler(request: Request, exc: SearchServiceError):
        log_error(
            "search_service_error",
            path=request.url.path,
            index=exc.index,
            status=exc.status_code,
            error=str(exc),
        )
        return JSONResponse(
            status_code=502, content={"detail": "Search service request failed"}
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        log_error(
            "unhandled_error",
            path=request.url.path,
            error=str(exc),
            traceback=summarize_text(traceback.format_exc(), 2000),
        )
        return JSONResponse(status_code=500, content={"detail": {"error": str(exc)}})

    @app.get("/health")
    async def health(orchestrator: Orchestrator = Depends(get_orchestrator)):
        ctx = app.state.context
        return {
            "status": "ok",
            "search_configured": ctx.config.search_configured,
            "orchestration": "live" if orchestrator.live_enabled else "simulation",
        }

    @app.get("/api/v1/algolia/status", response_model=StatusResponse)
    async def algolia_status(ctx: AppContext = Depends(get_context)):
        return StatusResponse(
            configured=ctx.config.search_configured,
            app_id_masked=ctx.config.masked_app_id,
        )

    @app.post(
        "/api/v1/algolia/initialize",
        response_model=InitializeResponse,
        dependencies=[Depends(require_admin)],
    )
    async def initialize_indices(ctx: AppContext = Depends(get_context)):
        counts = await ctx.index_admin.initialize()
        ctx.cache.clear()
        total = sum(counts.values())
        return InitializeResponse(
            success=True,
            message=f"Configured {len(counts)} indices and seeded {total} records.",
        )

    @app.post(
        "/api/v1/algolia/sync-market-prices",
        response_model=SyncMarketPricesResponse,
        dependencies=[Depends(require_admin)],
    )
    async def sync_market_prices(
        payload: SyncMarketPricesRequest, ctx: AppContext = Depends(get_context)
    ):
        indexed = await ctx.index_admin.index_market_prices(payload.prices)
        ctx.cache.clear()
        return SyncMarketPricesResponse(success=True, indexed=indexed)

    @app.post("/api/v1/chat", response_model=OrchestrationResult)
    async def chat(
        request: ChatRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
    ):
        return await orchestrator.run(request.message)

    @app.post("/api/v1/search", response_model=SearchAllResponse)
    async def search(request: SearchRequest, ctx: AppContext = Depends(get_context)):
        return await search_all(
            ctx.store,
            request.query,
            request.filters.model_dump(exclude_none=True),
            fallback_store=ctx.fallback_store,
        )

    return app


app = create_app()
