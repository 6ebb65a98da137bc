"""FastAPI application main module.

This module builds the FastAPI application for the PeerRec recommendation
service: it wires the interaction store, catalog, recommendation engine and
interaction tracker onto ``app.state``, installs error handlers and request
logging, and serves health and metrics endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src import __version__
from src.api.logging_config import RequestLoggingMiddleware, setup_logging
from src.api.routes import interactions, recommend
from src.config import Settings
from src.recommender.engine import RecommendationEngine
from src.recommender.exceptions import RecommenderError
from src.recommender.stores import (
    InMemoryCatalog,
    InMemoryInteractionStore,
    load_catalog_csv,
    load_interactions_csv,
)
from src.recommender.tracking import InteractionTracker

# Configure module logger
logger = logging.getLogger(__name__)


def build_components(settings: Settings) -> tuple[RecommendationEngine, InteractionTracker]:
    """Create in-memory stores, seeded from CSV files when configured."""
    interactions = InMemoryInteractionStore(
        load_interactions_csv(settings.interactions_csv)
        if settings.interactions_csv
        else None
    )
    catalog = InMemoryCatalog(
        load_catalog_csv(settings.catalog_csv) if settings.catalog_csv else None
    )

    engine = RecommendationEngine.from_settings(settings, interactions, catalog)
    tracker = InteractionTracker(interactions, engine)
    return engine, tracker


async def recommender_error_handler(request: Request, exc: RecommenderError) -> JSONResponse:
    """Render domain errors with the status code they carry."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request rejected",
        extra={
            "path": str(request.url.path),
            "error": exc.message,
            "error_type": type(exc).__name__,
            "status_code": exc.status_code,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.url.path}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": {}},
    )


def create_app(
    engine: Optional[RecommendationEngine] = None,
    tracker: Optional[InteractionTracker] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        engine: Recommendation engine to serve. Built from settings with
            in-memory stores when omitted.
        tracker: Interaction tracker sharing the engine's store. Built
            from the engine when omitted.
        settings: Service settings. Read from the environment when omitted.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or Settings.from_env()

    if engine is None:
        engine, default_tracker = build_components(settings)
        tracker = tracker or default_tracker
    elif tracker is None:
        tracker = InteractionTracker(engine.interactions, engine)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level)
        yield

    app = FastAPI(
        title="PeerRec API",
        description="Collaborative filtering product recommendation service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.tracker = tracker

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(RecommenderError, recommender_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(recommend.router)
    app.include_router(interactions.router)

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Example:
            >>> response = client.get("/ping")
            >>> assert response.json() == {"status": "ok"}
        """
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics(request: Request) -> Dict[str, Any]:
        """Cache and computation metrics of the recommendation engine."""
        current = request.app.state.engine
        return {**current.metrics.get_metrics(), "cache_entries": len(current.cache)}

    return app


# Create FastAPI application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
