"""FastAPI application for the deal promoter service."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from deal_promoter.config import Settings, get_settings
from deal_promoter.pipeline.fetcher import build_http_client
from deal_promoter.pipeline.pipeline import DealPipeline

from .routes.deals import router as deals_router
from .routes.health import router as health_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared HTTP client and pipeline at startup, close at shutdown."""
    settings: Settings = getattr(app.state, 'settings', None) or get_settings()

    logger.info(
        "lifespan.startup",
        ipfs_gateway=settings.IPFS_GATEWAY,
        miner_id=settings.MINER_ID,
    )

    http_client = build_http_client(settings.FETCH_TIMEOUT_SECONDS)

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.pipeline = DealPipeline.from_settings(settings, http_client)

    logger.info("lifespan.ready")
    yield

    logger.info("lifespan.shutdown")
    await http_client.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the app; `settings` is fixed for the lifetime of the process."""
    app = FastAPI(
        title="deal-promoter",
        description="Promotes IPFS content to Filecoin storage deals via boost",
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings

    app.include_router(health_router)
    app.include_router(deals_router)
    return app


app = create_app()
