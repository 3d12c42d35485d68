"""
FastAPI application factory for the inventory server.

This module handles FastAPI app creation and router registration.
"""

from fastapi import FastAPI

from .. import __version__
from ..api.items import items_router
from ..services.item_service import ItemService
from ..structured_logging.enhanced_logging_config import get_logger
from .lifespan import lifespan

logger = get_logger(__name__)


def create_app(item_service: ItemService | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        item_service: Prebuilt service to serve. When omitted the lifespan
            builds one from configuration at startup.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title="Inventory Server API",
        description="Player inventories and world-dropped items",
        version=__version__,
        lifespan=lifespan,
    )
    if item_service is not None:
        app.state.item_service = item_service

    app.include_router(items_router)

    logger.info("FastAPI application created", prebuilt_service=item_service is not None)
    return app
