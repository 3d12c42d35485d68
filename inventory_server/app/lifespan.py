"""Application lifecycle management for the inventory server.

Startup configures logging and builds the item service from configuration
(loading the catalog and restoring stored state). Shutdown writes any pending
state before the process exits.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..config import get_config
from ..exceptions import PersistenceError
from ..services.item_service import ItemService
from ..structured_logging.enhanced_logging_config import get_logger, setup_enhanced_logging

logger = get_logger(__name__)

__all__ = ["lifespan"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    A service already attached to ``app.state.item_service`` (tests, embedding
    servers) is used as-is; otherwise one is built from ``get_config()``.
    Catalog and stored-data errors propagate and abort startup.
    """
    service: ItemService | None = getattr(app.state, "item_service", None)
    if service is None:
        config = get_config()
        setup_enhanced_logging(config.to_legacy_dict())
        logger.info("Starting inventory server", persistence_backend=config.persistence.backend)
        service = ItemService.from_config(config)
        app.state.item_service = service
    else:
        service.initialize()

    logger.info("Inventory server started", item_count=len(service.catalog))
    yield

    logger.info("Shutting down inventory server...")
    try:
        service.shutdown()
    except (PersistenceError, OSError, TypeError, ValueError) as e:
        logger.error("Final item data flush failed", error=str(e), error_type=type(e).__name__, exc_info=True)
    logger.info("Inventory server shutdown complete")
