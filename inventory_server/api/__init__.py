"""HTTP adapters for the item service."""

from .items import items_router

__all__ = ["items_router"]
