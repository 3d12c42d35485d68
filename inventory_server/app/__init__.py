"""FastAPI application assembly for the inventory server."""

from .factory import create_app

__all__ = ["create_app"]
