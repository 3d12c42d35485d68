"""Inventory server: per-player item stacks and world-dropped items."""

__version__ = "0.1.0"
