"""Server-to-client notification delivery."""

from .notifier import SessionNotifier

__all__ = ["SessionNotifier"]
