"""API routes."""

from . import health, realtime, uploads

__all__ = ["health", "realtime", "uploads"]
