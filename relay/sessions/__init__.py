"""Sessions module."""

from .registry import Connection, ISessionRegistry, Session, SessionRegistry

__all__ = ["Connection", "ISessionRegistry", "Session", "SessionRegistry"]
