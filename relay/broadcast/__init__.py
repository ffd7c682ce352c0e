"""Broadcast module."""

from .coordinator import Broadcaster, IBroadcaster

__all__ = ["Broadcaster", "IBroadcaster"]
