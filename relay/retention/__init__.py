"""Retention module."""

from .policy import IRetentionPolicy, RetentionPolicy

__all__ = ["IRetentionPolicy", "RetentionPolicy"]
