"""Mutation engine module."""

from .engine import IMessageEngine, MessageEngine
from .payloads import (
    CreateRequest,
    DeleteRequest,
    EditRequest,
    parse_create,
    parse_delete,
    parse_edit,
)

__all__ = [
    "IMessageEngine",
    "MessageEngine",
    "CreateRequest",
    "DeleteRequest",
    "EditRequest",
    "parse_create",
    "parse_delete",
    "parse_edit",
]
