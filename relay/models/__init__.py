"""Core data models for the relay."""

from .messages import Attachment, Message, ReplyRef
from .events import Ack, ClientEvent, OutboundEvent, ServerEvent

__all__ = [
    # Messages
    "Attachment",
    "Message",
    "ReplyRef",
    # Events
    "Ack",
    "ClientEvent",
    "OutboundEvent",
    "ServerEvent",
]
