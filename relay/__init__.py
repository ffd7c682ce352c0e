"""Real-time group chat relay."""

from .app import Application, IApplication
from .broadcast import Broadcaster, IBroadcaster
from .engine import IMessageEngine, MessageEngine
from .errors import (
    DuplicateId,
    Forbidden,
    InvalidPayload,
    NotFound,
    NotFoundOrForbidden,
    RelayError,
    StorageError,
)
from .models import (
    Ack,
    Attachment,
    ClientEvent,
    Message,
    OutboundEvent,
    ReplyRef,
    ServerEvent,
)
from .retention import IRetentionPolicy, RetentionPolicy
from .sessions import ISessionRegistry, Session, SessionRegistry
from .storage import IStorage, Storage

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Ack",
    "Attachment",
    "ClientEvent",
    "Message",
    "OutboundEvent",
    "ReplyRef",
    "ServerEvent",
    # Errors
    "RelayError",
    "InvalidPayload",
    "NotFoundOrForbidden",
    "NotFound",
    "Forbidden",
    "DuplicateId",
    "StorageError",
    # Components
    "IStorage",
    "Storage",
    "IRetentionPolicy",
    "RetentionPolicy",
    "ISessionRegistry",
    "Session",
    "SessionRegistry",
    "IBroadcaster",
    "Broadcaster",
    "IMessageEngine",
    "MessageEngine",
]
