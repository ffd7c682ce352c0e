"""Socket event data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ClientEvent(str, Enum):
    """Events sent by clients."""

    REQUEST_INIT = "requestInit"
    SEND_MESSAGE = "sendMessage"
    EDIT_MESSAGE = "editMessage"
    DELETE_MESSAGE = "deleteMessage"


class ServerEvent(str, Enum):
    """Events sent to clients."""

    INIT_MESSAGES = "initMessages"
    MESSAGE_CREATED = "messageCreated"
    MESSAGE_EDITED = "messageEdited"
    MESSAGE_DELETED = "messageDeleted"
    ACK = "ack"


@dataclass
class OutboundEvent:
    """A frame pushed to one or more sessions."""

    event: ServerEvent
    data: Any
    ack_id: int | str | None = None

    def to_wire(self) -> dict:
        frame = {"event": self.event.value, "data": self.data}
        if self.ack_id is not None:
            frame["ackId"] = self.ack_id
        return frame


@dataclass
class Ack:
    """Outcome of a client request, returned to the requester only."""

    ok: bool
    error: str | None = None
    data: dict = field(default_factory=dict)

    @classmethod
    def success(cls, **data: Any) -> "Ack":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "Ack":
        return cls(ok=False, error=error)

    def to_wire(self) -> dict:
        if self.ok:
            return {"ok": True, **self.data}
        return {"ok": False, "error": self.error}
