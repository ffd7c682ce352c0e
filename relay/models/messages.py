"""Message-related data models."""

from dataclasses import dataclass, field
from datetime import datetime


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Attachment:
    """A file attached to a message (produced by the upload endpoint)."""

    name: str
    media_type: str
    url: str

    def to_wire(self) -> dict:
        return {"name": self.name, "mediaType": self.media_type, "url": self.url}


@dataclass
class ReplyRef:
    """Reference to the message being replied to. The target may no longer exist."""

    id: str
    name: str | None = None
    text: str | None = None

    def to_wire(self) -> dict:
        return {"id": self.id, "name": self.name, "text": self.text}


@dataclass
class Message:
    """A single chat message."""

    id: str
    author_id: str
    display_name: str
    body: str
    created_at: datetime
    attachments: list[Attachment] = field(default_factory=list)
    reply_to: ReplyRef | None = None
    deleted: bool = False
    deleted_at: datetime | None = None
    edited: bool = False
    edited_at: datetime | None = None

    def to_wire(self) -> dict:
        """Client-facing representation."""
        return {
            "id": self.id,
            "userId": self.author_id,
            "name": self.display_name,
            "text": self.body,
            "createdAt": _iso(self.created_at),
            "attachments": [a.to_wire() for a in self.attachments],
            "replyTo": self.reply_to.to_wire() if self.reply_to else None,
            "deleted": self.deleted,
            "deletedAt": _iso(self.deleted_at),
            "edited": self.edited,
            "editedAt": _iso(self.edited_at),
        }
