"""Parsing of client mutation payloads.

Clients are loosely typed: required identifiers are validated strictly, the
rest is normalized (wrong-typed text becomes empty, non-list attachments
become an empty list) rather than rejected.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidPayload
from ..models import Attachment, ReplyRef

DEFAULT_MEDIA_TYPE = "application/octet-stream"


@dataclass
class CreateRequest:
    message_id: str
    author_id: str
    display_name: str
    body: str
    attachments: list[Attachment] = field(default_factory=list)
    reply_to: ReplyRef | None = None


@dataclass
class EditRequest:
    message_id: str
    author_id: str
    new_body: str | None  # None leaves the stored body untouched


@dataclass
class DeleteRequest:
    message_id: str
    author_id: str


def _identifier(value: Any, field_name: str) -> str:
    # Numeric ids are accepted and stored as text.
    if isinstance(value, bool):
        raise InvalidPayload(f"{field_name} is required")
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str) or not value:
        raise InvalidPayload(f"{field_name} is required")
    return value


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_attachments(raw: Any) -> list[Attachment]:
    """Normalize a client attachment list, dropping malformed entries."""
    if not isinstance(raw, list):
        return []

    attachments = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        url = item.get("url")
        if not isinstance(url, str) or not url:
            continue
        media_type = item.get("mediaType", item.get("type"))
        attachments.append(
            Attachment(
                name=_text(item.get("name")),
                media_type=media_type if isinstance(media_type, str) and media_type else DEFAULT_MEDIA_TYPE,
                url=url,
            )
        )
    return attachments


def parse_reply_to(raw: Any) -> ReplyRef | None:
    """Accept either a bare message id or a {id, name, text} object."""
    if isinstance(raw, str) and raw:
        return ReplyRef(id=raw)
    if isinstance(raw, Mapping):
        reply_id = raw.get("id")
        if isinstance(reply_id, int) and not isinstance(reply_id, bool):
            reply_id = str(reply_id)
        if isinstance(reply_id, str) and reply_id:
            name = raw.get("name")
            text = raw.get("text")
            return ReplyRef(
                id=reply_id,
                name=name if isinstance(name, str) else None,
                text=text if isinstance(text, str) else None,
            )
    return None


def _require_mapping(payload: Any) -> Mapping:
    if not isinstance(payload, Mapping):
        raise InvalidPayload("payload must be an object")
    return payload


def _target_id(payload: Mapping) -> Any:
    return payload.get("messageId", payload.get("id"))


def parse_create(payload: Any) -> CreateRequest:
    """Parse a sendMessage payload."""
    payload = _require_mapping(payload)
    return CreateRequest(
        message_id=_identifier(payload.get("id"), "id"),
        author_id=_identifier(payload.get("userId"), "userId"),
        display_name=_text(payload.get("name")),
        body=_text(payload.get("text")),
        attachments=parse_attachments(payload.get("attachments")),
        reply_to=parse_reply_to(payload.get("replyTo")),
    )


def parse_edit(payload: Any) -> EditRequest:
    """Parse an editMessage payload."""
    payload = _require_mapping(payload)
    new_body = payload.get("newText", payload.get("text"))
    return EditRequest(
        message_id=_identifier(_target_id(payload), "messageId"),
        author_id=_identifier(payload.get("userId"), "userId"),
        new_body=new_body if isinstance(new_body, str) else None,
    )


def parse_delete(payload: Any) -> DeleteRequest:
    """Parse a deleteMessage payload."""
    payload = _require_mapping(payload)
    return DeleteRequest(
        message_id=_identifier(_target_id(payload), "messageId"),
        author_id=_identifier(payload.get("userId"), "userId"),
    )
