"""Message mutation engine."""

from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from ..broadcast import IBroadcaster
from ..config import MAX_TEXT_LENGTH
from ..errors import (
    Forbidden,
    NotFound,
    NotFoundOrForbidden,
    RelayError,
    StorageError,
)
from ..logging_config import get_logger
from ..models import Ack, Message
from ..retention import IRetentionPolicy
from ..storage import IStorage
from .payloads import CreateRequest, parse_create, parse_delete, parse_edit

logger = get_logger(__name__)


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IMessageEngine(Protocol):
    """Validates and applies client mutations."""

    async def handle_send_message(self, payload: Any) -> Ack:
        """Create a message, broadcast messageCreated, return the ack."""
        ...

    async def handle_edit_message(self, payload: Any) -> Ack:
        """Edit a message, broadcast messageEdited, return the ack."""
        ...

    async def handle_delete_message(self, payload: Any) -> Ack:
        """Soft-delete a message, broadcast messageDeleted, return the ack."""
        ...


class MessageEngine:
    """Applies create/edit/delete against storage and reports the outcome.

    The typed operations (create_message, edit_message, delete_message)
    raise RelayError subclasses. The handle_* entry points wrap them: every
    request yields exactly one Ack, and only successful requests are
    broadcast.
    """

    def __init__(
        self,
        storage: IStorage,
        retention: IRetentionPolicy,
        broadcaster: IBroadcaster,
        max_text_length: int = MAX_TEXT_LENGTH,
        clock: Clock = utc_now,
    ):
        self._storage = storage
        self._retention = retention
        self._broadcaster = broadcaster
        self._max_text_length = max_text_length
        self._clock = clock

    def _cap_text(self, text: str) -> str:
        if len(text) > self._max_text_length:
            return text[: self._max_text_length]
        return text

    async def create_message(self, request: CreateRequest) -> Message:
        """Persist a new message and enforce retention."""
        message = Message(
            id=request.message_id,
            author_id=request.author_id,
            display_name=request.display_name,
            body=self._cap_text(request.body),
            created_at=self._clock(),
            attachments=list(request.attachments),
            reply_to=request.reply_to,
            deleted=False,
            edited=False,
        )
        await self._storage.insert_message(message)
        await self._retention.enforce()
        return message

    async def edit_message(
        self, message_id: str, author_id: str, new_body: str | None
    ) -> Message:
        """Replace the body of a live message owned by author_id."""
        body = self._cap_text(new_body) if new_body is not None else None
        try:
            return await self._storage.update_text(
                message_id, author_id, body, self._clock()
            )
        except NotFoundOrForbidden:
            raise await self._classify(message_id, author_id)

    async def delete_message(self, message_id: str, author_id: str) -> Message:
        """Soft-delete a live message owned by author_id."""
        try:
            return await self._storage.mark_deleted(
                message_id, author_id, self._clock()
            )
        except NotFoundOrForbidden:
            raise await self._classify(message_id, author_id)

    async def _classify(self, message_id: str, author_id: str) -> NotFoundOrForbidden:
        """Work out why an atomic update matched nothing, for the logs."""
        existing = await self._storage.get_message(message_id)
        if existing is None:
            return NotFound(message_id, f"message {message_id!r} does not exist")
        if existing.author_id != author_id:
            return Forbidden(
                message_id,
                f"user {author_id!r} is not the author of {message_id!r}",
            )
        if existing.deleted:
            return NotFound(message_id, f"message {message_id!r} is deleted")
        # Row changed between the update and the lookup.
        return NotFoundOrForbidden(message_id)

    async def handle_send_message(self, payload: Any) -> Ack:
        """Create a message, broadcast messageCreated, return the ack."""
        try:
            message = await self.create_message(parse_create(payload))
        except Exception as e:
            return self._failure("sendMessage", e)

        logger.info(
            "Message created: %s by %s", message.id, message.author_id,
            extra={"context": {"message_id": message.id, "author_id": message.author_id}},
        )
        await self._broadcaster.on_created(message)
        return Ack.success()

    async def handle_edit_message(self, payload: Any) -> Ack:
        """Edit a message, broadcast messageEdited, return the ack."""
        try:
            request = parse_edit(payload)
            message = await self.edit_message(
                request.message_id, request.author_id, request.new_body
            )
        except Exception as e:
            return self._failure("editMessage", e)

        logger.info("Message edited: %s", message.id)
        await self._broadcaster.on_edited(message)
        return Ack.success(msg=message.to_wire())

    async def handle_delete_message(self, payload: Any) -> Ack:
        """Soft-delete a message, broadcast messageDeleted, return the ack."""
        try:
            request = parse_delete(payload)
            message = await self.delete_message(request.message_id, request.author_id)
        except Exception as e:
            return self._failure("deleteMessage", e)

        logger.info("Message deleted: %s", message.id)
        await self._broadcaster.on_deleted(message.id, message.deleted_at)
        return Ack.success()

    def _failure(self, operation: str, error: Exception) -> Ack:
        if isinstance(error, StorageError):
            logger.error("%s storage error: %s", operation, error, exc_info=error)
        elif isinstance(error, RelayError):
            logger.warning("%s rejected: %s", operation, error)
            return Ack.failure(error.public_message)
        else:
            logger.error("%s error: %s", operation, error, exc_info=error)
        return Ack.failure(StorageError.public_message)
