"""Broadcast coordinator: turns applied mutations into session events."""

from datetime import datetime
from typing import Protocol

from ..config import MAX_MESSAGES
from ..errors import StorageError
from ..logging_config import get_logger
from ..models import Message, OutboundEvent, ServerEvent
from ..sessions import ISessionRegistry
from ..storage import IStorage

logger = get_logger(__name__)


class IBroadcaster(Protocol):
    """Fan-out of message events and history snapshots."""

    async def on_init(self, session_id: str) -> None:
        """Send the current history to one session."""
        ...

    async def on_created(self, message: Message) -> None:
        """Broadcast messageCreated."""
        ...

    async def on_edited(self, message: Message) -> None:
        """Broadcast messageEdited."""
        ...

    async def on_deleted(self, message_id: str, deleted_at: datetime) -> None:
        """Broadcast messageDeleted."""
        ...


class Broadcaster:
    """Delivers events to sessions on a best-effort, at-most-once basis."""

    def __init__(
        self,
        registry: ISessionRegistry,
        storage: IStorage,
        history_limit: int = MAX_MESSAGES,
    ):
        self._registry = registry
        self._storage = storage
        self._history_limit = history_limit

    async def on_init(self, session_id: str) -> None:
        """Send the current history to one session."""
        try:
            messages = await self._storage.list_live(self._history_limit)
        except StorageError as e:
            logger.error("History read for %s failed: %s", session_id, e, exc_info=True)
            return

        await self._registry.send(
            session_id,
            OutboundEvent(
                event=ServerEvent.INIT_MESSAGES,
                data=[m.to_wire() for m in messages],
            ),
        )
        logger.debug("Sent %d messages to %s", len(messages), session_id)

    async def on_created(self, message: Message) -> None:
        """Broadcast messageCreated."""
        await self._publish(OutboundEvent(event=ServerEvent.MESSAGE_CREATED, data=message.to_wire()))

    async def on_edited(self, message: Message) -> None:
        """Broadcast messageEdited."""
        await self._publish(OutboundEvent(event=ServerEvent.MESSAGE_EDITED, data=message.to_wire()))

    async def on_deleted(self, message_id: str, deleted_at: datetime) -> None:
        """Broadcast messageDeleted."""
        await self._publish(
            OutboundEvent(
                event=ServerEvent.MESSAGE_DELETED,
                data={"id": message_id, "deletedAt": deleted_at.isoformat()},
            )
        )

    async def _publish(self, event: OutboundEvent) -> None:
        try:
            delivered = await self._registry.broadcast(event)
        except Exception as e:
            logger.error("Broadcast of %s failed: %s", event.event.value, e, exc_info=True)
            return
        logger.debug("%s delivered to %d sessions", event.event.value, delivered)
