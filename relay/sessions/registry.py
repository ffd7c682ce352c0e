"""Registry of connected client sessions."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from ..config import SEND_TIMEOUT
from ..logging_config import get_logger
from ..models import OutboundEvent

logger = get_logger(__name__)


class Connection(Protocol):
    """The subset of a WebSocket the registry needs."""

    async def accept(self) -> None:
        ...

    async def send_json(self, data: Any) -> None:
        ...


class ISessionRegistry(Protocol):
    """Fan-out and per-client delivery over connected sessions."""

    async def broadcast(self, event: OutboundEvent) -> int:
        """Send to every connected session. Returns the number delivered."""
        ...

    async def send(self, session_id: str, event: OutboundEvent) -> bool:
        """Send to a single session. Returns False if it is gone."""
        ...


@dataclass
class Session:
    """A connected client."""

    id: str
    connection: Connection
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    async def deliver(self, event: OutboundEvent) -> None:
        await self.connection.send_json(event.to_wire())


class SessionRegistry:
    """Tracks connected sessions and delivers events to them.

    Each delivery is bounded by send_timeout. A session that fails or does
    not take a frame in time is dropped, so one stalled reader cannot hold
    up acks or fan-out to everyone else.
    """

    def __init__(self, send_timeout: float = SEND_TIMEOUT) -> None:
        if send_timeout <= 0:
            raise ValueError("send_timeout must be positive")
        self._sessions: dict[str, Session] = {}
        self._send_timeout = send_timeout

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def connect(self, connection: Connection) -> Session:
        """Accept the connection and register a new session."""
        await connection.accept()
        session = Session(id=str(uuid.uuid4()), connection=connection)
        self._sessions[session.id] = session
        logger.info("Session connected: %s (%d active)", session.id, len(self._sessions))
        return session

    def disconnect(self, session_id: str) -> None:
        """Forget a session. Unknown ids are ignored."""
        if self._sessions.pop(session_id, None) is not None:
            logger.info(
                "Session disconnected: %s (%d active)", session_id, len(self._sessions)
            )

    async def broadcast(self, event: OutboundEvent) -> int:
        """Send to every connected session. Returns the number delivered."""
        sessions = list(self._sessions.values())
        if not sessions:
            return 0

        results = await asyncio.gather(
            *[self._deliver(session, event) for session in sessions],
            return_exceptions=True,
        )

        delivered = 0
        for session, result in zip(sessions, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Dropping session %s after failed %s delivery: %s",
                    session.id,
                    event.event.value,
                    result,
                )
                self.disconnect(session.id)
            else:
                delivered += 1
        return delivered

    async def send(self, session_id: str, event: OutboundEvent) -> bool:
        """Send to a single session. Returns False if it is gone."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug("Session %s gone, dropping %s", session_id, event.event.value)
            return False

        try:
            await self._deliver(session, event)
        except Exception as e:
            logger.warning(
                "Dropping session %s after failed %s delivery: %s",
                session_id,
                event.event.value,
                e,
            )
            self.disconnect(session_id)
            return False
        return True

    async def _deliver(self, session: Session, event: OutboundEvent) -> None:
        try:
            await asyncio.wait_for(session.deliver(event), timeout=self._send_timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"no progress after {self._send_timeout:g}s") from e
