"""WebSocket route carrying realtime chat events."""

import json
from typing import Any

from fastapi import APIRouter, WebSocket
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...app import Application
from ...logging_config import get_logger
from ...models import Ack, ClientEvent, OutboundEvent, ServerEvent

logger = get_logger(__name__)


class ClientFrame(BaseModel):
    """A frame sent by a client: {"event", "data", "ackId"?}."""

    model_config = ConfigDict(populate_by_name=True)

    event: str
    data: Any = None
    ack_id: int | str | None = Field(default=None, alias="ackId")


def _decode(message: dict) -> str | None:
    if message.get("text") is not None:
        return message["text"]
    if message.get("bytes") is not None:
        return message["bytes"].decode("utf-8", errors="replace")
    return None


async def dispatch(app: Application, session_id: str, raw: str) -> None:
    """Route one client frame to the engine or the broadcaster."""
    try:
        decoded = json.loads(raw)
    except ValueError as e:
        logger.warning("Undecodable frame from %s: %s", session_id, e)
        return

    try:
        frame = ClientFrame.model_validate(decoded)
    except ValidationError as e:
        logger.warning("Malformed frame from %s: %s", session_id, e)
        ack_id = decoded.get("ackId") if isinstance(decoded, dict) else None
        if isinstance(ack_id, (int, str)) and not isinstance(ack_id, bool):
            await _send_ack(app, session_id, ack_id, Ack.failure("Invalid frame"))
        return

    try:
        event = ClientEvent(frame.event)
    except ValueError:
        logger.warning("Unknown event %r from %s", frame.event, session_id)
        await _ack(app, session_id, frame, Ack.failure("Unknown event"))
        return

    if event is ClientEvent.REQUEST_INIT:
        await app.broadcaster.on_init(session_id)
        return

    engine = app.engine
    if event is ClientEvent.SEND_MESSAGE:
        ack = await engine.handle_send_message(frame.data)
    elif event is ClientEvent.EDIT_MESSAGE:
        ack = await engine.handle_edit_message(frame.data)
    else:
        ack = await engine.handle_delete_message(frame.data)

    await _ack(app, session_id, frame, ack)


async def _ack(app: Application, session_id: str, frame: ClientFrame, ack: Ack) -> None:
    if frame.ack_id is None:
        return
    await _send_ack(app, session_id, frame.ack_id, ack)


async def _send_ack(app: Application, session_id: str, ack_id: int | str, ack: Ack) -> None:
    await app.sessions.send(
        session_id,
        OutboundEvent(event=ServerEvent.ACK, data=ack.to_wire(), ack_id=ack_id),
    )


def create_realtime_router(app: Application) -> APIRouter:
    """Create realtime router."""
    router = APIRouter(tags=["realtime"])

    @router.websocket("/ws")
    async def socket_endpoint(websocket: WebSocket) -> None:
        """One task per client; frames from a client are handled in order."""
        registry = app.sessions
        session = await registry.connect(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                if session.id not in registry:
                    # Dropped after a failed or stalled delivery
                    break
                raw = _decode(message)
                if raw is None:
                    continue
                await dispatch(app, session.id, raw)
        finally:
            registry.disconnect(session.id)

    return router
