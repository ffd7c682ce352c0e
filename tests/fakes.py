"""Test doubles shared across test modules."""

import asyncio
from datetime import datetime, timedelta, timezone


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


class RecordingRegistry:
    """Session registry stand-in that records everything it is asked to deliver."""

    def __init__(self):
        self.broadcasts = []
        self.sent = []

    async def broadcast(self, event):
        self.broadcasts.append(event)
        return 1

    async def send(self, session_id, event):
        self.sent.append((session_id, event))
        return True


class FakeConnection:
    """WebSocket stand-in for SessionRegistry tests."""

    def __init__(self, fail: bool = False):
        self.accepted = False
        self.frames = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection closed")
        self.frames.append(data)


class HangingConnection(FakeConnection):
    """A peer that stopped reading: send_json never completes."""

    async def send_json(self, data):
        await asyncio.Event().wait()
