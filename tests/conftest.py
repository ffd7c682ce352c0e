"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.fakes import RecordingRegistry, TickingClock  # noqa: E402


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from relay.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def registry():
    return RecordingRegistry()


@pytest.fixture
def broadcaster(registry, storage):
    """Create Broadcaster over the recording registry."""
    from relay.broadcast import Broadcaster

    return Broadcaster(registry, storage, history_limit=500)


@pytest.fixture
def retention(storage):
    """Create RetentionPolicy with the default cap."""
    from relay.retention import RetentionPolicy

    return RetentionPolicy(storage, cap=500)


@pytest.fixture
def engine(storage, retention, broadcaster, clock):
    """Create MessageEngine wired to in-memory storage and a recording registry."""
    from relay.engine import MessageEngine

    return MessageEngine(
        storage=storage,
        retention=retention,
        broadcaster=broadcaster,
        clock=clock,
    )


@pytest.fixture
def make_message(clock):
    """Build Message instances with increasing created_at."""
    from relay.models import Message

    def _make(message_id: str, author_id: str = "u1", body: str = "hi", **kwargs):
        return Message(
            id=message_id,
            author_id=author_id,
            display_name=kwargs.pop("display_name", "Alice"),
            body=body,
            created_at=kwargs.pop("created_at", None) or clock(),
            **kwargs,
        )

    return _make
