"""Live-message cap enforcement."""

import asyncio
from typing import Protocol

from ..config import MAX_MESSAGES
from ..errors import StorageError
from ..logging_config import get_logger
from ..storage import IStorage

logger = get_logger(__name__)


class IRetentionPolicy(Protocol):
    """Bounds the number of live messages kept in storage."""

    @property
    def cap(self) -> int:
        """Maximum number of live messages."""
        ...

    async def enforce(self) -> int:
        """Evict oldest rows until the live count is within the cap."""
        ...


class RetentionPolicy:
    """Evicts the oldest rows once the live count exceeds the cap.

    Called synchronously after every insert. Failures are logged and
    swallowed: the insert that triggered enforcement is already committed.
    """

    def __init__(self, storage: IStorage, cap: int = MAX_MESSAGES):
        if cap <= 0:
            raise ValueError("retention cap must be positive")
        self._storage = storage
        self._cap = cap
        self._lock = asyncio.Lock()

    @property
    def cap(self) -> int:
        return self._cap

    async def enforce(self) -> int:
        """Evict oldest rows until the live count is within the cap."""
        evicted = 0
        async with self._lock:
            try:
                live = await self._storage.count_live()
                # Evicted rows may already be soft-deleted, so recount.
                while live > self._cap:
                    removed = await self._storage.evict_oldest(live - self._cap)
                    if removed == 0:
                        break
                    evicted += removed
                    live = await self._storage.count_live()
            except StorageError as e:
                logger.error("Retention eviction failed: %s", e, exc_info=True)

        if evicted:
            logger.info(
                "Evicted %d messages",
                evicted,
                extra={"context": {"cap": self._cap, "evicted": evicted}},
            )
        return evicted
