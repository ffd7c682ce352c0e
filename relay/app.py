"""Application bootstrap and lifecycle management."""

import os
from pathlib import Path
from typing import Protocol

from .broadcast import Broadcaster, IBroadcaster
from .config import (
    DEFAULT_PUBLIC_DIR,
    DEFAULT_UPLOAD_DIR,
    MAX_MESSAGES,
    MAX_TEXT_LENGTH,
    MAX_UPLOAD_BYTES,
    SEND_TIMEOUT,
    STORAGE_TIMEOUT,
    positive_float_from_env,
    positive_int_from_env,
    resolve_db_path,
    resolve_dir,
)
from .engine import IMessageEngine, MessageEngine
from .logging_config import get_logger
from .retention import RetentionPolicy
from .sessions import SessionRegistry
from .storage import IStorage, Storage

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between test runs."""
        ...


class Application:
    """Main application bootstrap.

    Settings not passed explicitly are read from the environment.
    """

    def __init__(
        self,
        db_path: str | None = None,
        max_messages: int | None = None,
        max_text_length: int | None = None,
        upload_dir: str | Path | None = None,
        public_dir: str | Path | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        if max_messages is None:
            max_messages = positive_int_from_env("MAX_MESSAGES", MAX_MESSAGES)
        if max_text_length is None:
            max_text_length = positive_int_from_env("MAX_TEXT_LENGTH", MAX_TEXT_LENGTH)
        if max_messages <= 0:
            raise ValueError("max_messages must be positive")
        if max_text_length <= 0:
            raise ValueError("max_text_length must be positive")
        self.max_messages = max_messages
        self.max_text_length = max_text_length
        self.max_upload_bytes = positive_int_from_env("MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES)
        self.storage_timeout = positive_float_from_env("STORAGE_TIMEOUT", STORAGE_TIMEOUT)
        self.send_timeout = positive_float_from_env("SEND_TIMEOUT", SEND_TIMEOUT)
        self.upload_dir = resolve_dir(upload_dir or os.getenv("UPLOAD_DIR"), DEFAULT_UPLOAD_DIR)
        self.public_dir = resolve_dir(public_dir or os.getenv("PUBLIC_DIR"), DEFAULT_PUBLIC_DIR)

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._sessions: SessionRegistry | None = None
        self._broadcaster: IBroadcaster | None = None
        self._retention: RetentionPolicy | None = None
        self._engine: IMessageEngine | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path, timeout=self.storage_timeout)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. SessionRegistry (no dependencies)
        self._sessions = SessionRegistry(send_timeout=self.send_timeout)

        # 3. Broadcaster (depends on SessionRegistry + Storage)
        self._broadcaster = Broadcaster(
            self._sessions, self._storage, history_limit=self.max_messages
        )

        # 4. RetentionPolicy (depends on Storage)
        self._retention = RetentionPolicy(self._storage, cap=self.max_messages)

        # 5. MessageEngine (depends on Storage, RetentionPolicy, Broadcaster)
        self._engine = MessageEngine(
            storage=self._storage,
            retention=self._retention,
            broadcaster=self._broadcaster,
            max_text_length=self.max_text_length,
        )
        logger.info(
            "All components initialized successfully",
            extra={"context": {"max_messages": self.max_messages}},
        )

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._storage is not None:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset data between test runs."""
        if self._storage is not None:
            await self._storage.clear()
            logger.info("Storage cleared")

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if self._storage is None:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def sessions(self) -> SessionRegistry:
        """Get session registry."""
        if self._sessions is None:
            raise RuntimeError("Application not started")
        return self._sessions

    @property
    def broadcaster(self) -> IBroadcaster:
        """Get broadcaster instance."""
        if self._broadcaster is None:
            raise RuntimeError("Application not started")
        return self._broadcaster

    @property
    def engine(self) -> IMessageEngine:
        """Get message engine instance."""
        if self._engine is None:
            raise RuntimeError("Application not started")
        return self._engine
