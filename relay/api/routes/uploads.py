"""Attachment upload route."""

import asyncio
import mimetypes
import re
import uuid
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from ...app import Application
from ...logging_config import get_logger

logger = get_logger(__name__)

UPLOADS_URL_PREFIX = "/uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class AttachmentResponse(BaseModel):
    """Attachment triple, ready to be sent back in a sendMessage payload."""

    name: str
    mediaType: str
    url: str


def stored_name(filename: str | None) -> str:
    """Random-prefixed, path-free file name for storage on disk."""
    base = Path(filename or "").name or "file"
    safe = _UNSAFE_CHARS.sub("_", base)[:100]
    return f"{uuid.uuid4().hex}-{safe}"


def _write(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


def create_uploads_router(app: Application) -> APIRouter:
    """Create uploads router."""
    router = APIRouter(tags=["uploads"])

    @router.post("/upload", response_model=AttachmentResponse)
    async def upload(file: UploadFile = File(...)) -> dict:
        """Store a file and return the attachment triple pointing at it."""
        content = await file.read(app.max_upload_bytes + 1)
        if not content:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
        if len(content) > app.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="File too large",
            )

        name = stored_name(file.filename)
        try:
            await asyncio.to_thread(_write, app.upload_dir / name, content)
        except OSError as e:
            logger.error("Upload write failed for %s: %s", name, e, exc_info=True)
            raise HTTPException(status_code=500, detail="server error")

        media_type = (
            file.content_type
            or mimetypes.guess_type(file.filename or "")[0]
            or "application/octet-stream"
        )
        logger.info("Stored upload %s (%d bytes)", name, len(content))
        return {
            "name": file.filename or name,
            "mediaType": media_type,
            "url": f"{UPLOADS_URL_PREFIX}/{name}",
        }

    return router
