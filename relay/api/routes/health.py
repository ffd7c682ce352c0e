"""Health check route."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse


def create_health_router() -> APIRouter:
    """Create health router."""
    router = APIRouter(tags=["health"])

    @router.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """Liveness probe."""
        return "OK"

    return router
