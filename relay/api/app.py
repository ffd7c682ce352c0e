"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from ..app import Application
from .routes import health, realtime, uploads


# Global application instance
_app: Application | None = None


def get_app() -> Application:
    """Get the global application instance."""
    global _app
    if not _app:
        _app = Application()
    return _app


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    application = application or get_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan."""
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="Relay API",
        description="Real-time group chat relay",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.include_router(health.create_health_router())
    fastapi_app.include_router(realtime.create_realtime_router(application))
    fastapi_app.include_router(uploads.create_uploads_router(application))

    fastapi_app.mount(
        uploads.UPLOADS_URL_PREFIX,
        StaticFiles(directory=application.upload_dir, check_dir=False),
        name="uploads",
    )
    # Catch-all mount, must come last.
    if application.public_dir.is_dir():
        fastapi_app.mount(
            "/",
            StaticFiles(directory=application.public_dir, html=True),
            name="public",
        )

    return fastapi_app
