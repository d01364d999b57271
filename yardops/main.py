"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from yardops.api.routes import api_router
from yardops.core.config import Settings, settings
from yardops.core.database import build_engine, build_session_factory, init_db
from yardops.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from yardops.core.logging import configure_logging
from yardops.services.email import EmailSender

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    # Startup: Create database tables
    init_db(app.state.engine)
    logger.info("YardOps started")
    yield
    app.state.engine.dispose()


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the application with its own engine, session factory and email sender."""
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL, app_settings.LOG_JSON)

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        description="Meter reading compliance service",
        lifespan=lifespan,
    )

    engine = build_engine(app_settings.DATABASE_URL)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.email_sender = EmailSender(app_settings)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(PermissionDeniedError)
    async def permission_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
        return _error_response(403, exc)

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"message": f"Welcome to {app_settings.PROJECT_NAME}", "version": app_settings.VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "yardops.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
