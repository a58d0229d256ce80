"""
Techelons — college fest registration backend
Entry point: creates the app, registers routers + middleware and error handlers,
creates tables on startup and disposes the engine on shutdown.
"""
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from techelons.config import settings
from techelons.errors import TechelonsError
from techelons.middlewares import RateLimitMiddleware
from techelons.models.base import Base, engine

# ── Handlers ──────────────────────────────────────────────────────────────────
from techelons.handlers.common import router as common_router
from techelons.handlers.registration import router as registration_router
from techelons.handlers.techelons import router as techelons_router
from techelons.handlers.workshop import router as workshop_router
from techelons.handlers.content import router as content_router
from techelons.handlers.admin.registrations import router as admin_registrations_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables on startup."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready.")
    except Exception as e:
        logger.critical(
            "Cannot connect to database!\n"
            "   URL: %s\n"
            "   Error: %s\n\n"
            "   → Locally: start PostgreSQL or use SQLite "
            "(DATABASE_URL=sqlite+aiosqlite:///./techelons.db)",
            settings.DATABASE_URL.split("@")[-1],   # hide credentials in log
            e,
        )
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Techelons backend…")
    await create_tables()
    if not settings.smtp_enabled:
        logger.warning("SMTP credentials not set: confirmation emails will not be delivered")
    try:
        yield
    finally:
        logger.info("Shutting down…")
        await engine.dispose()
        logger.info("Shutdown complete.")


def create_app() -> FastAPI:
    app = FastAPI(title="Techelons", lifespan=lifespan)

    # ── Error handlers ────────────────────────────────────────────────────────
    @app.exception_handler(TechelonsError)
    async def handle_app_error(request: Request, exc: TechelonsError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # ── Middlewares ───────────────────────────────────────────────────────────
    app.add_middleware(
        RateLimitMiddleware,
        rate=settings.RATE_LIMIT_REQUESTS,
        period=settings.RATE_LIMIT_PERIOD,
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(common_router)
    app.include_router(registration_router)
    app.include_router(techelons_router)
    app.include_router(workshop_router)
    app.include_router(content_router)
    app.include_router(admin_registrations_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("techelons.main:app", host="0.0.0.0", port=8000)
