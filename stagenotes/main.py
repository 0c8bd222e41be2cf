"""
StageNotes — FastAPI application entry-point.

Run with:
    uvicorn stagenotes.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

import stagenotes.models  # noqa: F401  (registers tables on Base.metadata)
from stagenotes.config import BASE_DIR, settings
from stagenotes.database import Base, engine
from stagenotes.errors import BoardError, ExternalStoreError, RateLimitedError
from stagenotes.services.change_feed import NoteChangeFeed
from stagenotes.services.composer import ComposerRegistry

# ── Import routers ──
from stagenotes.routers import boards, device, notes, pages

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Live presentation feedback board — questions, ideas and upvotes.",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Per-process realtime state ──
app.state.change_feed = NoteChangeFeed()
app.state.composers = ComposerRegistry(
    {
        "desktop": settings.NOTE_INTERVAL_MS,
        "mobile": settings.MOBILE_NOTE_INTERVAL_MS,
    },
    max_entries=settings.COMPOSER_REGISTRY_SIZE,
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))

# ── Static files ──
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

# ── Register routers ──
app.include_router(pages.router)
app.include_router(boards.router)
app.include_router(notes.router)
app.include_router(device.router)


# ── Error handling ──
@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError):
    if isinstance(exc, ExternalStoreError):
        # Details were logged by the store; users get a generic message
        return JSONResponse(
            {"detail": "Something went wrong, please try again"},
            status_code=exc.status_code,
        )
    if isinstance(exc, RateLimitedError):
        return JSONResponse(
            {"detail": exc.detail, "retry_after_ms": round(exc.retry_after_ms)},
            status_code=exc.status_code,
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)
