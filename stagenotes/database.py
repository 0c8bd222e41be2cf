"""
StageNotes – Async SQLAlchemy engine, session, and declarative base.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from stagenotes.config import settings

# ── Engine ──
# aiosqlite connections belong to the event loop that opened them, so
# SQLite gets a fresh connection per checkout.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    poolclass=NullPool if settings.DATABASE_URL.startswith("sqlite") else None,
)

async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Shared metadata for boards, notes and votes."""


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Request-scoped session; commits on success, rolls back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
