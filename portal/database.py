"""Portal database wiring: engine construction, sessions and the FastAPI dependency.

SQLite is used for local development and tests, PostgreSQL in production.
SQLite only enforces the ``role_id`` foreign key when the pragma is switched
on for each new connection, which ``build_engine`` arranges.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import settings


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    @event.listens_for(async_engine.sync_engine, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    async_engine = create_async_engine(url, echo=echo)
    if is_sqlite(url):
        enable_sqlite_foreign_keys(async_engine)
    return async_engine


def build_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url, echo=settings.echo_sql)
async_session_factory = build_session_factory(engine)


async def get_db():
    """FastAPI dependency yielding one session per request."""
    async with async_session_factory() as session:
        yield session
