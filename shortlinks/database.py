from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from .config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    """Engine keyword arguments for the configured backend.

    SQLite (tests, local runs) gets a busy timeout so concurrent click updates
    wait for the write lock. Server databases get a checked, recycled pool.
    """
    options: dict[str, Any] = {"echo": settings.ENVIRONMENT == "development"}
    if make_url(database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"timeout": settings.DB_BUSY_TIMEOUT}
    else:
        options.update(
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=30,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


def build_engine(database_url: str) -> AsyncEngine:
    new_engine = create_async_engine(database_url, **engine_options(database_url))
    if new_engine.dialect.name == "sqlite":
        # SQLite leaves foreign keys off per connection; owner_id must point at a real account
        @event.listens_for(new_engine.sync_engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return new_engine


engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

class Base(DeclarativeBase):
    pass

async def get_db():
    async with AsyncSessionLocal() as session:
        yield session

async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
