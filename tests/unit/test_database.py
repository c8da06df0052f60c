import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from shortlinks import database
from shortlinks.services import links


def test_sqlite_gets_busy_timeout_and_no_pool_tuning():
    options = database.engine_options("sqlite+aiosqlite:///./local.db")

    assert options["connect_args"] == {"timeout": database.settings.DB_BUSY_TIMEOUT}
    assert "pool_size" not in options
    assert "pool_pre_ping" not in options


def test_postgres_gets_checked_recycled_pool():
    options = database.engine_options("postgresql+asyncpg://user:pw@db:5432/shortlinks")

    assert options["pool_pre_ping"] is True
    assert options["pool_size"] == database.settings.DB_POOL_SIZE
    assert options["max_overflow"] == database.settings.DB_MAX_OVERFLOW
    assert options["pool_recycle"] == database.settings.DB_POOL_RECYCLE
    assert "connect_args" not in options


@pytest.mark.asyncio
async def test_sqlite_connections_enforce_foreign_keys(db):
    assert (await db.execute(text("PRAGMA foreign_keys"))).scalar_one() == 1


@pytest.mark.asyncio
async def test_link_for_missing_owner_is_rejected(db):
    # A foreign-key failure is not a short-code collision and must not be retried
    with pytest.raises(IntegrityError):
        await links.create(db, "https://example.com", owner_id=424242)
