import asyncio
import logging
import pytest

from shortlinks.crud import get_link_by_id
from shortlinks.models import Link
from shortlinks.services import clicks
from shortlinks.services.resolver import Outcome, resolve


async def resolve_and_count(code: str):
    # One session per simulated request, like the redirect route
    async with clicks.AsyncSessionLocal() as session:
        resolution = await resolve(session, code)
    assert resolution.outcome is Outcome.RESOLVED
    await clicks.record_click(resolution.link_id)


@pytest.mark.asyncio
async def test_record_click_increments_and_stamps(db):
    link = Link(original_url="https://foo.com", short_code="one")
    db.add(link)
    await db.commit()

    await clicks.record_click(link.id)

    stored = await get_link_by_id(db, link.id)
    assert stored.click_count == 1
    assert stored.last_clicked_at is not None


@pytest.mark.asyncio
async def test_concurrent_clicks_are_not_lost(db):
    link = Link(original_url="https://foo.com", short_code="hot", click_count=7)
    db.add(link)
    await db.commit()

    await asyncio.gather(*(resolve_and_count("hot") for _ in range(20)))

    stored = await get_link_by_id(db, link.id)
    assert stored.click_count == 27


@pytest.mark.asyncio
async def test_record_click_swallows_store_errors(monkeypatch, caplog):
    class BrokenSession:
        async def __aenter__(self):
            raise ConnectionError("database unreachable")

        async def __aexit__(self, *exc_info):
            return False

    monkeypatch.setattr(clicks, "AsyncSessionLocal", BrokenSession)

    with caplog.at_level(logging.ERROR):
        await clicks.record_click(42)

    assert "Failed to record click for link 42" in caplog.text


@pytest.mark.asyncio
async def test_redirect_survives_click_failure(client, monkeypatch):
    await client.post("/api/urls/shorten", json={"original_url": "https://foo.com", "custom_code": "fragile"})

    async def explode(db, link_id):
        raise RuntimeError("write failed")

    monkeypatch.setattr(clicks, "increment_link_clicks", explode)

    response = await client.get("/fragile")
    assert response.status_code == 302
    assert response.headers["location"] == "https://foo.com"
