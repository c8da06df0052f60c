"""Create, list, retitle, delete and report on links."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List
from urllib.parse import urlsplit, urlunsplit

import validators
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..config import settings
from ..errors import InvalidUrlError, CodeTakenError, ExhaustedError, NotFoundOrForbiddenError
from ..models import Link
from ..observability import LINKS_CREATED_TOTAL
from ..utils import has_scheme, normalize_target_url
from . import codes

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"


@dataclass
class LinkStats:
    link: Link
    total_clicks: int
    last_clicked: Optional[datetime]


def validate_url(original_url: str) -> str:
    url = (original_url or "").strip()
    if not url:
        raise InvalidUrlError()
    # Bare domains are accepted and get https:// at redirect time
    if has_scheme(url) and urlsplit(url).scheme.lower() not in ("http", "https"):
        raise InvalidUrlError("Only http and https URLs can be shortened")
    # Scheme and host are case-insensitive; check a lower-cased copy
    parts = urlsplit(normalize_target_url(url))
    candidate = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment))
    if validators.url(candidate) is not True:
        raise InvalidUrlError()
    return url


def is_short_code_collision(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: links.short_code"
    # Postgres: 'duplicate key value violates unique constraint "ix_links_short_code"'
    return "short_code" in str(exc.orig)


async def create(
    db: AsyncSession,
    original_url: str,
    custom_code: Optional[str] = None,
    title: Optional[str] = None,
    expires_at: Optional[datetime] = None,
    owner_id: Optional[int] = None,
) -> Link:
    original_url = validate_url(original_url)

    def build(short_code: str) -> Link:
        return Link(
            original_url=original_url,
            short_code=short_code,
            title=title or DEFAULT_TITLE,
            expires_at=expires_at,
            owner_id=owner_id,
            click_count=0,
            is_active=True,
        )

    if custom_code:
        await codes.validate_custom(db, custom_code)
        try:
            link = await crud.create_link(db, build(custom_code))
        except IntegrityError as exc:
            await db.rollback()
            if not is_short_code_collision(exc):
                raise
            # Lost the race against a concurrent insert of the same code
            raise CodeTakenError()
    else:
        for _ in range(settings.CODE_GENERATION_ATTEMPTS):
            short_code = await codes.generate(db)
            try:
                link = await crud.create_link(db, build(short_code))
                break
            except IntegrityError as exc:
                await db.rollback()
                if not is_short_code_collision(exc):
                    raise
                logger.warning(f"Generated code {short_code} taken on insert, retrying")
        else:
            raise ExhaustedError()

    LINKS_CREATED_TOTAL.inc()
    logger.info(
        f"Created link {link.id} code={link.short_code} owner={owner_id}",
        extra={"link_id": link.id, "short_code": link.short_code, "owner_id": owner_id},
    )
    return link


async def list_for_owner(db: AsyncSession, owner_id: Optional[int]) -> List[Link]:
    # Anonymous callers never see a list, otherwise every user's links would leak
    if owner_id is None:
        return []
    return await crud.list_active_links_by_owner(db, owner_id)


async def update_title(db: AsyncSession, link_id: int, title: str, owner_id: Optional[int] = None) -> Link:
    link = await crud.update_link_title(db, link_id, title, owner_id)
    if link is None:
        raise NotFoundOrForbiddenError()
    logger.info(f"Retitled link {link_id} owner={owner_id}")
    return link


async def delete(db: AsyncSession, link_id: int, owner_id: Optional[int] = None):
    if not await crud.soft_delete_link(db, link_id, owner_id):
        raise NotFoundOrForbiddenError()
    logger.info(f"Soft-deleted link {link_id} owner={owner_id}")


async def stats(db: AsyncSession, link_id: int, owner_id: Optional[int] = None) -> LinkStats:
    link = await crud.get_owned_link(db, link_id, owner_id)
    if link is None:
        raise NotFoundOrForbiddenError()
    return LinkStats(link=link, total_clicks=link.click_count or 0, last_clicked=link.last_clicked_at)
