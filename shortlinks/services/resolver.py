import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from ..crud import get_link_by_short_code
from ..utils import normalize_target_url


class Outcome(enum.Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Resolution:
    outcome: Outcome
    link_id: Optional[int] = None
    target_url: Optional[str] = None


NOT_FOUND = Resolution(Outcome.NOT_FOUND)
EXPIRED = Resolution(Outcome.EXPIRED)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return as_utc(expires_at) < now


async def resolve(db: AsyncSession, short_code: str) -> Resolution:
    """Map a short code to a redirect decision.

    Soft-deleted links are reported exactly like codes that never existed.
    Store errors propagate to the caller.
    """
    link = await get_link_by_short_code(db, short_code)
    if link is None or not link.is_active:
        return NOT_FOUND
    if is_expired(link.expires_at):
        return EXPIRED
    return Resolution(
        Outcome.RESOLVED,
        link_id=link.id,
        target_url=normalize_target_url(link.original_url),
    )
