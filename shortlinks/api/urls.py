from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ..config import settings
from ..database import get_db
from ..models import Link
from ..schemas import Envelope, LinkCreate, LinkUpdate, LinkResponse, LinkStatsResponse, LinkList, MessagePayload
from ..security import get_optional_owner_id
from ..services import links
from ..services.rate_limiter import RateLimiter

router = APIRouter()

shorten_limiter = RateLimiter(
    requests=settings.SHORTEN_RATE_LIMIT,
    window=settings.SHORTEN_RATE_WINDOW,
    scope="shorten",
)


def base_url(request: Request) -> str:
    return (settings.PUBLIC_BASE_URL or str(request.base_url)).rstrip("/")


def to_response(link: Link, request: Request) -> LinkResponse:
    return LinkResponse(
        id=link.id,
        original_url=link.original_url,
        short_code=link.short_code,
        short_url=f"{base_url(request)}/{link.short_code}",
        title=link.title,
        created_at=link.created_at,
        expires_at=link.expires_at,
        clicks=link.click_count or 0,
        last_clicked_at=link.last_clicked_at,
    )


@router.post(
    "/shorten",
    response_model=Envelope[LinkResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(shorten_limiter)],
)
async def shorten_url(
    link_in: LinkCreate,
    request: Request,
    owner_id: Optional[int] = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db)
):
    # Anonymous creation is allowed; such links simply have no owner
    link = await links.create(
        db,
        original_url=link_in.original_url,
        custom_code=link_in.custom_code,
        title=link_in.title,
        expires_at=link_in.expires_at,
        owner_id=owner_id,
    )
    return Envelope(data=to_response(link, request))


@router.get("/list", response_model=Envelope[LinkList])
async def list_urls(
    request: Request,
    owner_id: Optional[int] = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db)
):
    owned = await links.list_for_owner(db, owner_id)
    return Envelope(data=[to_response(link, request) for link in owned])


@router.put("/{link_id}", response_model=Envelope[LinkResponse])
async def update_url(
    link_id: int,
    link_in: LinkUpdate,
    request: Request,
    owner_id: Optional[int] = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db)
):
    link = await links.update_title(db, link_id, link_in.title, owner_id)
    return Envelope(data=to_response(link, request))


@router.delete("/{link_id}", response_model=Envelope[MessagePayload])
async def delete_url(
    link_id: int,
    owner_id: Optional[int] = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db)
):
    await links.delete(db, link_id, owner_id)
    return Envelope(data=MessagePayload(message="URL deleted"))


@router.get("/{link_id}/stats", response_model=Envelope[LinkStatsResponse])
async def url_stats(
    link_id: int,
    request: Request,
    owner_id: Optional[int] = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db)
):
    result = await links.stats(db, link_id, owner_id)
    return Envelope(data=LinkStatsResponse(
        url=to_response(result.link, request),
        total_clicks=result.total_clicks,
        last_clicked=result.last_clicked,
    ))
