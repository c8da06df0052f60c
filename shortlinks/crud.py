from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.sql import func
from .models import Link, Account
from typing import Optional, List

# Link CRUD
async def create_link(db: AsyncSession, link: Link) -> Link:
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link

async def get_link_by_short_code(db: AsyncSession, short_code: str) -> Optional[Link]:
    result = await db.execute(
        select(Link).where(Link.short_code == short_code).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def get_link_by_id(db: AsyncSession, link_id: int) -> Optional[Link]:
    result = await db.execute(
        select(Link).where(Link.id == link_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def short_code_exists(db: AsyncSession, short_code: str) -> bool:
    # No is_active filter: deleted codes stay reserved
    result = await db.execute(select(Link.id).where(Link.short_code == short_code))
    return result.first() is not None

async def increment_link_clicks(db: AsyncSession, link_id: int):
    await db.execute(
        update(Link)
        .where(Link.id == link_id)
        .values(click_count=Link.click_count + 1, last_clicked_at=func.now())
    )
    await db.commit()

def _owned_active(stmt, link_id: int, owner_id: Optional[int]):
    stmt = stmt.where(Link.id == link_id, Link.is_active.is_(True))
    # Legacy behaviour: with no owner on the request the owner filter is skipped,
    # so ownerless links stay editable by anonymous callers.
    if owner_id is not None:
        stmt = stmt.where(Link.owner_id == owner_id)
    return stmt

async def get_owned_link(db: AsyncSession, link_id: int, owner_id: Optional[int]) -> Optional[Link]:
    result = await db.execute(
        _owned_active(select(Link), link_id, owner_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def update_link_title(db: AsyncSession, link_id: int, title: str, owner_id: Optional[int]) -> Optional[Link]:
    result = await db.execute(
        _owned_active(update(Link), link_id, owner_id)
        .values(title=title)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount == 0:
        return None
    return await get_link_by_id(db, link_id)

async def soft_delete_link(db: AsyncSession, link_id: int, owner_id: Optional[int]) -> bool:
    result = await db.execute(
        _owned_active(update(Link), link_id, owner_id)
        .values(is_active=False)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0

async def list_active_links_by_owner(db: AsyncSession, owner_id: int) -> List[Link]:
    result = await db.execute(
        select(Link)
        .where(Link.owner_id == owner_id, Link.is_active.is_(True))
        .order_by(Link.created_at.desc(), Link.id.desc())
    )
    return list(result.scalars().all())

# Account CRUD
async def create_account(db: AsyncSession, account: Account) -> Account:
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account

async def get_account_by_email(db: AsyncSession, email: str) -> Optional[Account]:
    result = await db.execute(select(Account).where(Account.email == email))
    return result.scalar_one_or_none()

async def get_account_by_id(db: AsyncSession, account_id: int) -> Optional[Account]:
    result = await db.execute(select(Account).where(Account.id == account_id))
    return result.scalar_one_or_none()

async def update_account_password(db: AsyncSession, email: str, password_hash: str) -> bool:
    result = await db.execute(
        update(Account)
        .where(Account.email == email, Account.is_active.is_(True))
        .values(password_hash=password_hash)
    )
    await db.commit()
    return result.rowcount > 0
