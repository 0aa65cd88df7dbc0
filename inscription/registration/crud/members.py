from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from inscription.core.database import db_operation
from inscription.registration.models.members import Member
from inscription.registration.schemas.registrations import MemberCreate


@db_operation
async def create_member(session: AsyncSession, member_data: MemberCreate) -> Member:
    """Add a member and flush so its id is available; the caller commits"""
    member = Member(**member_data.model_dump())
    session.add(member)
    await session.flush()
    await session.refresh(member)
    return member


@db_operation
async def get_member_by_idempotency_key(
    session: AsyncSession, idempotency_key: str
) -> Optional[Member]:
    result = await session.execute(
        select(Member).where(Member.idempotency_key == idempotency_key)
    )
    return result.scalar_one_or_none()
