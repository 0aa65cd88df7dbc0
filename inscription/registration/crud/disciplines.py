from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from inscription.core.database import db_operation
from inscription.registration.models.disciplines import Discipline


@db_operation
async def get_active_disciplines(session: AsyncSession) -> List[Discipline]:
    """Active disciplines ordered by name"""
    result = await session.execute(
        select(Discipline).where(Discipline.active == True).order_by(Discipline.name)
    )
    return list(result.scalars().all())
