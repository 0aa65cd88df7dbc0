from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from inscription.core.database import db_operation
from inscription.core.exceptions import NotFoundError
from inscription.registration.models.plans import SubscriptionPlan


@db_operation
async def get_active_plans(
    session: AsyncSession, discipline_id: Optional[int] = None
) -> List[SubscriptionPlan]:
    """Active plans, optionally restricted to one discipline"""
    query = select(SubscriptionPlan).where(SubscriptionPlan.active == True)

    if discipline_id is not None:
        query = query.where(SubscriptionPlan.discipline_id == discipline_id)

    query = query.order_by(SubscriptionPlan.discipline_id, SubscriptionPlan.id)

    result = await session.execute(query)
    return list(result.scalars().all())


@db_operation
async def get_plan_by_id(session: AsyncSession, plan_id: int) -> SubscriptionPlan:
    result = await session.execute(
        select(SubscriptionPlan).where(SubscriptionPlan.id == plan_id)
    )
    plan = result.scalar_one_or_none()

    if not plan:
        raise NotFoundError("Subscription plan", str(plan_id))

    return plan
