from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from inscription.core.database import db_operation
from inscription.registration.models.subscriptions import Subscription
from inscription.registration.schemas.registrations import SubscriptionCreate


@db_operation
async def create_subscription(
    session: AsyncSession, subscription_data: SubscriptionCreate
) -> Subscription:
    """Add a subscription and flush; the caller commits"""
    subscription = Subscription(**subscription_data.model_dump())
    session.add(subscription)
    await session.flush()
    await session.refresh(subscription)
    return subscription


@db_operation
async def get_latest_subscription_for_member(
    session: AsyncSession, member_id: int
) -> Optional[Subscription]:
    result = await session.execute(
        select(Subscription)
        .where(Subscription.member_id == member_id)
        .order_by(Subscription.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
