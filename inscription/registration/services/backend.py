"""
Storage port used by the registration flow.

The form and the service only need a handful of capabilities from storage;
``ClubBackend`` names them and ``SqlAlchemyClubBackend`` provides them on top
of the CRUD layer.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from inscription.core.database import TransactionManager
from inscription.registration.crud.disciplines import get_active_disciplines
from inscription.registration.crud.members import (
    create_member,
    get_member_by_idempotency_key,
)
from inscription.registration.crud.plans import get_active_plans, get_plan_by_id
from inscription.registration.crud.subscriptions import (
    create_subscription,
    get_latest_subscription_for_member,
)
from inscription.registration.schemas.disciplines import DisciplineRead
from inscription.registration.schemas.plans import PlanRead
from inscription.registration.schemas.registrations import (
    MemberCreate,
    MemberRead,
    SubscriptionCreate,
    SubscriptionRead,
)


class ClubBackend(ABC):
    @abstractmethod
    async def fetch_active_disciplines(self) -> List[DisciplineRead]:
        ...

    @abstractmethod
    async def fetch_active_plans(
        self, discipline_id: Optional[int] = None
    ) -> List[PlanRead]:
        ...

    @abstractmethod
    async def get_plan(self, plan_id: int) -> PlanRead:
        """Raises NotFoundError for an unknown id"""

    @abstractmethod
    async def insert_member(self, member_data: MemberCreate) -> MemberRead:
        ...

    @abstractmethod
    async def insert_subscription(
        self, subscription_data: SubscriptionCreate
    ) -> SubscriptionRead:
        ...

    @abstractmethod
    async def find_registration(
        self, idempotency_key: str
    ) -> Optional[Tuple[MemberRead, SubscriptionRead]]:
        """Member and subscription created earlier under this key"""

    @abstractmethod
    def transaction(self) -> AsyncContextManager:
        """Writes inside the block are committed together or not at all"""


class SqlAlchemyClubBackend(ClubBackend):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch_active_disciplines(self) -> List[DisciplineRead]:
        disciplines = await get_active_disciplines(self.session)
        return [DisciplineRead.model_validate(d) for d in disciplines]

    async def fetch_active_plans(
        self, discipline_id: Optional[int] = None
    ) -> List[PlanRead]:
        plans = await get_active_plans(self.session, discipline_id)
        return [PlanRead.model_validate(p) for p in plans]

    async def get_plan(self, plan_id: int) -> PlanRead:
        plan = await get_plan_by_id(self.session, plan_id)
        return PlanRead.model_validate(plan)

    async def insert_member(self, member_data: MemberCreate) -> MemberRead:
        member = await create_member(self.session, member_data)
        return MemberRead.model_validate(member)

    async def insert_subscription(
        self, subscription_data: SubscriptionCreate
    ) -> SubscriptionRead:
        subscription = await create_subscription(self.session, subscription_data)
        return SubscriptionRead.model_validate(subscription)

    async def find_registration(
        self, idempotency_key: str
    ) -> Optional[Tuple[MemberRead, SubscriptionRead]]:
        member = await get_member_by_idempotency_key(self.session, idempotency_key)
        if member is None:
            return None

        subscription = await get_latest_subscription_for_member(self.session, member.id)
        if subscription is None:
            return None

        return MemberRead.model_validate(member), SubscriptionRead.model_validate(
            subscription
        )

    def transaction(self) -> AsyncContextManager:
        return TransactionManager(self.session, "registration")
