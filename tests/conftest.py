"""
Shared fixtures: an in-memory storage backend and a test client wired to it.
"""

from __future__ import annotations

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import asyncio
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import date
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from inscription.core.dependencies import get_backend
from inscription.core.exceptions import NotFoundError
from inscription.registration.schemas.disciplines import DisciplineRead
from inscription.registration.schemas.plans import PlanRead
from inscription.registration.schemas.registrations import (
    MemberCreate,
    MemberRead,
    SubscriptionCreate,
    SubscriptionRead,
)
from inscription.registration.services.backend import ClubBackend

FIXED_TODAY = date(2024, 6, 20)

# Rows written by the transaction running in the current task
_journal: ContextVar[Optional[list]] = ContextVar("journal", default=None)


class InMemoryClubBackend(ClubBackend):
    """ClubBackend keeping rows in dicts; a failed transaction removes only its own rows"""

    def __init__(
        self,
        disciplines: List[DisciplineRead],
        plans: List[PlanRead],
        inactive_discipline_ids: Tuple[int, ...] = (),
    ):
        self.disciplines = disciplines
        self.plans = plans
        self.inactive_discipline_ids = set(inactive_discipline_ids)
        self.members: Dict[int, MemberRead] = {}
        self.subscriptions: Dict[int, SubscriptionRead] = {}
        self.idempotency_keys: Dict[str, int] = {}

        self.fail_reads = False
        self.fail_subscription_insert = False
        self.insert_delay = 0.0
        self.commits = 0
        self.rollbacks = 0

    async def fetch_active_disciplines(self) -> List[DisciplineRead]:
        if self.fail_reads:
            raise ConnectionError("backend unreachable")
        return [d for d in self.disciplines if d.id not in self.inactive_discipline_ids]

    async def fetch_active_plans(
        self, discipline_id: Optional[int] = None
    ) -> List[PlanRead]:
        if self.fail_reads:
            raise ConnectionError("backend unreachable")
        return [
            p
            for p in self.plans
            if p.active and (discipline_id is None or p.discipline_id == discipline_id)
        ]

    async def get_plan(self, plan_id: int) -> PlanRead:
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        raise NotFoundError("Subscription plan", str(plan_id))

    async def insert_member(self, member_data: MemberCreate) -> MemberRead:
        if self.insert_delay:
            await asyncio.sleep(self.insert_delay)
        if member_data.idempotency_key in self.idempotency_keys:
            raise RuntimeError("duplicate idempotency key")

        member_id = max(self.members, default=0) + 1
        member = MemberRead(
            id=member_id, **member_data.model_dump(exclude={"idempotency_key"})
        )
        self.members[member_id] = member
        if member_data.idempotency_key:
            self.idempotency_keys[member_data.idempotency_key] = member_id
        self._record("member", member_id, member_data.idempotency_key)
        return member

    async def insert_subscription(
        self, subscription_data: SubscriptionCreate
    ) -> SubscriptionRead:
        if self.fail_subscription_insert:
            raise RuntimeError("subscriptions table unavailable")

        subscription_id = max(self.subscriptions, default=0) + 1
        subscription = SubscriptionRead(id=subscription_id, **subscription_data.model_dump())
        self.subscriptions[subscription_id] = subscription
        self._record("subscription", subscription_id)
        return subscription

    async def find_registration(
        self, idempotency_key: str
    ) -> Optional[Tuple[MemberRead, SubscriptionRead]]:
        member_id = self.idempotency_keys.get(idempotency_key)
        if member_id is None:
            return None
        for subscription in self.subscriptions.values():
            if subscription.member_id == member_id:
                return self.members[member_id], subscription
        return None

    def _record(self, table: str, row_id: int, key: Optional[str] = None):
        journal = _journal.get()
        if journal is not None:
            journal.append((table, row_id, key))

    @asynccontextmanager
    async def transaction(self):
        journal: list = []
        token = _journal.set(journal)
        try:
            yield self
        except Exception:
            for table, row_id, key in reversed(journal):
                if table == "member":
                    self.members.pop(row_id, None)
                    if key:
                        self.idempotency_keys.pop(key, None)
                else:
                    self.subscriptions.pop(row_id, None)
            self.rollbacks += 1
            raise
        finally:
            _journal.reset(token)
        self.commits += 1


def make_plans() -> List[PlanRead]:
    return [
        PlanRead(id=1, name="Judo Enfant - Saison", type="season", season_label="2024-2025", price=180, discipline_id=1),
        PlanRead(id=2, name="Judo Ado - Saison", type="season", season_label="2024-2025", price=220, discipline_id=1),
        PlanRead(id=3, name="Judo Adulte - Saison", type="season", season_label="2024-2025", price=260, discipline_id=1),
        PlanRead(id=4, name="Karaté Adulte - Trimestre", type="quarter", season_label="2024-2025", price=90, discipline_id=2),
        PlanRead(id=5, name="Karaté Jeunes", type="month", season_label="2024-2025", price=30, discipline_id=2, age_group="ado"),
        PlanRead(id=6, name="Judo Adulte - Mois", type="month", season_label="2024-2025", price=35, discipline_id=1, active=False),
    ]


def birthday_for_age(age: int, today: Optional[date] = None) -> str:
    """A DD/MM/YYYY birthdate giving exactly ``age`` on ``today``"""
    today = today or date.today()
    return f"01/{today.month:02d}/{today.year - age}"


def valid_values(**overrides) -> Dict[str, str]:
    values = {
        "first_name": "Camille",
        "last_name": "Durand",
        "birthday": "15/06/1990",
        "gender": "femme",
        "phone": "0612345678",
        "emergency_phone": "0698765432",
        "email": "camille.durand@example.com",
        "discipline_id": "1",
        "plan_id": "3",
    }
    values.update(overrides)
    return values


@pytest.fixture
def backend() -> InMemoryClubBackend:
    return InMemoryClubBackend(
        disciplines=[
            DisciplineRead(id=1, name="Judo"),
            DisciplineRead(id=2, name="Karaté"),
            DisciplineRead(id=3, name="Escrime"),
        ],
        plans=make_plans(),
        inactive_discipline_ids=(3,),
    )


@pytest.fixture
def app(backend: InMemoryClubBackend):
    from inscription.main import app

    app.dependency_overrides[get_backend] = lambda: backend
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
