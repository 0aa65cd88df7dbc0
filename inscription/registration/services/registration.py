"""Submission flow: validated form payload -> member + subscription"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional

from inscription.core import config
from inscription.core.exceptions import (
    NotFoundError,
    PlanNotEligibleError,
    RegistrationError,
)
from inscription.core.logging_utils import error_tracker, log_business_event
from inscription.registration.models.members import Gender
from inscription.registration.models.plans import AgeGroup
from inscription.registration.models.subscriptions import PaymentStatus
from inscription.registration.schemas.plans import PlanRead
from inscription.registration.schemas.registrations import (
    MemberCreate,
    MemberRead,
    RegistrationCreate,
    SubscriptionCreate,
    SubscriptionRead,
)
from inscription.registration.services.age import age_group_from_birthday
from inscription.registration.services.backend import ClubBackend
from inscription.registration.services.date_input import convert_to_iso_date
from inscription.registration.services.eligibility import is_plan_eligible
from inscription.registration.services.subscription_dates import calculate_end_date

logger = logging.getLogger(__name__)

# Form labels -> stored values
GENDER_STORAGE_VALUES = {
    "homme": Gender.male.value,
    "femme": Gender.female.value,
}


def generate_temp_customer_id() -> str:
    return f"fake_{uuid.uuid4()}"


@dataclass
class RegistrationResult:
    member: MemberRead
    subscription: SubscriptionRead
    replayed: bool = False


class RegistrationService:
    def __init__(self, backend: ClubBackend):
        self.backend = backend

    async def register(
        self,
        payload: RegistrationCreate,
        idempotency_key: Optional[str] = None,
        today: Optional[date] = None,
    ) -> RegistrationResult:
        """
        Create the member and its subscription in one transaction.

        Every failure is raised as RegistrationError whose message is the
        single text shown to the member; the cause is logged.
        """
        today = today or date.today()

        if idempotency_key:
            previous = await self._replay(idempotency_key)
            if previous:
                return previous

        birth_date = self._parse_birth_date(payload.birthday)
        age_group = age_group_from_birthday(payload.birthday, today)

        try:
            async with self.backend.transaction():
                plan = await self.backend.get_plan(payload.plan_id)
                self._ensure_eligible(plan, payload.discipline_id, age_group)

                member = await self.backend.insert_member(
                    MemberCreate(
                        first_name=payload.first_name,
                        last_name=payload.last_name,
                        birth_date=birth_date,
                        gender=GENDER_STORAGE_VALUES.get(payload.gender, Gender.other.value),
                        phone=payload.phone,
                        emergency_phone=payload.emergency_phone,
                        email=payload.email,
                        discipline_id=payload.discipline_id,
                        stripe_customer_id=generate_temp_customer_id(),
                        is_active=True,
                        idempotency_key=idempotency_key,
                    )
                )

                subscription = await self.backend.insert_subscription(
                    SubscriptionCreate(
                        member_id=member.id,
                        plan_id=plan.id,
                        season_label=plan.season_label,
                        type=plan.type,
                        price=plan.price,
                        payment_status=PaymentStatus.pending.value,
                        payment_method=config.DEFAULT_PAYMENT_METHOD,
                        start_date=today,
                        end_date=calculate_end_date(today, plan.type),
                        notes=config.SUBSCRIPTION_NOTE,
                    )
                )

        except NotFoundError as e:
            logger.warning(
                f"Registration rejected, plan {payload.plan_id} not found",
                extra={"plan_id": payload.plan_id},
            )
            raise RegistrationError("plan_not_found", 404, details=e.details) from e

        except PlanNotEligibleError as e:
            logger.warning(
                f"Registration rejected: {e.message}",
                extra={"plan_id": payload.plan_id, "discipline_id": payload.discipline_id},
            )
            raise RegistrationError("plan_not_eligible", 422, details=e.details) from e

        except Exception as e:
            if idempotency_key:
                # A concurrent submission with the same key may have won the race
                previous = await self._replay(idempotency_key)
                if previous:
                    return previous

            logger.error(
                f"Registration failed: {type(e).__name__} - {str(e)}",
                extra={"exception_type": type(e).__name__, "plan_id": payload.plan_id},
                exc_info=True,
            )
            error_tracker.track_error(
                "REGISTRATION_FAILED",
                str(e),
                {"plan_id": payload.plan_id, "discipline_id": payload.discipline_id},
            )
            raise RegistrationError("storage_failure", 500) from e

        log_business_event(
            "member_registered",
            "member",
            member.id,
            {
                "subscription_id": subscription.id,
                "plan_id": plan.id,
                "discipline_id": payload.discipline_id,
                "age_group": age_group.value if age_group else None,
                "end_date": subscription.end_date.isoformat(),
            },
        )
        return RegistrationResult(member=member, subscription=subscription)

    async def _replay(self, idempotency_key: str) -> Optional[RegistrationResult]:
        try:
            found = await self.backend.find_registration(idempotency_key)
        except Exception as e:
            logger.error(f"Idempotency lookup failed: {str(e)}", exc_info=True)
            raise RegistrationError("storage_failure", 500) from e

        if not found:
            return None

        member, subscription = found
        log_business_event(
            "registration_replayed",
            "member",
            member.id,
            {"subscription_id": subscription.id},
        )
        return RegistrationResult(member=member, subscription=subscription, replayed=True)

    @staticmethod
    def _parse_birth_date(birthday: str) -> date:
        try:
            return date.fromisoformat(convert_to_iso_date(birthday))
        except ValueError as e:
            # DD/MM/YYYY shape is valid but the day does not exist, e.g. 31/02
            logger.warning(f"Birthdate is not a calendar date: {birthday}")
            raise RegistrationError(
                "invalid_birthdate", 422, details={"birthday": birthday}
            ) from e

    @staticmethod
    def _ensure_eligible(
        plan: PlanRead, discipline_id: int, age_group: Optional[AgeGroup]
    ):
        if not plan.active:
            raise PlanNotEligibleError(plan.id, "plan is not active")
        if str(plan.discipline_id) != str(discipline_id):
            raise PlanNotEligibleError(plan.id, "plan belongs to another discipline")
        if not is_plan_eligible(plan, discipline_id, age_group):
            raise PlanNotEligibleError(plan.id, "plan does not match the age group")
