"""
State of the single-page registration form.

``RegistrationForm`` holds what the page shows: field values, per-field
errors, the option lists and the result banner. Change and blur events run
the same field rules as the API so the member sees errors inline before any
write is attempted.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from inscription.core.exceptions import RegistrationError
from inscription.core.validations import FIELD_CHECKS, validate_field, validate_form
from inscription.registration.models.plans import AgeGroup
from inscription.registration.schemas.disciplines import DisciplineRead
from inscription.registration.schemas.plans import PlanRead
from inscription.registration.schemas.registrations import RegistrationCreate
from inscription.registration.services.age import age_group_from_birthday, calculate_age
from inscription.registration.services.backend import ClubBackend
from inscription.registration.services.date_input import format_date_input
from inscription.registration.services.eligibility import filter_eligible_plans
from inscription.registration.services.registration import (
    RegistrationResult,
    RegistrationService,
)

logger = logging.getLogger(__name__)

FORM_FIELDS = tuple(FIELD_CHECKS)

SUCCESS_MESSAGE = "Inscription enregistrée avec succès !"
ALREADY_SUBMITTING_MESSAGE = "Inscription en cours, veuillez patienter."


def empty_values() -> Dict[str, str]:
    return {name: "" for name in FORM_FIELDS}


@dataclass
class Banner:
    kind: str  # "success" or "error"
    message: str


class RegistrationForm:
    def __init__(self, today: Optional[date] = None):
        self.today = today
        self.values: Dict[str, str] = empty_values()
        self.errors: Dict[str, str] = {}
        self.touched: Dict[str, bool] = {}
        self.disciplines: List[DisciplineRead] = []
        self.plans: List[PlanRead] = []
        self.is_loading_options = False
        self.banner: Optional[Banner] = None
        self._submit_lock = asyncio.Lock()

    # --- Options ---

    async def load_options(self, backend: ClubBackend):
        """Fetch disciplines and plans; a failed read leaves that list empty"""
        self.is_loading_options = True
        disciplines, plans = await asyncio.gather(
            backend.fetch_active_disciplines(),
            backend.fetch_active_plans(),
            return_exceptions=True,
        )

        if isinstance(disciplines, Exception):
            logger.error(f"Error fetching disciplines: {disciplines}")
            disciplines = []
        if isinstance(plans, Exception):
            logger.error(f"Error fetching subscription plans: {plans}")
            plans = []

        self.disciplines = list(disciplines)
        self.plans = list(plans)
        self.is_loading_options = False

    # --- Derived state ---

    @property
    def age(self) -> Optional[int]:
        return calculate_age(self.values["birthday"], self.today)

    @property
    def age_group(self) -> Optional[AgeGroup]:
        return age_group_from_birthday(self.values["birthday"], self.today)

    @property
    def eligible_plans(self) -> List[PlanRead]:
        return filter_eligible_plans(
            self.values["discipline_id"], self.age_group, self.plans
        )

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

    # --- Field events ---

    def handle_change(self, field: str, raw: str) -> str:
        """Store a new field value and validate it; returns the stored value"""
        if field not in self.values:
            raise KeyError(f"Unknown form field: {field}")

        if field == "birthday":
            value = format_date_input(raw, self.values["birthday"])
        else:
            value = raw

        self.values[field] = value
        self._validate(field)

        if field in ("birthday", "discipline_id"):
            self._drop_ineligible_plan()
        return value

    def handle_blur(self, field: str):
        self.touched[field] = True
        self._validate(field)

    def _validate(self, field: str):
        message = validate_field(field, self.values[field])
        if message:
            self.errors[field] = message
        else:
            self.errors.pop(field, None)

    def _drop_ineligible_plan(self):
        selected = self.values["plan_id"]
        if not selected:
            return
        eligible_ids = {str(plan.id) for plan in self.eligible_plans}
        if selected not in eligible_ids:
            self.values["plan_id"] = ""

    # --- Submission ---

    def reset(self):
        self.values = empty_values()
        self.errors = {}
        self.touched = {}

    async def submit(
        self, service: RegistrationService, idempotency_key: Optional[str] = None
    ) -> Optional[RegistrationResult]:
        """
        Validate every field and register the member.

        Returns the result on success, None otherwise. A submit while another
        one is in flight is refused.
        """
        if self._submit_lock.locked():
            logger.info("Submit ignored, a registration is already in flight")
            self.banner = Banner("error", ALREADY_SUBMITTING_MESSAGE)
            return None

        async with self._submit_lock:
            self.banner = None
            self.errors = validate_form(self.values)
            self.touched = {name: True for name in FORM_FIELDS}
            if self.errors:
                return None

            try:
                payload = RegistrationCreate(**self.values)
            except PydanticValidationError as e:
                self.errors = {
                    str(error["loc"][0]): error["msg"] for error in e.errors()
                }
                return None

            try:
                result = await service.register(
                    payload, idempotency_key=idempotency_key, today=self.today
                )
            except RegistrationError as e:
                self.banner = Banner("error", e.message)
                return None

            self.banner = Banner("success", SUCCESS_MESSAGE)
            self.reset()
            return result
