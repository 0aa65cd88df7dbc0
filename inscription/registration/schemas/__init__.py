from .disciplines import DisciplineRead
from .plans import PlanRead, EligiblePlansResponse
from .registrations import (
    RegistrationCreate,
    MemberCreate,
    MemberRead,
    SubscriptionCreate,
    SubscriptionRead,
    RegistrationResponse,
    FieldValidationResponse,
)

__all__ = [
    "DisciplineRead",
    "PlanRead",
    "EligiblePlansResponse",
    "RegistrationCreate",
    "MemberCreate",
    "MemberRead",
    "SubscriptionCreate",
    "SubscriptionRead",
    "RegistrationResponse",
    "FieldValidationResponse",
]
