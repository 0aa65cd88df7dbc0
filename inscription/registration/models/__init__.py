from inscription.core.database import Base
from .disciplines import Discipline
from .plans import SubscriptionPlan, PlanType, AgeGroup
from .members import Member, Gender
from .subscriptions import Subscription, PaymentStatus

__all__ = [
    "Base",
    "Discipline",
    "SubscriptionPlan",
    "PlanType",
    "AgeGroup",
    "Member",
    "Gender",
    "Subscription",
    "PaymentStatus",
]
