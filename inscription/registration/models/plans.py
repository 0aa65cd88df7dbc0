from enum import Enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    ForeignKey,
    Numeric,
    DateTime,
    Enum as SQLEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from inscription.core.database import Base


class PlanType(str, Enum):
    """Billing period of a plan"""

    season = "season"  # Full season, one year
    yearly = "yearly"
    semester1 = "semester1"  # Half year
    quarter = "quarter"
    month = "month"


class AgeGroup(str, Enum):
    """Coarse age bracket driving plan eligibility"""

    child = "enfant"  # 8-10
    teen = "ado"  # 11-15
    adult = "adulte"


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)

    # season, yearly, semester1, quarter, month
    type = Column(String(50), nullable=False, default=PlanType.season.value)

    # Human-readable period, e.g. "2025-2026"
    season_label = Column(String(50), nullable=False)

    price = Column(Numeric(10, 2), nullable=False)

    discipline_id = Column(
        Integer, ForeignKey("disciplines.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Explicit category; NULL means "derive from the plan name"
    age_group = Column(
        SQLEnum(
            AgeGroup,
            name="plan_age_group",
            values_callable=lambda groups: [group.value for group in groups],
            native_enum=False,
            create_constraint=True,
            length=20,
        ),
        nullable=True,
    )

    active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relations
    discipline = relationship("Discipline", back_populates="plans")
    subscriptions = relationship("Subscription", back_populates="plan")

    def __repr__(self):
        return (
            f"<SubscriptionPlan(id={self.id}, name='{self.name}', type='{self.type}', "
            f"discipline_id={self.discipline_id}, price={self.price})>"
        )
