from enum import Enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from inscription.core.database import Base


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


class Subscription(Base):
    """A member's subscription to one plan"""

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)

    member_id = Column(
        Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id = Column(
        Integer, ForeignKey("subscription_plans.id", ondelete="SET NULL"), nullable=True
    )

    # Copied from the plan at submission time
    season_label = Column(String(50), nullable=False)
    type = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    payment_status = Column(
        String(20), nullable=False, default=PaymentStatus.pending.value
    )
    payment_method = Column(String(20), nullable=False, default="card")

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relations
    member = relationship("Member", back_populates="subscriptions")
    plan = relationship("SubscriptionPlan", back_populates="subscriptions")

    def __repr__(self):
        return (
            f"<Subscription(id={self.id}, member_id={self.member_id}, plan_id={self.plan_id}, "
            f"status={self.payment_status})>"
        )
