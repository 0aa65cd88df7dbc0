from enum import Enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from inscription.core.database import Base


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    birth_date = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)

    phone = Column(String(20), nullable=False)
    emergency_phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False, index=True)

    discipline_id = Column(
        Integer, ForeignKey("disciplines.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Placeholder until a real payment customer is created
    stripe_customer_id = Column(String(100), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(Text, nullable=True)

    # Client-supplied key, repeated submissions with the same key are replayed
    idempotency_key = Column(String(100), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relations
    discipline = relationship("Discipline", back_populates="members")
    subscriptions = relationship(
        "Subscription", back_populates="member", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Member(id={self.id}, name='{self.first_name} {self.last_name}', email='{self.email}')>"
