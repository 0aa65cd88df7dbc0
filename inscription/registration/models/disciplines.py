from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from inscription.core.database import Base


class Discipline(Base):
    """A sport offered by the club"""

    __tablename__ = "disciplines"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relations
    plans = relationship("SubscriptionPlan", back_populates="discipline")
    members = relationship("Member", back_populates="discipline")

    def __repr__(self):
        return f"<Discipline(id={self.id}, name='{self.name}', active={self.active})>"
