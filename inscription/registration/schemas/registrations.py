from datetime import date, datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from inscription.core import validations


def _raise_if(message: Optional[str]):
    if message:
        raise PydanticCustomError("form_field", message)


class RegistrationCreate(BaseModel):
    """Registration form payload, checked exactly as typed by the member"""

    first_name: str
    last_name: str
    birthday: str = Field(..., description="DD/MM/YYYY")
    gender: str = Field(..., description="homme or femme")
    phone: str
    emergency_phone: str
    email: str
    discipline_id: int
    plan_id: int

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v):
        _raise_if(validations.check_first_name(v))
        return v

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v):
        _raise_if(validations.check_last_name(v))
        return v

    @field_validator("birthday")
    @classmethod
    def validate_birthday(cls, v):
        _raise_if(validations.check_birthdate(v))
        return v

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v):
        _raise_if(validations.check_gender(v))
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        _raise_if(validations.check_phone(v))
        return v

    @field_validator("emergency_phone")
    @classmethod
    def validate_emergency_phone(cls, v):
        _raise_if(validations.check_emergency_phone(v))
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        _raise_if(validations.check_email(v))
        return v

    @field_validator("discipline_id", mode="before")
    @classmethod
    def validate_discipline_id(cls, v):
        _raise_if(validations.check_discipline(v))
        return v

    @field_validator("plan_id", mode="before")
    @classmethod
    def validate_plan_id(cls, v):
        _raise_if(validations.check_plan(v))
        return v


class MemberCreate(BaseModel):
    """Member row as stored"""

    first_name: str
    last_name: str
    birth_date: date
    gender: str
    phone: str
    emergency_phone: str
    email: str
    discipline_id: int
    stripe_customer_id: str
    is_active: bool = True
    notes: Optional[str] = None
    idempotency_key: Optional[str] = None


class MemberRead(BaseModel):
    id: int
    first_name: str
    last_name: str
    birth_date: date
    gender: str
    phone: str
    emergency_phone: str
    email: str
    discipline_id: Optional[int] = None
    stripe_customer_id: str
    is_active: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionCreate(BaseModel):
    member_id: int
    plan_id: int
    season_label: str
    type: str
    price: float = Field(..., ge=0)
    payment_status: str = "pending"
    payment_method: str = "card"
    start_date: date
    end_date: date
    notes: Optional[str] = None


class SubscriptionRead(SubscriptionCreate):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str
    member: MemberRead
    subscription: SubscriptionRead
    replayed: bool = Field(
        False, description="True when an earlier submission with the same key was returned"
    )


class FieldValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)
