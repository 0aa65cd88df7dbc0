import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Request, Response, status

from inscription.core.config import REGISTRATION_RATE_LIMIT
from inscription.core.dependencies import get_idempotency_key, get_registration_service
from inscription.core.limits import limiter
from inscription.core.validations import FIELD_CHECKS, validate_field
from inscription.registration.schemas.registrations import (
    FieldValidationResponse,
    RegistrationCreate,
    RegistrationResponse,
)
from inscription.registration.services.form import SUCCESS_MESSAGE
from inscription.registration.services.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registrations", tags=["Registrations"])


@router.post("/validate", response_model=FieldValidationResponse)
async def validate_registration_fields(
    values: Dict[str, Any] = Body(..., examples=[{"first_name": "J", "phone": "06"}]),
):
    """
    Inline validation of the fields present in the body.

    Unknown keys are ignored. Returns one message per failing field.
    """
    errors = {}
    for name, value in values.items():
        if name not in FIELD_CHECKS:
            continue
        message = validate_field(name, value)
        if message:
            errors[name] = message

    return FieldValidationResponse(valid=not errors, errors=errors)


@router.post(
    "/", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(REGISTRATION_RATE_LIMIT)
async def create_registration(
    request: Request,
    response: Response,
    registration: RegistrationCreate,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Register a member and create their subscription.

    - **first_name**, **last_name**: at least 2 characters, no digits
    - **birthday**: DD/MM/YYYY
    - **gender**: homme or femme
    - **phone**, **emergency_phone**: 10 digits
    - **email**: valid email address
    - **discipline_id**, **plan_id**: chosen from the active lists

    Send an **Idempotency-Key** header to make retries safe: a repeated key
    returns the first registration instead of creating a new one.
    """
    result = await service.register(registration, idempotency_key=idempotency_key)

    if result.replayed:
        response.status_code = status.HTTP_200_OK

    return RegistrationResponse(
        success=True,
        message=SUCCESS_MESSAGE,
        member=result.member,
        subscription=result.subscription,
        replayed=result.replayed,
    )
