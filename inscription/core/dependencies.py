from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from inscription.core.database import get_session
from inscription.core.exceptions import ValidationError
from inscription.registration.services.backend import ClubBackend, SqlAlchemyClubBackend
from inscription.registration.services.registration import RegistrationService

IDEMPOTENCY_KEY_MAX_LENGTH = 100


async def get_backend(db: AsyncSession = Depends(get_session)) -> ClubBackend:
    """Storage port bound to the request's session"""
    return SqlAlchemyClubBackend(db)


async def get_registration_service(
    backend: ClubBackend = Depends(get_backend),
) -> RegistrationService:
    return RegistrationService(backend)


async def get_idempotency_key(
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
) -> Optional[str]:
    if idempotency_key is None:
        return None

    idempotency_key = idempotency_key.strip()
    if not idempotency_key:
        return None
    if len(idempotency_key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        raise ValidationError(
            f"Idempotency-Key must be at most {IDEMPOTENCY_KEY_MAX_LENGTH} characters"
        )
    return idempotency_key
