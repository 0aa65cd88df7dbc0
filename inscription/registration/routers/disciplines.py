import logging
from typing import List
from fastapi import APIRouter, Depends

from inscription.core.dependencies import get_backend
from inscription.core.logging_utils import error_tracker
from inscription.registration.schemas.disciplines import DisciplineRead
from inscription.registration.services.backend import ClubBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/disciplines", tags=["Disciplines"])


@router.get("/", response_model=List[DisciplineRead])
async def list_active_disciplines(backend: ClubBackend = Depends(get_backend)):
    """
    Active disciplines for the discipline select.

    A storage failure returns an empty list; the form then shows no options.
    """
    try:
        return await backend.fetch_active_disciplines()
    except Exception as e:
        logger.error(f"Error fetching disciplines: {str(e)}")
        error_tracker.track_error("DISCIPLINES_FETCH_FAILED", str(e))
        return []
