import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from inscription.core.dependencies import get_backend
from inscription.core.logging_utils import error_tracker
from inscription.registration.schemas.plans import EligiblePlansResponse, PlanRead
from inscription.registration.services.age import calculate_age, classify_age
from inscription.registration.services.backend import ClubBackend
from inscription.registration.services.eligibility import filter_eligible_plans

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plans", tags=["Subscription plans"])


async def _fetch_plans(
    backend: ClubBackend, discipline_id: Optional[int] = None
) -> List[PlanRead]:
    try:
        return await backend.fetch_active_plans(discipline_id)
    except Exception as e:
        logger.error(f"Error fetching subscription plans: {str(e)}")
        error_tracker.track_error(
            "PLANS_FETCH_FAILED", str(e), {"discipline_id": discipline_id}
        )
        return []


@router.get("/", response_model=List[PlanRead])
async def list_active_plans(
    discipline_id: Optional[int] = Query(None, gt=0, description="Filter by discipline"),
    backend: ClubBackend = Depends(get_backend),
):
    """Active subscription plans, optionally for one discipline"""
    return await _fetch_plans(backend, discipline_id)


@router.get("/eligible", response_model=EligiblePlansResponse)
async def list_eligible_plans(
    discipline_id: Optional[int] = Query(None, gt=0, description="Selected discipline"),
    birthday: Optional[str] = Query(None, description="Birthdate as DD/MM/YYYY"),
    backend: ClubBackend = Depends(get_backend),
):
    """
    Plans the member may choose.

    - **discipline_id**: selected discipline
    - **birthday**: birthdate typed in the form

    Without a discipline or a valid birthdate the plan list is empty.
    """
    age = calculate_age(birthday or "")
    age_group = classify_age(age) if age is not None else None

    if discipline_id is None or age_group is None:
        return EligiblePlansResponse(
            discipline_id=discipline_id, age=age, age_group=age_group, plans=[]
        )

    plans = await _fetch_plans(backend, discipline_id)
    return EligiblePlansResponse(
        discipline_id=discipline_id,
        age=age,
        age_group=age_group,
        plans=filter_eligible_plans(discipline_id, age_group, plans),
    )
