from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from inscription.registration.models.plans import AgeGroup


class PlanRead(BaseModel):
    """Active subscription plan"""

    id: int
    name: str
    type: str
    season_label: str
    price: float = Field(..., ge=0)
    discipline_id: int
    age_group: Optional[AgeGroup] = None
    active: bool = True

    model_config = ConfigDict(from_attributes=True)


class EligiblePlansResponse(BaseModel):
    """Plans a member may choose for a discipline and birthdate"""

    discipline_id: Optional[int] = None
    age: Optional[int] = None
    age_group: Optional[AgeGroup] = None
    plans: List[PlanRead] = Field(default_factory=list)
