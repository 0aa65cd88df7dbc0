"""
Which subscription plans a member may pick.

A plan is eligible when it belongs to the selected discipline and its age
category matches the member's age group. Plans with an explicit ``age_group``
use it; older plans without one are categorized from their name.
"""

from typing import Iterable, List, Optional

from inscription.core import config
from inscription.registration.models.plans import AgeGroup


def _same_discipline(plan_discipline_id, discipline_id) -> bool:
    return str(plan_discipline_id) == str(discipline_id)


def matches_age_group(plan, age_group: AgeGroup) -> bool:
    explicit = getattr(plan, "age_group", None)
    if explicit:
        return AgeGroup(explicit) == age_group

    lowered = (plan.name or "").lower()
    has_child = config.CHILD_PLAN_MARKER in lowered
    has_teen = config.TEEN_PLAN_MARKER in lowered
    if age_group == AgeGroup.child:
        return has_child
    if age_group == AgeGroup.teen:
        return has_teen
    return not has_child and not has_teen


def is_plan_eligible(plan, discipline_id, age_group: Optional[AgeGroup]) -> bool:
    if discipline_id in (None, "") or age_group is None:
        return False
    return _same_discipline(plan.discipline_id, discipline_id) and matches_age_group(
        plan, age_group
    )


def filter_eligible_plans(
    discipline_id, age_group: Optional[AgeGroup], plans: Iterable
) -> List:
    """
    Plans offered for a discipline and age group, in source order.

    An unselected discipline or a missing age group yields an empty list;
    callers treat that as "nothing to choose yet", not as an error.
    """
    if discipline_id in (None, "") or age_group is None:
        return []
    return [plan for plan in plans if is_plan_eligible(plan, discipline_id, age_group)]
