from datetime import date
from typing import Optional

from inscription.core.validations import BIRTHDATE_PATTERN
from inscription.registration.models.plans import AgeGroup

CHILD_AGE_RANGE = (8, 10)
TEEN_AGE_RANGE = (11, 15)


def calculate_age(date_str: str, today: Optional[date] = None) -> Optional[int]:
    """
    Age in whole years for a DD/MM/YYYY birthdate.

    Returns None when the string does not have the exact DD/MM/YYYY shape.
    Digits are compared as-is, without calendar normalization.
    """
    match = BIRTHDATE_PATTERN.fullmatch(date_str or "")
    if not match:
        return None

    day, month, year = (int(part) for part in match.groups())
    today = today or date.today()

    age = today.year - year
    if (today.month, today.day) < (month, day):
        age -= 1
    return age


def classify_age(age: int) -> AgeGroup:
    # Under 8 falls through to adult, there is no "too young" bracket
    if CHILD_AGE_RANGE[0] <= age <= CHILD_AGE_RANGE[1]:
        return AgeGroup.child
    if TEEN_AGE_RANGE[0] <= age <= TEEN_AGE_RANGE[1]:
        return AgeGroup.teen
    return AgeGroup.adult


def age_group_from_birthday(
    date_str: str, today: Optional[date] = None
) -> Optional[AgeGroup]:
    age = calculate_age(date_str, today)
    if age is None:
        return None
    return classify_age(age)
