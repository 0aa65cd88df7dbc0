import calendar
from datetime import date

from inscription.registration.models.plans import PlanType

# Months added to the start date for each plan type
PLAN_DURATION_MONTHS = {
    PlanType.yearly.value: 12,
    PlanType.season.value: 12,
    PlanType.semester1.value: 6,
    PlanType.quarter.value: 3,
    PlanType.month.value: 1,
}
DEFAULT_DURATION_MONTHS = 12


def add_months(start: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_end_date(start: date, plan_type: str) -> date:
    months = PLAN_DURATION_MONTHS.get(plan_type, DEFAULT_DURATION_MONTHS)
    return add_months(start, months)
