"""Tests for age computation and age groups."""

from __future__ import annotations

from datetime import date

import pytest

from inscription.registration.models.plans import AgeGroup
from inscription.registration.services.age import (
    age_group_from_birthday,
    calculate_age,
    classify_age,
)
from tests.conftest import birthday_for_age


class TestCalculateAge:
    def test_birthday_already_passed(self) -> None:
        assert calculate_age("15/06/1990", today=date(2024, 6, 20)) == 34

    def test_birthday_not_reached_yet(self) -> None:
        assert calculate_age("15/06/1990", today=date(2024, 6, 10)) == 33

    def test_on_the_birthday(self) -> None:
        assert calculate_age("20/06/2014", today=date(2024, 6, 20)) == 10

    def test_later_month(self) -> None:
        assert calculate_age("01/12/2000", today=date(2024, 6, 20)) == 23

    @pytest.mark.parametrize(
        "value",
        ["2024-01-01", "01/01", "invalid", "", "1/1/2000", "01/01/2000 ", "15/06/1990\n", "١٥/٠٦/١٩٩٠"],
    )
    def test_rejects_other_shapes(self, value: str) -> None:
        assert calculate_age(value) is None

    def test_uses_current_date_by_default(self) -> None:
        assert calculate_age(birthday_for_age(25)) == 25


class TestClassifyAge:
    @pytest.mark.parametrize("age", [8, 9, 10])
    def test_child(self, age: int) -> None:
        assert classify_age(age) == AgeGroup.child

    @pytest.mark.parametrize("age", [11, 13, 15])
    def test_teen(self, age: int) -> None:
        assert classify_age(age) == AgeGroup.teen

    @pytest.mark.parametrize("age", [16, 18, 25, 50])
    def test_adult(self, age: int) -> None:
        assert classify_age(age) == AgeGroup.adult

    @pytest.mark.parametrize("age", [7, 5, 0])
    def test_under_eight_is_adult(self, age: int) -> None:
        assert classify_age(age) == AgeGroup.adult

    def test_storage_values(self) -> None:
        assert [g.value for g in AgeGroup] == ["enfant", "ado", "adulte"]


class TestAgeGroupFromBirthday:
    def test_groups(self) -> None:
        today = date(2024, 6, 20)
        assert age_group_from_birthday(birthday_for_age(10, today), today) == AgeGroup.child
        assert age_group_from_birthday(birthday_for_age(13, today), today) == AgeGroup.teen
        assert age_group_from_birthday(birthday_for_age(25, today), today) == AgeGroup.adult

    def test_invalid_date(self) -> None:
        assert age_group_from_birthday("invalid") is None
        assert age_group_from_birthday("2024-01-01") is None
