"""Tests for birthdate masking and wire conversion."""

from __future__ import annotations

import pytest

from inscription.registration.services.date_input import (
    convert_from_iso_date,
    convert_to_iso_date,
    format_date_input,
)


class TestFormatDateInput:
    """Keystroke-by-keystroke masking as DD/MM/YYYY."""

    def test_adds_slashes_while_typing(self) -> None:
        assert format_date_input("15", "1") == "15/"
        assert format_date_input("151", "15/") == "15/1"
        assert format_date_input("1512", "15/1") == "15/12/"
        assert format_date_input("15122", "15/12/") == "15/12/2"
        assert format_date_input("15122024", "15/12/2") == "15/12/2024"

    def test_strips_non_digits(self) -> None:
        assert format_date_input("1a5", "1") == "15/"
        assert format_date_input("15/12", "15/") == "15/12/"

    def test_limits_to_eight_digits(self) -> None:
        assert format_date_input("151220241234", "15/12/2024") == "15/12/2024"

    def test_no_day_slash_while_deleting(self) -> None:
        assert format_date_input("15/1", "15/12") == "151"
        assert format_date_input("15", "15/1") == "15"

    def test_second_slash_kept_while_deleting(self) -> None:
        assert format_date_input("15/12/202", "15/12/2024") == "15/12/202"

    def test_empty_and_single_digit(self) -> None:
        assert format_date_input("", "") == ""
        assert format_date_input("1", "") == "1"

    def test_keeps_ascii_digits_only(self) -> None:
        assert format_date_input("١٥", "") == ""
        assert format_date_input("1٥5", "1") == "15/"

    def test_tolerates_none(self) -> None:
        assert format_date_input(None, None) == ""

    @pytest.mark.parametrize("length", range(0, 9))
    def test_digit_inputs_keep_fixed_slash_offsets(self, length: int) -> None:
        result = format_date_input("12345678"[:length], "")

        assert set(result) <= set("0123456789/")
        assert result.count("/") <= 2
        slash_positions = [i for i, char in enumerate(result) if char == "/"]
        assert slash_positions == [2, 5][: len(slash_positions)]
        assert result.replace("/", "") == "12345678"[:length]


class TestIsoConversion:
    def test_to_iso(self) -> None:
        assert convert_to_iso_date("15/06/1990") == "1990-06-15"

    def test_to_iso_does_not_check_calendar(self) -> None:
        assert convert_to_iso_date("31/02/2010") == "2010-02-31"

    def test_from_iso(self) -> None:
        assert convert_from_iso_date("1990-06-15") == "15/06/1990"
