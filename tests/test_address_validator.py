"""Tests for street splitting and postal code validation."""

import pytest

from myparcel_export.address_validator import (
    normalize_postal_code,
    split_street,
    validate,
    validate_postal_code,
)
from myparcel_export.exceptions import AddressError, ErrorKind


class TestSplitStreet:
    def test_dutch_street_with_suffix(self):
        result = split_street("Teststraat 123A", "NL", "NL")
        assert result.street == "Teststraat"
        assert result.number == 123
        assert result.number_suffix == "A"

    def test_dutch_street_with_dash_suffix(self):
        result = split_street("Kerkstraat 12-bis", "NL", "NL")
        assert result.street == "Kerkstraat"
        assert result.number == 12
        assert result.number_suffix == "bis"

    def test_collapses_whitespace(self):
        result = split_street("  Lange   Voorhout  9 ", "NL", "NL")
        assert result.street == "Lange Voorhout"
        assert result.number == 9

    def test_belgian_box_number(self):
        result = split_street("Rue de la Loi 16 bus 3", "NL", "BE")
        assert result.street == "Rue de la Loi"
        assert result.number == 16
        assert result.box_number == "3"

    def test_missing_house_number(self):
        with pytest.raises(AddressError) as excinfo:
            split_street("Teststraat", "NL", "NL")
        assert excinfo.value.kind == ErrorKind.INVALID_STREET

    def test_other_destinations_keep_full_line(self):
        result = split_street("10 Downing Street", "NL", "GB")
        assert result.street == "10 Downing Street"
        assert result.number is None


class TestPostalCode:
    def test_whitespace_is_removed(self):
        assert normalize_postal_code(" 1234\tAB ") == "1234AB"

    def test_equivalent_after_whitespace_removal(self):
        assert validate_postal_code("1234 AB", "NL") == validate_postal_code("1234AB", "NL")

    @pytest.mark.parametrize(
        "postal_code,country",
        [("0123AB", "NL"), ("12345", "BE"), ("1234", "DE"), ("ABCDE", "FR")],
    )
    def test_invalid_codes(self, postal_code, country):
        with pytest.raises(AddressError) as excinfo:
            validate_postal_code(postal_code, country)
        assert excinfo.value.kind == ErrorKind.INVALID_POSTAL_CODE

    def test_countries_without_pattern_accept_anything(self):
        assert validate_postal_code("100-0001", "JP") == "100-0001"


class TestValidate:
    def test_valid_dutch_address(self):
        result = validate("Teststraat 123A", "1234 AB", "NL", "NL")
        assert (result.street, result.number, result.number_suffix, result.postal_code) == (
            "Teststraat",
            123,
            "A",
            "1234AB",
        )

    def test_street_is_checked_before_postal_code(self):
        with pytest.raises(AddressError) as excinfo:
            validate("Teststraat", "bad", "NL", "NL")
        assert excinfo.value.kind == ErrorKind.INVALID_STREET
