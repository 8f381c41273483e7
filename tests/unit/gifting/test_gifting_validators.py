"""
Unit Tests for Gifting Primitive Validators

Number/country normalization, name and phone sanitizing, email and social
handle syntax, and per-country phone length rules.
"""

import pytest

from microservices.gifting_service.models import ContactFields, PhoneCountry
from microservices.gifting_service.validators import (
    ensure_handle_format,
    is_valid_email_address,
    is_valid_social_handle,
    normalize_country_name,
    normalize_number,
    phone_error,
    phone_length_rules,
    sanitize_contact,
    sanitize_person_name,
    sanitize_phone_digits,
)

pytestmark = [pytest.mark.unit]


class TestNormalizeNumber:

    @pytest.mark.parametrize("value,expected", [
        ("4.9", 4.9),
        ("  7 ", 7.0),
        (3, 3.0),
        (0, 0.0),
        ("-2", -2.0),
    ])
    def test_parses_numbers_and_numeric_strings(self, value, expected):
        assert normalize_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", float("inf"), float("nan"), [1]])
    def test_missing_or_non_finite_is_none(self, value):
        assert normalize_number(value) is None


class TestNormalizeCountryName:

    def test_trims_and_lowercases(self):
        assert normalize_country_name("  United States ") == "united states"

    def test_none_is_empty(self):
        assert normalize_country_name(None) == ""


class TestSanitizePersonName:

    def test_strips_digits_and_symbols(self):
        assert sanitize_person_name("Ava3 St@one") == "Ava Stone"

    def test_keeps_apostrophes_and_hyphens(self):
        assert sanitize_person_name("Mary-Jane O'Neil") == "Mary-Jane O'Neil"

    def test_truncates_to_fifty_characters(self):
        assert len(sanitize_person_name("a" * 80)) == 50

    def test_empty(self):
        assert sanitize_person_name(None) == ""


class TestSanitizePhoneDigits:

    def test_keeps_digits_only(self):
        assert sanitize_phone_digits("(512) 555-0100") == "5125550100"

    def test_truncates_when_previous_has_room(self):
        assert sanitize_phone_digits("51255501009", previous="512555010", max_length=10) == "5125550100"

    def test_refuses_growth_at_capacity(self):
        assert sanitize_phone_digits("51255501009", previous="5125550100", max_length=10) == "5125550100"

    @pytest.mark.parametrize("raw", ["1" * 30, "12-34-56-78-90-12-34", "+44 20 7946 0958 123"])
    def test_never_exceeds_max_length(self, raw):
        assert len(sanitize_phone_digits(raw, previous="", max_length=12)) <= 12


class TestEmailAddress:

    @pytest.mark.parametrize("email", [
        "ava@example.com",
        "ava.stone+gift@mail.example.co",
        "a_b-c@sub-domain.example.io",
    ])
    def test_valid(self, email):
        assert is_valid_email_address(email) is True

    @pytest.mark.parametrize("email", [
        "",
        None,
        "ava.example.com",
        "ava@@example.com",
        "ava@example",
        ".ava@example.com",
        "ava.@example.com",
        "ava..stone@example.com",
        "ava@-example.com",
        "ava@example-.com",
        "ava@example.c",
        "ava@exa_mple.com",
        "av a@example.com",
        ("a" * 65) + "@example.com",
        "ava@" + ("a" * 64) + ".com",
        ("a" * 60) + "@" + ".".join(["b" * 60] * 4) + ".com",
    ])
    def test_invalid(self, email):
        assert is_valid_email_address(email) is False


class TestSocialHandles:

    @pytest.mark.parametrize("handle", ["@ava.stone", "ava_stone", "@@ava99"])
    def test_valid_handles(self, handle):
        assert is_valid_social_handle(handle) is True

    @pytest.mark.parametrize("handle", ["", None, "@@", "___", "ava stone", "@ava!"])
    def test_invalid_handles(self, handle):
        assert is_valid_social_handle(handle) is False

    def test_ensure_handle_format_adds_single_at(self):
        assert ensure_handle_format("  ava stone ") == "@avastone"
        assert ensure_handle_format("@@ava") == "@ava"

    def test_ensure_handle_format_empty_when_nothing_usable(self):
        assert ensure_handle_format("") == ""
        assert ensure_handle_format("@!!") == ""

    @pytest.mark.parametrize("raw", ["ava", "@ava.stone", " @@a v a! ", "x_y"])
    def test_ensure_handle_format_is_idempotent(self, raw):
        once = ensure_handle_format(raw)
        assert ensure_handle_format(once) == once


class TestSanitizeContact:

    def test_names_and_handles_normalized(self):
        contact = ContactFields(
            first_name="<b>Ava</b>2",
            last_name="Stone",
            email=" ava@example.com ",
            instagram="ava.stone",
            tiktok="@@ava",
        )
        clean = sanitize_contact(contact)

        assert clean.full_name == "bAvab Stone"
        assert clean.email == "ava@example.com"
        assert clean.instagram == "@ava.stone"
        assert clean.tiktok == "@ava"

    def test_empty_handles_stay_empty(self):
        clean = sanitize_contact(ContactFields(email="ava@example.com"))
        assert clean.instagram == ""
        assert clean.tiktok == ""

    def test_other_fields_untouched(self):
        contact = ContactFields(phone="5125550100", custom_answer="<3", consent_primary=True)
        clean = sanitize_contact(contact)

        assert clean.phone == "5125550100"
        assert clean.custom_answer == "<3"
        assert clean.consent_primary is True
        assert contact.first_name == ""


class TestPhoneLengthRules:

    def test_defaults_without_country(self):
        assert phone_length_rules(None) == {"min_length": 5, "max_length": 15}

    def test_bounds_are_clamped(self):
        country = PhoneCountry(code="XX", min_length=3, max_length=20)
        assert phone_length_rules(country) == {"min_length": 5, "max_length": 15}

    def test_inverted_bounds_are_not_reordered(self):
        country = PhoneCountry(code="XX", min_length=12, max_length=8)
        assert phone_length_rules(country) == {"min_length": 12, "max_length": 8}


class TestPhoneError:

    def test_passes_within_bounds(self):
        us = PhoneCountry(code="US", name="United States", dial_code="1", min_length=10, max_length=10)
        assert phone_error("5125550100", us) == ""

    def test_exact_length_message(self):
        us = PhoneCountry(code="US", name="United States", dial_code="1", min_length=10, max_length=10)
        assert phone_error("12345", us) == "Phone number must be 10 digits for United States."

    def test_range_message_without_country(self):
        assert phone_error("123", None) == "Phone number must be 5-15 digits for this country."

    def test_digits_only(self):
        assert phone_error("12a45", None) == "Phone number must contain digits only."
