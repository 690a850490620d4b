"""Tests for mock card validation."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.cards import (
    CardBrand,
    CheckoutForm,
    detect_card_brand,
    luhn_check,
    normalize_digits,
    validate_checkout_form,
)

from .conftest import FIXED_NOW


class TestNormalizeDigits:
    def test_strips_separators(self):
        assert normalize_digits("4111 1111-1111 1111") == "4111111111111111"

    def test_none_is_empty(self):
        assert normalize_digits(None) == ""

    def test_non_ascii_digits_stripped(self):
        # Arabic-Indic and fullwidth digits are not card digits
        assert normalize_digits("٤١١١ ١١١١") == ""
        assert normalize_digits("４１1１") == "1"

    def test_non_ascii_card_number_rejected(self):
        form = CheckoutForm(
            name="Test User",
            card_number="٤١١١ ١١١١ ١١١١ ١١١١",
            exp="12/26",
            cvc="123",
        )
        result = validate_checkout_form(form, now=FIXED_NOW)

        assert result.valid is False
        assert result.card_number_digits == ""
        assert "Card number must be 12-19 digits." in result.errors


class TestLuhnCheck:
    def test_valid_number(self):
        assert luhn_check("4111111111111111") is True

    def test_wrong_check_digit(self):
        assert luhn_check("4111111111111112") is False

    def test_too_short(self):
        assert luhn_check("123") is False
        # Passes the checksum but is under 12 digits
        assert luhn_check("0") is False

    def test_formatting_ignored(self):
        assert luhn_check("4111-1111-1111-1111") is True

    @pytest.mark.parametrize(
        "number",
        ["5105105105105100", "378282246310005", "2221000000000009", "6011111111111117"],
    )
    def test_known_test_numbers(self, number):
        assert luhn_check(number) is True


class TestDetectCardBrand:
    @pytest.mark.parametrize(
        "number,brand",
        [
            ("4111111111111111", CardBrand.VISA),
            ("5105105105105100", CardBrand.MASTERCARD),
            ("5500000000000004", CardBrand.MASTERCARD),
            ("2221000000000009", CardBrand.MASTERCARD),
            ("2720990000000007", CardBrand.MASTERCARD),
            ("340000000000009", CardBrand.AMEX),
            ("378282246310005", CardBrand.AMEX),
            ("123456789012", CardBrand.CARD),
            ("6011111111111117", CardBrand.CARD),
        ],
    )
    def test_brands(self, number, brand):
        assert detect_card_brand(number) == brand

    def test_outside_mastercard_2_series(self):
        assert detect_card_brand("2220990000000000") == CardBrand.CARD
        assert detect_card_brand("2721000000000000") == CardBrand.CARD

    def test_brand_values_are_lowercase_strings(self):
        assert detect_card_brand("4111111111111111").value == "visa"
        assert detect_card_brand("5105105105105100") == "mastercard"


class TestCheckoutForm:
    def test_from_mapping_trims_fields(self):
        form = CheckoutForm.from_mapping(
            {"name": "  Ada  ", "email": " a@b.co ", "card_number": " 4111 ", "exp": "12/30 ", "cvc": " 123"}
        )

        assert form.name == "Ada"
        assert form.email == "a@b.co"
        assert form.card_number == "4111"
        assert form.exp == "12/30"
        assert form.cvc == "123"

    def test_from_mapping_accepts_camel_case_card_number(self):
        form = CheckoutForm.from_mapping({"cardNumber": "4111111111111111"})
        assert form.card_number == "4111111111111111"

    def test_missing_fields_are_empty(self):
        form = CheckoutForm.from_mapping({})
        assert form.to_dict() == {
            "name": "", "email": "", "card_number": "", "exp": "", "cvc": "",
        }


class TestValidateCheckoutForm:
    def _form(self, **overrides):
        data = {
            "name": "Test User",
            "email": "test@example.com",
            "card_number": "4111111111111111",
            "exp": "1226",
            "cvc": "123",
        }
        data.update(overrides)
        return CheckoutForm(**data)

    def test_valid_form(self):
        result = validate_checkout_form(self._form(), now=FIXED_NOW)

        assert result.valid is True
        assert result.errors == []
        assert result.card_number_digits == "4111111111111111"
        assert result.exp_digits == "1226"
        assert result.cvc_digits == "123"

    def test_everything_wrong(self):
        form = CheckoutForm(
            name="ab", email="bad", card_number="123", exp="1299", cvc="12"
        )
        result = validate_checkout_form(form, now=FIXED_NOW)

        assert result.valid is False
        assert len(result.errors) >= 3

    def test_errors_follow_field_order(self):
        form = CheckoutForm(name="ab", email="bad", card_number="123", exp="13/30", cvc="1")
        result = validate_checkout_form(form, now=FIXED_NOW)

        assert result.errors == [
            "Cardholder name must be at least 3 characters.",
            "Enter a valid email address or leave it empty.",
            "Card number must be 12-19 digits.",
            "Card number failed verification.",
            "Expiry month is invalid.",
            "CVC must be 3 or 4 digits.",
        ]

    def test_email_is_optional(self):
        result = validate_checkout_form(self._form(email=""), now=FIXED_NOW)
        assert result.valid is True

    def test_formatted_input_is_normalized(self):
        result = validate_checkout_form(
            self._form(card_number="4111 1111 1111 1111", exp="12/26"), now=FIXED_NOW
        )
        assert result.valid is True
        assert result.card_number_digits == "4111111111111111"

    def test_luhn_failure_reported_alone_for_right_length(self):
        result = validate_checkout_form(
            self._form(card_number="4111111111111112"), now=FIXED_NOW
        )
        assert result.errors == ["Card number failed verification."]

    def test_card_too_long(self):
        result = validate_checkout_form(self._form(card_number="4" * 20), now=FIXED_NOW)
        assert "Card number must be 12-19 digits." in result.errors

    def test_bad_expiry_format(self):
        result = validate_checkout_form(self._form(exp="1/6"), now=FIXED_NOW)
        assert result.errors == ["Expiry must be in MM/YY format."]

    def test_expired_card(self):
        result = validate_checkout_form(self._form(exp="05/25"), now=FIXED_NOW)
        assert result.errors == ["Card has expired."]

    def test_card_expires_at_start_of_its_month(self):
        # FIXED_NOW is mid-June 2025, so 06/25 has already expired
        result = validate_checkout_form(self._form(exp="06/25"), now=FIXED_NOW)
        assert result.errors == ["Card has expired."]

        result = validate_checkout_form(self._form(exp="07/25"), now=FIXED_NOW)
        assert result.valid is True

    def test_first_instant_of_month_is_expired(self):
        now = datetime(2025, 7, 1, 0, 0, 0)
        result = validate_checkout_form(self._form(exp="07/25"), now=now)
        assert result.errors == ["Card has expired."]

    @pytest.mark.parametrize("tz", [timezone.utc, timezone(timedelta(hours=-5))])
    def test_aware_clock(self, tz):
        now = FIXED_NOW.replace(tzinfo=tz)

        assert validate_checkout_form(self._form(exp="07/25"), now=now).valid is True
        result = validate_checkout_form(self._form(exp="06/25"), now=now)
        assert result.errors == ["Card has expired."]

    @pytest.mark.parametrize("cvc", ["123", "1234"])
    def test_cvc_lengths_accepted(self, cvc):
        assert validate_checkout_form(self._form(cvc=cvc), now=FIXED_NOW).valid

    @pytest.mark.parametrize("cvc", ["", "12", "12345"])
    def test_cvc_lengths_rejected(self, cvc):
        result = validate_checkout_form(self._form(cvc=cvc), now=FIXED_NOW)
        assert result.errors == ["CVC must be 3 or 4 digits."]

    def test_name_is_trimmed_before_length_check(self):
        result = validate_checkout_form(self._form(name="  ab  "), now=FIXED_NOW)
        assert result.errors == ["Cardholder name must be at least 3 characters."]
