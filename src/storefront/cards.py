"""Mock payment card validation.

Nothing here talks to a payment provider. The checks only catch typos and
obviously bad input before an order is recorded: Luhn checksum, expiry in the
future, CVC length, and a rough brand guess from the leading digits.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

NON_DIGIT_RE = re.compile(r"[^0-9]")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

VISA_RE = re.compile(r"^4[0-9]{6,}$")
MASTERCARD_RE = re.compile(r"^5[1-5][0-9]{5,}$")
MASTERCARD_2_SERIES_RE = re.compile(
    r"^2(22[1-9]|2[3-9][0-9]|[3-6][0-9]{2}|7[01][0-9]|720)[0-9]{3,}$"
)
AMEX_RE = re.compile(r"^3[47][0-9]{5,}$")

MIN_CARD_LENGTH = 12
MAX_CARD_LENGTH = 19
MIN_NAME_LENGTH = 3


class CardBrand(str, Enum):
    """Card network guessed from the IIN."""

    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    CARD = "card"


def normalize_digits(value: str | None) -> str:
    """Strip everything but ASCII digits."""
    return NON_DIGIT_RE.sub("", value or "")


def luhn_check(digits: str | None) -> bool:
    """
    Validate a card number with the Luhn checksum.

    Every second digit from the right is doubled (minus 9 when above 9) and
    the total must be a multiple of 10. Numbers shorter than 12 digits never
    pass.
    """
    digits = normalize_digits(digits)
    if len(digits) < MIN_CARD_LENGTH:
        return False

    total = 0
    for i, ch in enumerate(reversed(digits)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_card_brand(digits: str | None) -> CardBrand:
    """Guess the card brand. Checked in order: visa, mastercard, amex."""
    n = normalize_digits(digits)
    if VISA_RE.match(n):
        return CardBrand.VISA
    if MASTERCARD_RE.match(n) or MASTERCARD_2_SERIES_RE.match(n):
        return CardBrand.MASTERCARD
    if AMEX_RE.match(n):
        return CardBrand.AMEX
    return CardBrand.CARD


@dataclass(frozen=True)
class CheckoutForm:
    """Payment form as submitted by the customer."""

    name: str = ""
    email: str = ""
    card_number: str = ""
    exp: str = ""
    cvc: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CheckoutForm":
        """Build a form from loosely-typed request fields, trimming each one."""

        def _field(*keys: str) -> str:
            for key in keys:
                value = data.get(key)
                if value is not None:
                    return str(value).strip()
            return ""

        return cls(
            name=_field("name"),
            email=_field("email"),
            card_number=_field("card_number", "cardNumber"),
            exp=_field("exp"),
            cvc=_field("cvc"),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "card_number": self.card_number,
            "exp": self.exp,
            "cvc": self.cvc,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a checkout form."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    card_number_digits: str = ""
    exp_digits: str = ""
    cvc_digits: str = ""


def _card_expired(exp_digits: str, now: datetime) -> bool:
    """
    A card is treated as expired from the first day of its MM/YY month.

    An aware `now` is compared by its own wall-clock date and time.
    """
    month = int(exp_digits[:2])
    year = 2000 + int(exp_digits[2:])
    expires_at = datetime(year, month, 1)
    return expires_at <= now.replace(tzinfo=None)


def validate_checkout_form(
    form: CheckoutForm, now: datetime | None = None
) -> ValidationResult:
    """
    Validate a checkout form, collecting every failure.

    Checks run in a fixed order (name, email, card number, expiry, cvc) and
    none of them short-circuit, so the error list mirrors the form layout.
    Normalized digit strings are returned even when the form is invalid.

    Args:
        form: The submitted form.
        now: Reference time for the expiry check (default: local now).
    """
    now = now or datetime.now()
    errors: list[str] = []
    card_digits = normalize_digits(form.card_number)
    exp_digits = normalize_digits(form.exp)
    cvc_digits = normalize_digits(form.cvc)

    if len((form.name or "").strip()) < MIN_NAME_LENGTH:
        errors.append("Cardholder name must be at least 3 characters.")

    if form.email and not EMAIL_RE.match(form.email):
        errors.append("Enter a valid email address or leave it empty.")

    if not MIN_CARD_LENGTH <= len(card_digits) <= MAX_CARD_LENGTH:
        errors.append("Card number must be 12-19 digits.")
    if not luhn_check(card_digits):
        errors.append("Card number failed verification.")

    if len(exp_digits) != 4:
        errors.append("Expiry must be in MM/YY format.")
    else:
        month = int(exp_digits[:2])
        if not 1 <= month <= 12:
            errors.append("Expiry month is invalid.")
        elif _card_expired(exp_digits, now):
            errors.append("Card has expired.")

    if not 3 <= len(cvc_digits) <= 4:
        errors.append("CVC must be 3 or 4 digits.")

    return ValidationResult(
        valid=not errors,
        errors=errors,
        card_number_digits=card_digits,
        exp_digits=exp_digits,
        cvc_digits=cvc_digits,
    )
