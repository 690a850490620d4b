"""Checkout orchestration.

A checkout attempt over a session cart ends in one of these states:

    EMPTY_CART        nothing to buy; the caller should send the user to the cart
    AWAITING_PAYMENT  totals are shown with a form (blank, or echoed back with
                      validation or persistence errors)
    COMPLETED         an order was stored and the cart was cleared

VALIDATING is the transient state while the submitted form is checked. The
cart is cleared only after the order sink confirms the write.
"""

import logging
import secrets
import string
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Callable

from .cards import (
    CheckoutForm,
    ValidationResult,
    detect_card_brand,
    validate_checkout_form,
)
from .cart import compute_cart_totals
from .config import DEFAULT_ORDER_STATUS, ORDER_CODE_LENGTH, ORDER_CODE_PREFIX
from .errors import DuplicateOrderCodeError, OrderPersistenceError
from .models import CartTotals, Order
from .protocols import OrderSink, ProductLookup, SessionCartStore

logger = logging.getLogger(__name__)

PERSISTENCE_ERROR_MESSAGE = "Your payment could not be recorded. Please try again."
MAX_CODE_ATTEMPTS = 5

_CODE_ALPHABET = string.ascii_uppercase + string.digits


class CheckoutState(str, Enum):
    EMPTY_CART = "empty_cart"
    AWAITING_PAYMENT = "awaiting_payment"
    VALIDATING = "validating"
    COMPLETED = "completed"


class CheckoutErrorKind(str, Enum):
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


def generate_order_code() -> str:
    """Random order code such as "ORD-7K2Q9XWA"."""
    token = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(ORDER_CODE_LENGTH))
    return f"{ORDER_CODE_PREFIX}{token}"


@dataclass
class CheckoutOutcome:
    """What the caller should show after a checkout step."""

    state: CheckoutState
    totals: CartTotals | None = None
    form: CheckoutForm = field(default_factory=CheckoutForm)
    errors: list[str] = field(default_factory=list)
    error_kind: CheckoutErrorKind | None = None
    order: Order | None = None

    @property
    def retryable(self) -> bool:
        return self.error_kind == CheckoutErrorKind.PERSISTENCE

    @property
    def order_code(self) -> str | None:
        return self.order.code if self.order else None

    @property
    def masked_card(self) -> str | None:
        return self.order.masked_card if self.order else None

    @property
    def message(self) -> str | None:
        """Headline to show the customer."""
        if self.order is not None:
            return (
                f"Payment approved. Order code: {self.order.code} ({self.order.masked_card})"
            )
        if self.errors:
            return self.errors[0]
        return None


class Checkout:
    """Runs checkout attempts against a session cart.

    Holds no per-session state; every call reads the cart store, the product
    lookup and the clock it was given.
    """

    def __init__(
        self,
        product_lookup: ProductLookup,
        order_sink: OrderSink,
        cart_store: SessionCartStore,
        clock: Callable[[], datetime] | None = None,
        code_factory: Callable[[], str] | None = None,
    ):
        self.product_lookup = product_lookup
        self.order_sink = order_sink
        self.cart_store = cart_store
        self._clock = clock or datetime.now
        self._code_factory = code_factory or generate_order_code

    def _priced_cart(self, session_id: str) -> CartTotals | None:
        """
        Price the session cart, or return None if nothing in it can be bought.

        A cart whose lines all point at deleted products is cleared.
        """
        lines = self.cart_store.get_cart(session_id)
        if not lines:
            return None
        totals = compute_cart_totals(lines, self.product_lookup)
        if not totals.items:
            self.cart_store.clear_cart(session_id)
            return None
        return totals

    def view(self, session_id: str) -> CheckoutOutcome:
        """Show the checkout page: totals and a blank form."""
        totals = self._priced_cart(session_id)
        if totals is None:
            return CheckoutOutcome(state=CheckoutState.EMPTY_CART)
        return CheckoutOutcome(state=CheckoutState.AWAITING_PAYMENT, totals=totals)

    def submit(self, session_id: str, form: CheckoutForm) -> CheckoutOutcome:
        """
        Validate a payment form and, if it passes, place the order.

        Validation failures and order-store failures both come back as
        AWAITING_PAYMENT with the form echoed; error_kind tells them apart.
        Product lookup errors propagate and leave the cart untouched.
        """
        totals = self._priced_cart(session_id)
        if totals is None:
            return CheckoutOutcome(state=CheckoutState.EMPTY_CART)

        validation = validate_checkout_form(form, now=self._clock())
        if not validation.valid:
            return CheckoutOutcome(
                state=CheckoutState.AWAITING_PAYMENT,
                totals=totals,
                form=form,
                errors=list(validation.errors),
                error_kind=CheckoutErrorKind.VALIDATION,
            )

        try:
            order = self._place_order(form, validation, totals)
        except OrderPersistenceError:
            logger.exception("Order could not be stored for session %s", session_id)
            return CheckoutOutcome(
                state=CheckoutState.AWAITING_PAYMENT,
                totals=totals,
                form=form,
                errors=[PERSISTENCE_ERROR_MESSAGE],
                error_kind=CheckoutErrorKind.PERSISTENCE,
            )

        self.cart_store.clear_cart(session_id)
        logger.info("Checkout completed: order %s", order.code)
        return CheckoutOutcome(
            state=CheckoutState.COMPLETED,
            totals=totals,
            order=order,
        )

    def _place_order(
        self, form: CheckoutForm, validation: ValidationResult, totals: CartTotals
    ) -> Order:
        """Build the order and write it, drawing a fresh code on collision."""
        digits = validation.card_number_digits
        brand = detect_card_brand(digits).value

        attempts = 0
        while True:
            attempts += 1
            order = Order(
                code=self._code_factory(),
                customer_name=form.name.strip(),
                customer_email=form.email.strip() or None,
                total_amount=totals.total_amount,
                shipping_amount=totals.shipping,
                payable_amount=totals.payable,
                items=list(totals.items),
                card_brand=brand,
                card_last4=digits[-4:],
                status=DEFAULT_ORDER_STATUS,
            )
            try:
                order_id = self.order_sink.create_order(order)
            except DuplicateOrderCodeError:
                if attempts >= MAX_CODE_ATTEMPTS:
                    raise
                logger.warning("Order code %s already taken, retrying", order.code)
            else:
                return replace(order, id=order_id)
