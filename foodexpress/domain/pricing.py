# foodexpress/domain/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from foodexpress.domain.errors import ValidationError
from foodexpress.utils.settings import DELIVERY_FEE, TAX_RATE

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Adjustments:
    delivery_fee: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    delivery_fee: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal


def line_subtotal(price, quantity: int) -> Decimal:
    return money(Decimal(str(price)) * quantity)


def compute_totals(line_subtotals: Iterable[Decimal], adjustments: Adjustments) -> Totals:
    """total = sum(lines) + delivery fee + tax - discount.

    This is the only place an order total is derived.
    """
    delivery_fee = money(adjustments.delivery_fee)
    tax_amount = money(adjustments.tax_amount)
    discount_amount = money(adjustments.discount_amount)

    if min(delivery_fee, tax_amount, discount_amount) < ZERO:
        raise ValidationError("Delivery fee, tax and discount cannot be negative")

    subtotal = sum((money(s) for s in line_subtotals), ZERO)
    total = subtotal + delivery_fee + tax_amount - discount_amount

    if total < ZERO:
        raise ValidationError("Discount cannot exceed the order amount")

    return Totals(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=total,
    )


class PricingPolicy:
    """Supplies delivery fee, tax and discount for a checkout. Defaults to none."""

    def adjustments(self, restaurant_id: int, subtotal: Decimal) -> Adjustments:
        return Adjustments()


class FlatPricing(PricingPolicy):
    def __init__(self, delivery_fee=None, tax_rate=None, discount=None):
        self.delivery_fee = money(DELIVERY_FEE if delivery_fee is None else delivery_fee)
        self.tax_rate = Decimal(str(TAX_RATE if tax_rate is None else tax_rate))
        self.discount = money(discount or 0)

    def adjustments(self, restaurant_id: int, subtotal: Decimal) -> Adjustments:
        return Adjustments(
            delivery_fee=self.delivery_fee,
            tax_amount=money(subtotal * self.tax_rate),
            discount_amount=min(self.discount, subtotal),
        )
