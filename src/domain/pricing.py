"""
Credit pricing.

Bulk tiers are a pure function of the requested quantity and are resolved
before a purchase transaction is written.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from src.domain.entities.enums import PricingTier

BASE_PRICE = Decimal("150.00")

# (minimum quantity, tier, discount percent), highest threshold first
BULK_TIERS = (
    (2500, PricingTier.bulk_tier_2, Decimal("30.00")),
    (500, PricingTier.bulk_tier_1, Decimal("25.00")),
)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PriceQuote:
    quantity: int
    tier: PricingTier
    base_unit_price: Decimal
    discount_percentage: Decimal
    unit_price: Decimal
    total: Decimal


def quote_price(quantity: int, base_price: Decimal = BASE_PRICE) -> PriceQuote:
    """
    Price `quantity` credits.

    150.00 per credit, 25% off from 500 credits, 30% off from 2500.
    """
    if quantity <= 0:
        raise ValueError("Quantity must be positive")

    tier, discount = PricingTier.individual, Decimal("0.00")
    for threshold, bulk_tier, bulk_discount in BULK_TIERS:
        if quantity >= threshold:
            tier, discount = bulk_tier, bulk_discount
            break

    unit_price = (base_price * (Decimal(100) - discount) / Decimal(100)).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )
    return PriceQuote(
        quantity=quantity,
        tier=tier,
        base_unit_price=base_price,
        discount_percentage=discount,
        unit_price=unit_price,
        total=(unit_price * quantity).quantize(CENTS, rounding=ROUND_HALF_UP),
    )
