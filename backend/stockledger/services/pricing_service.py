# Overview: Customer-tier price lookup.

from __future__ import annotations

from ..constants import CustomerTier
from ..validation import normalize_tier

# Flat per-tier pricing. The older quantity-break tiers are not supported.
# star <= premium <= regular is expected by the business but not enforced.
TIER_PRICE_FIELDS = {
    CustomerTier.REGULAR.value: "price_regular",
    CustomerTier.PREMIUM.value: "price_premium",
    CustomerTier.STAR.value: "price_star",
}


def resolve_price(product, tier: str | None = None) -> int:
    """
    Unit price (per base unit) for a customer tier.

    Tier is case-insensitive; unknown or missing tiers price as regular.
    A missing product or unset price field yields 0, never None.
    """
    if product is None:
        return 0
    field = TIER_PRICE_FIELDS[normalize_tier(tier)]
    return getattr(product, field, None) or 0
