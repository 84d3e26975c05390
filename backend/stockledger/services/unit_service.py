"""
Base/bulk unit conversion.

Stock is tracked in a product's BASE unit only. A product may declare a
coarser BULK unit (e.g. "Sack") holding bulk_unit_conversion base units.

- Quantities convert by multiplying/dividing by the factor and are NOT
  rounded (fractional base quantities are valid).
- Money converts the inverse way and IS rounded half-up to whole currency
  units: a per-bulk cost becomes cost / k per base unit, a per-base price
  becomes price * k per bulk unit.
- A factor that is missing, zero, negative or non-finite is treated as 1 and
  logged as a data-quality problem instead of failing the caller.
- Stored stock quantities are rounded to QUANTITY_PLACES decimal places so
  repeated fractional sales do not drift (0.7 - 0.4 is 0.3, not
  0.29999999999999993).
- resolve_unit is the strict check for untrusted line units; the helpers
  below it assume a unit that has already been resolved.

Functions accept any object exposing bulk_unit_name / bulk_unit_conversion
(normally a Product row).
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from ..constants import UNIT_BASE, UNIT_BULK
from ..errors import ValidationError

log = logging.getLogger(__name__)

# Stock quantities keep 6 decimal places (milligrams of a kg base unit)
QUANTITY_PLACES = 6
_QUANTITY_EXP = Decimal(1).scaleb(-QUANTITY_PLACES)


def round_half_up(value) -> int:
    """Nearest whole currency unit, halves rounded away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_quantity(value) -> float:
    """Base-unit quantity rounded half-up to QUANTITY_PLACES decimals."""
    value = float(value)
    if abs(value) >= 1e15:
        # No sub-unit resolution left in a float this large
        return value
    rounded = Decimal(str(value)).quantize(_QUANTITY_EXP, rounding=ROUND_HALF_UP)
    # + 0.0 turns -0.0 into 0.0
    return float(rounded) + 0.0


def conversion_factor(product) -> float:
    raw = getattr(product, "bulk_unit_conversion", None)
    try:
        factor = float(raw) if raw is not None else None
    except (TypeError, ValueError):
        factor = None

    if factor is None or not math.isfinite(factor) or factor <= 0:
        if getattr(product, "bulk_unit_name", None):
            log.warning(
                "Data quality: product %s has bulk unit %r with invalid conversion %r; using 1",
                getattr(product, "sku", "?"),
                product.bulk_unit_name,
                raw,
            )
        return 1.0
    return factor


def is_bulk_unit(product, unit: str | None) -> bool:
    """True for the literal "bulk" marker or the product's bulk unit name."""
    if not unit:
        return False
    candidate = str(unit).strip().lower()
    if candidate == UNIT_BULK:
        return True
    if candidate == UNIT_BASE:
        return False
    bulk_name = getattr(product, "bulk_unit_name", None)
    return bool(bulk_name) and candidate == str(bulk_name).strip().lower()


def resolve_unit(product, unit: str | None) -> str:
    """
    Map a caller-supplied unit to UNIT_BASE or UNIT_BULK.

    Accepted, case-insensitively: blank or "base", the product's base_unit,
    "bulk", or the product's bulk_unit_name. Bulk is only accepted when the
    product declares a bulk unit. Anything else raises ValidationError.
    """
    candidate = str(unit or "").strip().lower()
    sku = getattr(product, "sku", None)
    base_unit = str(getattr(product, "base_unit", None) or "").strip().lower()
    bulk_name = str(getattr(product, "bulk_unit_name", None) or "").strip().lower()

    if candidate in ("", UNIT_BASE):
        return UNIT_BASE
    if candidate == UNIT_BULK or (bulk_name and candidate == bulk_name):
        if not bulk_name:
            raise ValidationError(
                f"Product {sku} has no bulk unit",
                details={"sku": sku, "unit": unit},
            )
        return UNIT_BULK
    if base_unit and candidate == base_unit:
        return UNIT_BASE

    allowed = [u for u in (UNIT_BASE, base_unit, UNIT_BULK if bulk_name else "", bulk_name) if u]
    raise ValidationError(
        f"Unknown unit {unit!r} for {sku}; expected one of: {', '.join(allowed)}",
        details={"sku": sku, "unit": unit},
    )


def to_base(quantity: float, product, unit: str | None = UNIT_BULK) -> float:
    """
    Express quantity in base units.

    quantity is taken to be in `unit`; only bulk quantities are scaled.
    """
    if is_bulk_unit(product, unit):
        return quantity * conversion_factor(product)
    return quantity


def to_bulk(quantity: float, product) -> float:
    """Express a base-unit quantity in bulk units."""
    return quantity / conversion_factor(product)


def cost_per_base_unit(cost_per_bulk, product) -> int:
    return round_half_up(Decimal(str(cost_per_bulk)) / Decimal(str(conversion_factor(product))))


def price_per_bulk_unit(price_per_base, product) -> int:
    return round_half_up(Decimal(str(price_per_base)) * Decimal(str(conversion_factor(product))))


def unit_label(product, unit: str | None) -> str | None:
    """Display name of the unit a line is expressed in."""
    if is_bulk_unit(product, unit):
        return getattr(product, "bulk_unit_name", None) or UNIT_BULK
    return getattr(product, "base_unit", None)
