from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Float, Integer, String, Text

from .constants import BaseUnit, CustomerTier, LossReason, UNIT_BASE
from .errors import ValidationError
from .models import Product
from .time_utils import parse_iso_date
from .services.unit_service import round_half_up


# Maximum money value in whole currency units
# This prevents database overflow issues and nonsensical prices
MAX_MONEY = 999_999_999_999


@dataclass(frozen=True)
class ProductPayloadPolicy:
    """Product columns a catalog request may set, and those a create must carry."""
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()


@dataclass(frozen=True)
class LineItem:
    """One validated order/purchase line as it enters a service."""
    sku: str
    quantity: float
    unit: str = UNIT_BASE
    unit_cost: int | None = None
    product_name: str | None = None


def require_number(value: Any, field: str, *, allow_zero: bool = True) -> float:
    """
    Untrusted numeric input -> float.

    Rejects booleans, blanks, NaN/inf, and negatives (and zero when
    allow_zero is False).
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        try:
            number = float(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    elif isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        raise ValidationError(f"{field} must be a number")

    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number")
    if number < 0:
        raise ValidationError(f"{field} must be >= 0")
    if not allow_zero and number == 0:
        raise ValidationError(f"{field} must be > 0")
    return number


def require_money(value: Any, field: str) -> int:
    amount = round_half_up(require_number(value, field))
    if amount > MAX_MONEY:
        raise ValidationError(f"{field} cannot exceed {MAX_MONEY}")
    return amount


def require_sku(value: Any, field: str = "sku") -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    sku = str(value).strip()
    if not sku:
        raise ValidationError(f"{field} cannot be blank")
    if len(sku) > 64:
        raise ValidationError(f"{field} exceeds max length 64")
    return sku


def normalize_tier(value: Any) -> str:
    """Case-insensitive tier; unknown or missing -> regular."""
    if value is None:
        return CustomerTier.REGULAR.value
    candidate = str(value).strip().lower()
    if candidate in {t.value for t in CustomerTier}:
        return candidate
    return CustomerTier.REGULAR.value


def require_loss_reason(value: Any) -> str:
    candidate = str(value or "").strip().lower()
    allowed = [r.value for r in LossReason]
    if candidate not in allowed:
        raise ValidationError(f"reason must be one of: {', '.join(allowed)}")
    return candidate


def parse_line_items(raw: Any, *, require_cost: bool = False) -> list[LineItem]:
    """
    Validate a list of line dicts (or LineItem instances).

    Each line needs sku and quantity > 0; unit defaults to "base".
    require_cost=True makes unit_cost mandatory (purchases).
    """
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ValidationError("items must be a non-empty list")

    lines: list[LineItem] = []
    for idx, item in enumerate(raw, start=1):
        if isinstance(item, LineItem):
            item = {
                "sku": item.sku,
                "quantity": item.quantity,
                "unit": item.unit,
                "unit_cost": item.unit_cost,
                "product_name": item.product_name,
            }
        if not isinstance(item, dict):
            raise ValidationError(f"items[{idx}] must be an object")

        sku = require_sku(item.get("sku"), f"items[{idx}].sku")
        quantity = require_number(item.get("quantity"), f"items[{idx}].quantity", allow_zero=False)
        unit = str(item.get("unit") or UNIT_BASE).strip()

        unit_cost = item.get("unit_cost")
        if unit_cost is None and require_cost:
            raise ValidationError(f"items[{idx}].unit_cost is required")
        if unit_cost is not None:
            unit_cost = require_money(unit_cost, f"items[{idx}].unit_cost")

        name = item.get("product_name")
        lines.append(LineItem(
            sku=sku,
            quantity=quantity,
            unit=unit,
            unit_cost=unit_cost,
            product_name=str(name).strip() if name else None,
        ))
    return lines


def _product_columns() -> dict[str, Any]:
    return {c.key: c for c in Product.__mapper__.columns}


def _clean_product_field(col, value: Any):
    # cost_price and the three tier prices
    if isinstance(col.type, Integer):
        return require_money(value, col.key)
    # bulk_unit_conversion
    if isinstance(col.type, Float):
        return require_number(value, col.key)
    # sku, name, category, base_unit, bulk_unit_name
    if isinstance(col.type, (String, Text)):
        text = str(value).strip()
        if not text and not col.nullable:
            raise ValidationError(f"{col.key} cannot be blank")
        if col.type.length and len(text) > col.type.length:
            raise ValidationError(f"{col.key} exceeds max length {col.type.length}")
        return text
    return value


def clean_product_payload(payload: Any, policy: ProductPayloadPolicy, *, partial: bool) -> dict:
    """
    Catalog create/update body -> dict of Product column values.

    Keys outside policy.writable_fields are refused, so namespace,
    version_id and timestamps never come from a client. On create
    (partial=False) policy.required_on_create must all be present.
    category, the bulk unit fields and the prices may be null; a blank
    bulk_unit_name clears the bulk unit. base_unit must be a known unit and
    bulk_unit_conversion at least 1.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create - payload.keys())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _product_columns()
    patch: dict = {}
    for key, raw in payload.items():
        if key not in policy.writable_fields or key not in cols:
            raise ValidationError(f"Field not allowed: {key}")
        col = cols[key]
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
        else:
            patch[key] = _clean_product_field(col, raw)

    if patch.get("base_unit") is not None:
        allowed = [u.value for u in BaseUnit]
        unit = patch["base_unit"].lower()
        if unit not in allowed:
            raise ValidationError(f"base_unit must be one of: {', '.join(allowed)}")
        patch["base_unit"] = unit

    conversion = patch.get("bulk_unit_conversion")
    if conversion is not None and conversion < 1:
        raise ValidationError("bulk_unit_conversion must be >= 1")

    if patch.get("bulk_unit_name") == "":
        patch["bulk_unit_name"] = None

    return patch


def optional_date(value: Any, field: str):
    """ISO date string (YYYY-MM-DD) -> date; None or blank -> None."""
    if value is None or isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")
