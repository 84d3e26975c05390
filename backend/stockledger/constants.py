"""Enumerations shared across the ledger services and routes."""

from __future__ import annotations

from enum import Enum


class BaseUnit(str, Enum):
    KG = "kg"
    G = "g"
    LTR = "ltr"
    PCS = "pcs"
    SACK = "sack"
    BOX = "box"
    BALL = "ball"


class CustomerTier(str, Enum):
    """Customer pricing class selecting which stored price applies."""

    REGULAR = "regular"
    PREMIUM = "premium"
    STAR = "star"


class DocumentType(str, Enum):
    """Document kinds that draw numbers from a daily counter."""

    ORDERS = "orders"
    PURCHASES = "purchases"


class LossReason(str, Enum):
    EXPIRED = "expired"
    DAMAGED = "damaged"
    MISSING = "missing"
    WRONG_INPUT = "wrong_input"


class DecreaseKind(str, Enum):
    """How a counted stock decrease is explained."""

    SOLD = "sold"
    LOST = "lost"


class EnvMode(str, Enum):
    PRODUCTION = "production"
    STAGING = "staging"


# Unit-of-sale markers on order and purchase lines
UNIT_BASE = "base"
UNIT_BULK = "bulk"

# Document sources
SOURCE_POS = "pos"
SOURCE_RECEIVING = "receiving"
SOURCE_STOCK_ADJUSTMENT = "stock_adjustment"

ORDER_STATUS_COMPLETED = "completed"
DEFAULT_PAYMENT_METHOD = "Cash"


__all__ = [
    "BaseUnit",
    "CustomerTier",
    "DocumentType",
    "LossReason",
    "DecreaseKind",
    "EnvMode",
    "UNIT_BASE",
    "UNIT_BULK",
    "SOURCE_POS",
    "SOURCE_RECEIVING",
    "SOURCE_STOCK_ADJUSTMENT",
    "ORDER_STATUS_COMPLETED",
    "DEFAULT_PAYMENT_METHOD",
]
