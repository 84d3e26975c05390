# Overview: Typed error hierarchy raised by the ledger services.

from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger errors; carries structured details for display."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(LedgerError, ValueError):
    """400-level input problem, raised before any transaction starts."""


class NotFoundError(LedgerError):
    """A referenced SKU, product, or document does not exist."""

    status_code = 404


class InsufficientStockError(LedgerError):
    """A deduction would exceed the available base-unit stock."""

    status_code = 409

    def __init__(self, sku: str, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for {sku}. Requested: {requested:g}, available: {available:g}",
            details={"sku": sku, "requested": requested, "available": available},
        )
        self.sku = sku
        self.requested = requested
        self.available = available


class ConflictError(LedgerError):
    """Transaction aborted after exhausting retries due to contention."""

    status_code = 409


class StorageError(LedgerError):
    """Underlying store unavailable or failing."""

    status_code = 503


class ImmutableRecordError(LedgerError):
    """An update touched a field of an append-only document."""

    status_code = 409
