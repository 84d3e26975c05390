# Overview: Explicit runtime configuration handed to every ledger service call.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping
from zoneinfo import ZoneInfoNotFoundError

from flask import current_app

from .constants import EnvMode
from .errors import ValidationError
from .time_utils import business_now


@dataclass(frozen=True)
class LedgerContext:
    """
    Storage namespace and transaction policy for one deployment mode.

    Built once from application config (see ``from_config``) and passed to
    services explicitly; services never consult a global mode switch.
    """

    namespace: str = EnvMode.PRODUCTION.value
    timezone: str = "UTC"
    max_attempts: int = 4
    backoff_base: float = 0.05

    def __post_init__(self):
        if self.namespace not in {m.value for m in EnvMode}:
            raise ValidationError(f"Unknown environment mode: {self.namespace}")
        if self.max_attempts < 1:
            raise ValidationError("max_attempts must be >= 1")
        try:
            business_now(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {self.timezone}")

    @classmethod
    def from_config(cls, config: Mapping) -> "LedgerContext":
        return cls(
            namespace=config.get("LEDGER_ENV_MODE", EnvMode.PRODUCTION.value),
            timezone=config.get("LEDGER_TIMEZONE", "UTC"),
            max_attempts=int(config.get("LEDGER_TX_ATTEMPTS", 4)),
            backoff_base=float(config.get("LEDGER_TX_BACKOFF", 0.05)),
        )

    def now(self) -> datetime:
        return business_now(self.timezone)

    def today(self) -> date:
        return self.now().date()


def current_context() -> LedgerContext:
    """The LedgerContext built by create_app for the active application."""
    return current_app.extensions["ledger_context"]
