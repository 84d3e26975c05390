# backend/stockledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/stockledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Deployment mode selects the storage namespace ("production" or "staging").
    LEDGER_ENV_MODE = os.environ.get("LEDGER_ENV_MODE", "production")

    # Business day used for document numbers (IANA zone name)
    LEDGER_TIMEZONE = os.environ.get("LEDGER_TIMEZONE", "UTC")

    # Optimistic transaction retry bounds
    LEDGER_TX_ATTEMPTS = int(os.environ.get("LEDGER_TX_ATTEMPTS", "4"))
    LEDGER_TX_BACKOFF = float(os.environ.get("LEDGER_TX_BACKOFF", "0.05"))
