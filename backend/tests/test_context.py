# Overview: Unit tests for the injected ledger context.

import unittest

from stockledger.context import LedgerContext
from stockledger.errors import ValidationError


class LedgerContextTests(unittest.TestCase):
    def test_from_config(self):
        ctx = LedgerContext.from_config({
            "LEDGER_ENV_MODE": "staging",
            "LEDGER_TIMEZONE": "Asia/Jakarta",
            "LEDGER_TX_ATTEMPTS": "5",
            "LEDGER_TX_BACKOFF": "0.2",
        })
        self.assertEqual(ctx.namespace, "staging")
        self.assertEqual(ctx.timezone, "Asia/Jakarta")
        self.assertEqual(ctx.max_attempts, 5)
        self.assertEqual(ctx.backoff_base, 0.2)

    def test_defaults(self):
        ctx = LedgerContext.from_config({})
        self.assertEqual((ctx.namespace, ctx.timezone, ctx.max_attempts), ("production", "UTC", 4))
        self.assertEqual(ctx.today(), ctx.now().date())

    def test_rejects_unknown_mode(self):
        with self.assertRaises(ValidationError):
            LedgerContext(namespace="dev")

    def test_rejects_bad_retry_bound(self):
        with self.assertRaises(ValidationError):
            LedgerContext(max_attempts=0)

    def test_rejects_unknown_timezone(self):
        with self.assertRaises(ValidationError):
            LedgerContext(timezone="Mars/Olympus_Mons")

    def test_is_immutable(self):
        ctx = LedgerContext()
        with self.assertRaises(AttributeError):
            ctx.namespace = "staging"


if __name__ == "__main__":
    unittest.main()
