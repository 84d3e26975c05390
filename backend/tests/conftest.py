"""
Pytest fixtures for stock ledger backend tests.

Provides an in-memory application, a clean database per test, the ledger
context, and a sugar catalog used by the worked scenarios.
"""

import pytest

from stockledger import create_app
from stockledger.context import LedgerContext
from stockledger.extensions import db
from stockledger.services import catalog_service


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'LEDGER_ENV_MODE': 'production',
    'LEDGER_TIMEZONE': 'UTC',
    'LEDGER_TX_BACKOFF': 0.0,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def ctx(app, db_session) -> LedgerContext:
    """The production-namespace context built by create_app."""
    return app.extensions['ledger_context']


@pytest.fixture(scope='function')
def staging_ctx(ctx) -> LedgerContext:
    return LedgerContext(namespace='staging', timezone=ctx.timezone, backoff_base=0.0)


@pytest.fixture(scope='function')
def sugar(ctx):
    """SUGAR-01: kg, sold loose or by the 50 kg Sack, 120 kg on hand."""
    return catalog_service.create_product(ctx, {
        'sku': 'SUGAR-01',
        'name': 'Sugar',
        'category': 'Groceries',
        'base_unit': 'kg',
        'bulk_unit_name': 'Sack',
        'bulk_unit_conversion': 50,
        'cost_price': 12000,
        'price_regular': 15000,
        'price_premium': 14500,
        'price_star': 14000,
    }, initial_stock=120)


@pytest.fixture(scope='function')
def sugar_sack(ctx):
    """SUGAR-SACK: whole sacks tracked as their own SKU, 3 on hand."""
    return catalog_service.create_product(ctx, {
        'sku': 'SUGAR-SACK',
        'name': 'Sugar (sealed sack)',
        'base_unit': 'sack',
        'cost_price': 600000,
        'price_regular': 720000,
    }, initial_stock=3)


@pytest.fixture(scope='function')
def rice(ctx):
    """RICE-5: pcs only, 10 on hand."""
    return catalog_service.create_product(ctx, {
        'sku': 'RICE-5',
        'name': 'Rice 5kg bag',
        'base_unit': 'pcs',
        'cost_price': 60000,
        'price_regular': 70000,
        'price_premium': 68000,
        'price_star': 66000,
    }, initial_stock=10)
