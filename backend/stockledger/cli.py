# Overview: Flask CLI command groups for bootstrap, inspection, and stock maintenance.

# backend/stockledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - LEDGER_ENV_MODE=staging points every command at the staging namespace.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Stock inspection/maintenance (quantities are base units):
# - python -m flask stock show [SKU]
#   Show one SKU's stock, or every stock record.
# - python -m flask stock set SUGAR-01 120
#   Overwrite a SKU's stock without recording a document.
# - python -m flask stock repack SUGAR-SACK SUGAR-01 1 50
#   Open 1 unit of SUGAR-SACK into 50 units of SUGAR-01.
#
# Document counters:
# - python -m flask counters list
#   List per-day counters for orders and purchases.

import click
from flask import current_app
from flask.cli import with_appcontext

from .context import current_context
from .errors import LedgerError
from .extensions import db
from .services import sequence_service, stock_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create tables that do not exist yet."""
    db.create_all()
    click.echo(f"PASS Tables ready (namespace: {current_context().namespace}).")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA in every namespace!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('stock')
def stock_group():
    """Stock inspection and manual correction."""


@stock_group.command('show')
@click.argument('sku', required=False)
@with_appcontext
def show_stock(sku):
    ctx = current_context()
    if sku:
        click.echo(f"{sku}: {stock_service.get_stock(ctx, sku):g}")
        return

    records = stock_service.list_stock(ctx)
    if not records:
        click.echo("No stock records.")
        return
    for record in records:
        click.echo(f"{record.sku:<24} {record.current_stock_base:>12g}")


@stock_group.command('set')
@click.argument('sku')
@click.argument('value', type=float)
@with_appcontext
def set_stock_cli(sku, value):
    try:
        new_value = stock_service.set_stock(current_context(), sku, value)
    except LedgerError as e:
        raise click.ClickException(str(e))
    current_app.logger.info("CLI set stock %s to %g", sku, new_value)
    click.echo(f"PASS {sku} set to {new_value:g}")


@stock_group.command('repack')
@click.argument('from_sku')
@click.argument('to_sku')
@click.argument('units', type=float)
@click.argument('rate', type=float)
@with_appcontext
def repack_cli(from_sku, to_sku, units, rate):
    try:
        result = stock_service.repack(current_context(), from_sku, to_sku, units, rate)
    except LedgerError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"PASS {result['from_sku']} -> {result['from_stock']:g}, "
        f"{result['to_sku']} -> {result['to_stock']:g}"
    )


@click.group('counters')
def counters_group():
    """Document number counters."""


@counters_group.command('list')
@with_appcontext
def list_counters_cli():
    counters = sequence_service.list_counters(current_context())
    if not counters:
        click.echo("No counters.")
        return
    for counter in counters:
        click.echo(f"{counter.key:<32} {counter.count:>6}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stock_group)
    app.cli.add_command(counters_group)
