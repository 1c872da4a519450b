import click

from stockledger.infrastructure.cli.allocation_commands import allocation_run
from stockledger.infrastructure.cli.backorder_commands import (
    backorder_cancel,
    backorder_list,
    backorder_resolve,
    backorder_summary,
)
from stockledger.infrastructure.cli.inventory_commands import (
    inventory_adjust,
    inventory_movements,
    inventory_receive,
    inventory_reconcile,
    inventory_show,
)
from stockledger.infrastructure.cli.line_commands import (
    line_cancel,
    line_reserve,
    line_ship,
    line_status,
)
from stockledger.infrastructure.cli.options import CliContext
from stockledger.infrastructure.cli.transfer_commands import transfer_create, transfer_list
from stockledger.infrastructure.cli.variant_commands import variant_add, variant_list
from stockledger.infrastructure.logging_config import set_operation_context, setup_logging
from stockledger.infrastructure.settings import get_settings


@click.group()
@click.option("--actor", default=None, help="Who is acting (default: configured actor).")
@click.pass_context
def cli(ctx: click.Context, actor: str | None) -> None:
    """Stock Ledger: multi-warehouse inventory and allocation"""
    settings = get_settings()
    setup_logging("stockledger", level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    actor = actor or settings.DEFAULT_ACTOR
    set_operation_context(actor=actor)
    ctx.obj = CliContext(settings=settings, actor=actor)


@cli.group()
def variant() -> None:
    """Manage variants."""


@cli.group()
def inventory() -> None:
    """Manage warehouse stock and the ledger."""


@cli.group()
def transfer() -> None:
    """Move stock between variants and warehouses."""


@cli.group()
def line() -> None:
    """Reserve, ship and cancel line items."""


@cli.group()
def allocation() -> None:
    """Allocate scarce stock across demand."""


@cli.group()
def backorder() -> None:
    """Manage backorders."""


# Register subcommands
variant.add_command(variant_add)
variant.add_command(variant_list)
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_movements)
inventory.add_command(inventory_receive)
inventory.add_command(inventory_reconcile)
inventory.add_command(inventory_show)
transfer.add_command(transfer_create)
transfer.add_command(transfer_list)
line.add_command(line_cancel)
line.add_command(line_reserve)
line.add_command(line_ship)
line.add_command(line_status)
allocation.add_command(allocation_run)
backorder.add_command(backorder_cancel)
backorder.add_command(backorder_list)
backorder.add_command(backorder_resolve)
backorder.add_command(backorder_summary)
