"""CLI commands for warehouse inventory and the movement ledger."""

from __future__ import annotations

import click

from stockledger.application.adjust_inventory import AdjustInventoryHandler
from stockledger.application.dto import AllocationDTO, StockLevelDTO
from stockledger.application.receive_stock import ReceiveStockHandler
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.application.show_movements import ReconcileHandler, ShowMovementsHandler
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.enums import MovementKind
from stockledger.infrastructure.cli.options import (
    CliContext,
    pass_context,
    strategy_option,
    warehouse_option,
)


def _display_levels(levels: list[StockLevelDTO]) -> None:
    click.echo(
        f"{'Variant':<16} {'Warehouse':<10} {'Quantity':>9} {'Reserved':>9} "
        f"{'Available':>10} {'Cost':>10} {'Lots':>5}"
    )
    click.echo("-" * 75)
    for level in levels:
        click.echo(
            f"{level.variant_id:<16} {level.warehouse:<10} {level.quantity:>9} "
            f"{level.reserved:>9} {level.available:>10} {level.unit_cost:>10} {level.lot_count:>5}"
        )


def display_allocation(dto: AllocationDTO) -> None:
    """Shared formatting for an allocation plan and its execution."""
    click.echo(
        f"Allocation for {dto.variant_id}@{dto.warehouse}  "
        f"(strategy={dto.strategy}, available={dto.available_stock})"
    )
    click.echo()
    click.echo(
        f"  {'Line':<16} {'Priority':>8} {'Requested':>10} {'Allocated':>10} "
        f"{'Short':>7} {'Rate':>8}"
    )
    click.echo(f"  {'-'*64}")
    for line in dto.lines:
        click.echo(
            f"  {line.line_item_id:<16} {line.priority:>8} {line.requested:>10} "
            f"{line.allocated:>10} {line.shortage:>7} {line.fulfillment_rate:>8}"
        )
    click.echo(f"  {'-'*64}")
    click.echo(
        f"  {'Total':<16} {'':>8} {dto.total_requested:>10} {dto.total_allocated:>10} "
        f"{dto.total_shortage:>7} {dto.fulfillment_rate:>8}"
    )
    click.echo(f"  Unallocated stock: {dto.unallocated_stock}")

    if dto.executed:
        click.echo()
        click.echo(f"Reserved:    {', '.join(dto.reserved_lines) or '-'}")
        click.echo(f"Backordered: {', '.join(dto.backordered_lines) or '-'}")
        for error in dto.errors:
            click.echo(f"Skipped:     {error}")


@click.command("show")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@warehouse_option(required=False, help="Only this warehouse.")
@pass_context
def inventory_show(ctx: CliContext, variant_id: str, warehouse) -> None:
    """Show stock levels of a variant."""
    handler = ShowInventoryHandler(uow=ctx.uow())

    try:
        levels = handler.handle(variant_id, warehouse)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_levels(levels)


@click.command("adjust")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@warehouse_option()
@click.option("--delta", required=True, type=int, help="Signed change, e.g. 5 or -2.")
@click.option("--reason", required=True, help="Why the stock changed.")
@click.option("--cost", default=None, help="Unit cost of inbound units.")
@pass_context
def inventory_adjust(
    ctx: CliContext, variant_id: str, warehouse, delta: int, reason: str, cost: str | None
) -> None:
    """Manually adjust stock up or down."""
    handler = AdjustInventoryHandler(uow=ctx.uow())

    try:
        level = handler.handle(variant_id, warehouse, delta, reason, ctx.actor, unit_cost=cost)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Adjusted {variant_id}@{level.warehouse} by {delta:+d}.")
    _display_levels([level])


@click.command("receive")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@warehouse_option()
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option("--cost", default=None, help="Unit cost of this delivery.")
@click.option("--reference", default=None, help="Delivery or purchase reference.")
@click.option("--no-reallocate", is_flag=True, default=False, help="Leave backorders untouched.")
@strategy_option()
@pass_context
def inventory_receive(
    ctx: CliContext,
    variant_id: str,
    warehouse,
    quantity: int,
    cost: str | None,
    reference: str | None,
    no_reallocate: bool,
    strategy,
) -> None:
    """Receive stock into a new cost lot and re-allocate pending backorders."""
    handler = ReceiveStockHandler(uow=ctx.uow(), default_strategy=ctx.settings.DEFAULT_STRATEGY)

    try:
        receipt = handler.handle(
            variant_id,
            warehouse,
            quantity,
            ctx.actor,
            unit_cost=cost,
            reference_id=reference,
            reallocate=not no_reallocate,
            strategy=strategy,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Received {quantity} x {variant_id} into {receipt.stock.warehouse}.")
    _display_levels([receipt.stock])
    if receipt.allocation is not None:
        click.echo()
        display_allocation(receipt.allocation)


@click.command("movements")
@click.option("--variant", "variant_id", default=None, help="Variant ID.")
@warehouse_option(required=False, help="Only this warehouse.")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in MovementKind], case_sensitive=False),
    default=None,
    help="Only this movement kind.",
)
@click.option("--reference", "reference_id", default=None, help="Only this reference ID.")
@click.option("--limit", type=int, default=None, help="Show at most this many entries.")
@pass_context
def inventory_movements(
    ctx: CliContext,
    variant_id: str | None,
    warehouse,
    kind: str | None,
    reference_id: str | None,
    limit: int | None,
) -> None:
    """Show the movement ledger, oldest first."""
    handler = ShowMovementsHandler(uow=ctx.uow())
    movements = handler.handle(
        variant_id=variant_id,
        warehouse=warehouse,
        kind=MovementKind(kind.upper()) if kind else None,
        reference_id=reference_id,
        limit=limit,
    )

    if not movements:
        click.echo("No movements found.")
        return

    click.echo(
        f"{'#':>5} {'Variant':<14} {'Whs':<8} {'Kind':<12} {'Before':>7} {'Change':>7} "
        f"{'After':>7} {'Rsv':>5} {'Cost':>9} {'Reference':<22} {'By':<10}"
    )
    click.echo("-" * 114)
    for m in movements:
        click.echo(
            f"{m.id:>5} {m.variant_id:<14} {m.warehouse:<8} {m.kind:<12} "
            f"{m.quantity_before:>7} {m.quantity_change:>+7} {m.quantity_after:>7} "
            f"{m.reserved_change:>+5} {m.unit_cost:>9} {m.reference:<22} {m.created_by:<10}"
        )


@click.command("reconcile")
@click.option("--variant", "variant_id", default=None, help="Variant ID (default: all).")
@warehouse_option(required=False, help="Only this warehouse.")
@pass_context
def inventory_reconcile(ctx: CliContext, variant_id: str | None, warehouse) -> None:
    """Check that the ledger adds up to the stock on hand."""
    reports = ReconcileHandler(uow=ctx.uow()).handle(variant_id, warehouse)

    if not reports:
        click.echo("Nothing to reconcile.")
        return

    out_of_balance = 0
    for r in reports:
        state = "OK" if r.balanced else "MISMATCH"
        if not r.balanced:
            out_of_balance += 1
        click.echo(
            f"{r.variant_id:<16} {r.warehouse:<10} ledger={r.ledger_quantity:<8} "
            f"stock={r.inventory_quantity:<8} {state}"
        )

    if out_of_balance:
        raise click.ClickException(f"{out_of_balance} stock record(s) out of balance")
