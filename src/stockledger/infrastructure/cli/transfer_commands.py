"""CLI commands for stock transfers."""

from __future__ import annotations

import click

from stockledger.application.transfer_stock import ListTransfersHandler, TransferStockHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.cli.options import CliContext, pass_context, warehouse_option


@click.command("create")
@click.option("--from-variant", "source_variant_id", required=True, help="Source variant ID.")
@warehouse_option("--from-warehouse", "source_warehouse", help="Source warehouse.")
@click.option("--to-variant", "target_variant_id", required=True, help="Target variant ID.")
@warehouse_option("--to-warehouse", "target_warehouse", help="Target warehouse.")
@click.option("--quantity", required=True, type=int, help="Units to move.")
@click.option("--reason", required=True, help="Why the stock is moved.")
@click.option("--notes", default=None, help="Free-form notes.")
@pass_context
def transfer_create(
    ctx: CliContext,
    source_variant_id: str,
    source_warehouse,
    target_variant_id: str,
    target_warehouse,
    quantity: int,
    reason: str,
    notes: str | None,
) -> None:
    """Move stock between variants and/or warehouses."""
    handler = TransferStockHandler(uow=ctx.uow())

    try:
        dto = handler.handle(
            source_variant_id,
            source_warehouse,
            target_variant_id,
            target_warehouse,
            quantity,
            reason,
            ctx.actor,
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Transfer {dto.transfer_number}: {dto.quantity} x {dto.source} -> {dto.target} "
        f"(unit cost {dto.unit_cost}, total {dto.total_cost})"
    )


@click.command("list")
@click.option("--limit", type=int, default=50, show_default=True, help="Page size.")
@click.option("--offset", type=int, default=0, show_default=True, help="Entries to skip.")
@pass_context
def transfer_list(ctx: CliContext, limit: int, offset: int) -> None:
    """List transfers, newest first."""
    transfers = ListTransfersHandler(uow=ctx.uow()).handle(limit=limit, offset=offset)

    if not transfers:
        click.echo("No transfers found.")
        return

    click.echo(
        f"{'Number':<10} {'Source':<24} {'Target':<24} {'Qty':>5} {'Cost':>10} {'By':<10} Reason"
    )
    click.echo("-" * 100)
    for t in transfers:
        click.echo(
            f"{t.transfer_number:<10} {t.source:<24} {t.target:<24} {t.quantity:>5} "
            f"{t.unit_cost:>10} {t.created_by:<10} {t.reason}"
        )
