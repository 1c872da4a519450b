"""CLI commands for backorders."""

from __future__ import annotations

import click

from stockledger.application.dto import BackorderDTO
from stockledger.application.manage_backorders import (
    BackorderSummaryHandler,
    CancelBackorderHandler,
    ListBackordersHandler,
    ResolveBackorderHandler,
)
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.enums import BackorderStatus
from stockledger.infrastructure.cli.options import CliContext, pass_context, warehouse_option

_STATUS_CHOICES = [s.value for s in BackorderStatus] + ["ALL"]


def _display_backorders(backorders: list[BackorderDTO]) -> None:
    click.echo(
        f"{'#':>5} {'Line':<16} {'Variant':<16} {'Whs':<8} {'Short':>6} "
        f"{'Prio':>5} {'Status':<10} {'Since':<20}"
    )
    click.echo("-" * 92)
    for b in backorders:
        click.echo(
            f"{b.id:>5} {b.line_item_id:<16} {b.variant_id:<16} {b.warehouse:<8} "
            f"{b.shortage:>6} {b.priority:>5} {b.status:<10} {b.demand_created_at:<20}"
        )


@click.command("list")
@click.option(
    "--status",
    type=click.Choice(_STATUS_CHOICES, case_sensitive=False),
    default="PENDING",
    show_default=True,
    help="Only backorders in this status.",
)
@click.option("--variant", "variant_id", default=None, help="Variant ID.")
@warehouse_option(required=False, help="Only this warehouse.")
@pass_context
def backorder_list(ctx: CliContext, status: str, variant_id: str | None, warehouse) -> None:
    """List backorders, highest priority and oldest first."""
    status_filter = None if status.upper() == "ALL" else BackorderStatus(status.upper())
    backorders = ListBackordersHandler(uow=ctx.uow()).handle(status_filter, variant_id, warehouse)

    if not backorders:
        click.echo("No backorders found.")
        return
    _display_backorders(backorders)


@click.command("cancel")
@click.option("--id", "backorder_id", required=True, type=int, help="Backorder ID.")
@click.option("--note", default=None, help="Why the shortage is dropped.")
@pass_context
def backorder_cancel(ctx: CliContext, backorder_id: int, note: str | None) -> None:
    """Cancel a pending backorder."""
    handler = CancelBackorderHandler(uow=ctx.uow())

    try:
        handler.handle(backorder_id, ctx.actor, note)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backorder #{backorder_id} cancelled.")


@click.command("resolve")
@click.option("--id", "backorder_id", required=True, type=int, help="Backorder ID.")
@pass_context
def backorder_resolve(ctx: CliContext, backorder_id: int) -> None:
    """Mark a pending backorder resolved by hand."""
    handler = ResolveBackorderHandler(uow=ctx.uow())

    try:
        handler.handle(backorder_id, ctx.actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backorder #{backorder_id} resolved.")


@click.command("summary")
@pass_context
def backorder_summary(ctx: CliContext) -> None:
    """Total pending shortage per variant."""
    summary = BackorderSummaryHandler(uow=ctx.uow()).handle()

    if not summary:
        click.echo("No pending backorders.")
        return

    click.echo(f"{'Variant':<16} {'Shortage':>9} {'Lines':>6}")
    click.echo("-" * 33)
    for s in summary:
        click.echo(f"{s.variant_id:<16} {s.total_shortage:>9} {s.backorder_count:>6}")
