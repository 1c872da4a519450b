"""CLI commands for single demand line items."""

from __future__ import annotations

import click

from stockledger.application.dto import ReservationDTO
from stockledger.application.fulfill_line_item import (
    CancelLineHandler,
    LineStatusHandler,
    ReserveLineHandler,
    ShipLineHandler,
)
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.cli.options import CliContext, pass_context, warehouse_option


def _display_reservation(dto: ReservationDTO) -> None:
    click.echo(f"Line '{dto.line_item_id}'  (status={dto.status})")
    click.echo(f"Stock:       {dto.variant_id}@{dto.warehouse}")
    click.echo(
        f"Reserved: {dto.reserved}  Shipped: {dto.shipped}  "
        f"Released: {dto.released}  Outstanding: {dto.outstanding}"
    )


@click.command("reserve")
@click.option("--line", "line_item_id", required=True, help="Line item ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@warehouse_option()
@click.option("--quantity", required=True, type=int, help="Units to reserve.")
@pass_context
def line_reserve(ctx: CliContext, line_item_id: str, variant_id: str, warehouse, quantity: int) -> None:
    """Reserve stock for a confirmed line item."""
    handler = ReserveLineHandler(uow=ctx.uow())

    try:
        dto = handler.handle(line_item_id, variant_id, warehouse, quantity, ctx.actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reserved {quantity} for line '{line_item_id}'.")
    _display_reservation(dto)


@click.command("ship")
@click.option("--line", "line_item_id", required=True, help="Line item ID.")
@click.option("--quantity", type=int, default=None, help="Units to ship (default: all outstanding).")
@pass_context
def line_ship(ctx: CliContext, line_item_id: str, quantity: int | None) -> None:
    """Ship reserved units, oldest cost lot first."""
    handler = ShipLineHandler(uow=ctx.uow())

    try:
        dto, movements = handler.handle(line_item_id, quantity, ctx.actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    shipped = -sum(m.quantity_change for m in movements)
    click.echo(f"Shipped {shipped} for line '{line_item_id}' from {len(movements)} lot(s).")
    for m in movements:
        click.echo(f"  {-m.quantity_change:>5} @ {m.unit_cost:>10} = {m.total_cost:>10}")
    _display_reservation(dto)


@click.command("cancel")
@click.option("--line", "line_item_id", required=True, help="Line item ID.")
@pass_context
def line_cancel(ctx: CliContext, line_item_id: str) -> None:
    """Cancel a line item, releasing its reserved stock."""
    handler = CancelLineHandler(uow=ctx.uow())

    try:
        dto = handler.handle(line_item_id, ctx.actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Line '{line_item_id}' cancelled.")
    _display_reservation(dto)


@click.command("status")
@click.option("--line", "line_item_id", required=True, help="Line item ID.")
@pass_context
def line_status(ctx: CliContext, line_item_id: str) -> None:
    """Show the reservation state of a line item."""
    dto = LineStatusHandler(uow=ctx.uow()).handle(line_item_id)

    if dto is None:
        click.echo(f"Line '{line_item_id}'  (status=UNRESERVED)")
        return
    _display_reservation(dto)
