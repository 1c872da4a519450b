"""CLI commands for variants."""

from __future__ import annotations

import click

from stockledger.application.add_variant import AddVariantHandler, ListVariantsHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.cli.options import CliContext, pass_context


@click.command("add")
@click.option("--id", "variant_id", required=True, help="Variant ID.")
@click.option("--code", required=True, help="Variant code (SKU).")
@click.option("--cost", default=None, help="Unit cost, e.g. '12.50'.")
@pass_context
def variant_add(ctx: CliContext, variant_id: str, code: str, cost: str | None) -> None:
    """Register a new variant with no stock."""
    handler = AddVariantHandler(uow=ctx.uow())

    try:
        dto = handler.handle(variant_id=variant_id, code=code, unit_cost=cost)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant '{dto.id}' added  (code={dto.code}, cost={dto.unit_cost})")


@click.command("list")
@pass_context
def variant_list(ctx: CliContext) -> None:
    """List variants with their stock totals."""
    variants = ListVariantsHandler(uow=ctx.uow()).handle()

    if not variants:
        click.echo("No variants found.")
        return

    click.echo(
        f"{'ID':<16} {'Code':<20} {'Cost':>10} {'Stock':>8} {'Reserved':>10} {'Available':>10}"
    )
    click.echo("-" * 79)
    for v in variants:
        click.echo(
            f"{v.id:<16} {v.code:<20} {v.unit_cost:>10} {v.stock_quantity:>8} "
            f"{v.reserved_stock:>10} {v.available_stock:>10}"
        )
