"""CLI commands for allocating scarce stock."""

from __future__ import annotations

import click

from stockledger.application.allocate_stock import AllocateStockHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.cli.inventory_commands import display_allocation
from stockledger.infrastructure.cli.options import (
    CliContext,
    parse_demand,
    parse_overrides,
    pass_context,
    strategy_option,
    warehouse_option,
)


@click.command("run")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@warehouse_option()
@click.option(
    "--lines", "lines_str", required=True,
    help="Demand as 'LineId:Qty[:Priority|Tier],...', oldest first.",
)
@strategy_option(default="PROPORTIONAL")
@click.option("--override", "overrides", multiple=True, help="Manual allocation 'LineId:Qty'.")
@click.option("--stock", "available_stock", type=int, default=None,
              help="Plan against this stock figure instead of what is available.")
@click.option("--execute", is_flag=True, default=False,
              help="Reserve the allocated units and record backorders.")
@pass_context
def allocation_run(
    ctx: CliContext,
    variant_id: str,
    warehouse,
    lines_str: str,
    strategy,
    overrides: tuple[str, ...],
    available_stock: int | None,
    execute: bool,
) -> None:
    """Share stock among competing demand lines.

    Without --execute only the plan is shown. With --execute every line is
    committed on its own: a line that fails is reported and skipped.
    """
    demand = parse_demand(lines_str)
    override_map = parse_overrides(overrides)
    if execute and available_stock is not None:
        raise click.ClickException("--stock is for planning only and cannot be combined with --execute")

    handler = AllocateStockHandler(uow=ctx.uow())

    try:
        dto = handler.handle(
            variant_id,
            warehouse,
            demand,
            strategy,
            ctx.actor,
            overrides=override_map,
            execute=execute,
            available_stock=available_stock,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_allocation(dto)
    if not execute:
        click.echo()
        click.echo("Plan only - re-run with --execute to commit.")
