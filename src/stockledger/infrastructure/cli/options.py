"""Shared click options and argument parsers for the CLI commands."""

from __future__ import annotations

from dataclasses import dataclass

import click

from stockledger.application.dto import DemandSpec
from stockledger.domain.model.enums import AllocationStrategy, Warehouse
from stockledger.infrastructure.bootstrap import unit_of_work
from stockledger.infrastructure.persistence.sql_unit_of_work import SqlAlchemyUnitOfWork
from stockledger.infrastructure.settings import Settings


@dataclass
class CliContext:
    settings: Settings
    actor: str

    def uow(self) -> SqlAlchemyUnitOfWork:
        return unit_of_work(self.settings)


pass_context = click.make_pass_decorator(CliContext)


def _to_warehouse(ctx, param, value):
    return Warehouse(value.upper()) if value is not None else None


def _to_strategy(ctx, param, value):
    return AllocationStrategy(value.upper()) if value is not None else None


def warehouse_option(*param_decls: str, required: bool = True, help: str = "Warehouse."):
    return click.option(
        *(param_decls or ("--warehouse", "-w")),
        type=click.Choice([w.value for w in Warehouse], case_sensitive=False),
        required=required,
        callback=_to_warehouse,
        help=help,
    )


def strategy_option(default: str | None = None):
    return click.option(
        "--strategy",
        type=click.Choice([s.value for s in AllocationStrategy], case_sensitive=False),
        default=default,
        callback=_to_strategy,
        help="Allocation strategy.",
    )


def parse_demand(raw: str) -> list[DemandSpec]:
    """Parse 'L1:10,L2:5:VIP,L3:8:80' into DemandSpec list.

    The optional third field is a numeric priority or a customer tier.
    Lines are aged in the order given.
    """
    specs: list[DemandSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) not in (2, 3) or not parts[0]:
            raise click.BadParameter(
                f"Invalid demand line '{entry}'. Expected 'LineId:Qty[:Priority|Tier]'."
            )
        try:
            quantity = int(parts[1])
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{parts[1]}' for line '{parts[0]}'.")
        priority, tier = None, None
        if len(parts) == 3:
            if parts[2].lstrip("-").isdigit():
                priority = int(parts[2])
            else:
                tier = parts[2]
        specs.append(DemandSpec(line_item_id=parts[0], quantity=quantity, priority=priority, tier=tier))
    return specs


def parse_overrides(raw: tuple[str, ...]) -> dict[str, int]:
    """Parse repeated 'LineId:Qty' values into a mapping."""
    overrides: dict[str, int] = {}
    for entry in raw:
        if ":" not in entry:
            raise click.BadParameter(f"Invalid override '{entry}'. Expected 'LineId:Qty'.")
        line_item_id, qty_str = entry.rsplit(":", 1)
        try:
            overrides[line_item_id.strip()] = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty_str}' for line '{line_item_id}'.")
    return overrides
