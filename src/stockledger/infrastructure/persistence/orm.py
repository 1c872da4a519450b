"""SQLAlchemy table definitions.

Rows are plain persistence records; repositories translate them to and
from the domain dataclasses. The movement table is append-only: the
mapper refuses to emit UPDATE or DELETE for it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from stockledger.domain.exceptions import InvariantViolation
from stockledger.domain.model.enums import (
    BackorderStatus,
    MovementKind,
    ReferenceType,
    ReservationStatus,
    Warehouse,
)

COST = Numeric(14, 4)


def _enum(enum_cls) -> Enum:
    return Enum(enum_cls, native_enum=False, length=20)


class Base(DeclarativeBase):
    pass


class VariantRow(Base):
    __tablename__ = "variants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    code: Mapped[str] = mapped_column(String(100), index=True)
    unit_cost: Mapped[Decimal] = mapped_column(COST, default=Decimal("0"))
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0)
    reserved_stock: Mapped[int] = mapped_column(Integer, default=0)
    available_stock: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_variant_stock_nonneg"),
        CheckConstraint(
            "reserved_stock >= 0 AND reserved_stock <= stock_quantity",
            name="ck_variant_reserved_range",
        ),
    )


class InventoryLotRow(Base):
    __tablename__ = "inventory_lots"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    variant_id: Mapped[str] = mapped_column(ForeignKey("variants.id"))
    warehouse: Mapped[Warehouse] = mapped_column(_enum(Warehouse))
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    reserved: Mapped[int] = mapped_column(Integer, default=0)
    unit_cost: Mapped[Decimal] = mapped_column(COST, default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_inventory_lots_variant_warehouse", "variant_id", "warehouse"),
        CheckConstraint("quantity >= 0", name="ck_lot_quantity_nonneg"),
        CheckConstraint(
            "reserved >= 0 AND reserved <= quantity", name="ck_lot_reserved_range"
        ),
    )
    __mapper_args__ = {"version_id_col": version}


class MovementRow(Base):
    __tablename__ = "inventory_movements"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    variant_id: Mapped[str] = mapped_column(ForeignKey("variants.id"))
    warehouse: Mapped[Warehouse] = mapped_column(_enum(Warehouse))
    kind: Mapped[MovementKind] = mapped_column(_enum(MovementKind))
    quantity_before: Mapped[int] = mapped_column(Integer)
    quantity_change: Mapped[int] = mapped_column(Integer)
    quantity_after: Mapped[int] = mapped_column(Integer)
    reserved_change: Mapped[int] = mapped_column(Integer, default=0)
    unit_cost: Mapped[Decimal] = mapped_column(COST)
    total_cost: Mapped[Decimal] = mapped_column(COST)
    reference_type: Mapped[ReferenceType | None] = mapped_column(
        _enum(ReferenceType), nullable=True
    )
    reference_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    lot_id: Mapped[int | None] = mapped_column(ForeignKey("inventory_lots.id"), nullable=True)
    reason: Mapped[str] = mapped_column(Text, default="")
    created_by: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_movements_variant_warehouse", "variant_id", "warehouse", "id"),
        Index("ix_movements_reference", "reference_type", "reference_id"),
        CheckConstraint(
            "quantity_after = quantity_before + quantity_change",
            name="ck_movement_arithmetic",
        ),
        CheckConstraint("quantity_after >= 0", name="ck_movement_after_nonneg"),
    )


@event.listens_for(MovementRow, "before_update")
def _reject_movement_update(mapper, connection, target) -> None:
    raise InvariantViolation(f"Movement #{target.id} is immutable and cannot be updated")


@event.listens_for(MovementRow, "before_delete")
def _reject_movement_delete(mapper, connection, target) -> None:
    raise InvariantViolation(f"Movement #{target.id} is immutable and cannot be deleted")


class StockTransferRow(Base):
    __tablename__ = "stock_transfers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    transfer_number: Mapped[str] = mapped_column(String(20), unique=True)
    source_variant_id: Mapped[str] = mapped_column(ForeignKey("variants.id"))
    source_warehouse: Mapped[Warehouse] = mapped_column(_enum(Warehouse))
    target_variant_id: Mapped[str] = mapped_column(ForeignKey("variants.id"))
    target_warehouse: Mapped[Warehouse] = mapped_column(_enum(Warehouse))
    quantity: Mapped[int] = mapped_column(Integer)
    unit_cost: Mapped[Decimal] = mapped_column(COST)
    total_cost: Mapped[Decimal] = mapped_column(COST)
    reason: Mapped[str] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transfer_quantity_positive"),
    )


class ReservationRow(Base):
    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    line_item_id: Mapped[str] = mapped_column(String(64), unique=True)
    variant_id: Mapped[str] = mapped_column(ForeignKey("variants.id"))
    warehouse: Mapped[Warehouse] = mapped_column(_enum(Warehouse))
    reserved_quantity: Mapped[int] = mapped_column(Integer, default=0)
    shipped_quantity: Mapped[int] = mapped_column(Integer, default=0)
    released_quantity: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[ReservationStatus] = mapped_column(_enum(ReservationStatus))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class BackorderRow(Base):
    __tablename__ = "backorders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    line_item_id: Mapped[str] = mapped_column(String(64))
    variant_id: Mapped[str] = mapped_column(ForeignKey("variants.id"))
    warehouse: Mapped[Warehouse] = mapped_column(_enum(Warehouse))
    shortage_quantity: Mapped[int] = mapped_column(Integer)
    priority: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[BackorderStatus] = mapped_column(_enum(BackorderStatus))
    notes: Mapped[str] = mapped_column(Text, default="")
    demand_created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("line_item_id", "variant_id", name="uq_backorder_line_variant"),
        Index("ix_backorders_status_priority", "status", "priority"),
        CheckConstraint("shortage_quantity >= 0", name="ck_backorder_shortage_nonneg"),
    )
