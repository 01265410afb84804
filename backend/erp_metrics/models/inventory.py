"""Item, warehouse and on-hand inventory models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from erp_metrics.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (Index("ix_items_tenant_active", "tenant_id", "is_active"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(String(36), index=True)
    item_number: Mapped[str] = mapped_column(String(30))
    item_name: Mapped[str] = mapped_column(String(255))
    item_type: Mapped[str] = mapped_column(String(30), default="raw_material")
    unit_of_measure: Mapped[str] = mapped_column(String(20), default="EA")
    unit_cost: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False), default=0)
    reorder_point: Mapped[int] = mapped_column(Integer, default=0)
    reorder_quantity: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Warehouse(Base):
    __tablename__ = "warehouses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(String(36), index=True)
    warehouse_code: Mapped[str] = mapped_column(String(20))
    warehouse_name: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class InventoryOnHand(Base):
    __tablename__ = "inventory_on_hand"
    __table_args__ = (
        UniqueConstraint("tenant_id", "item_id", "warehouse_id", name="uq_on_hand_position"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(String(36), index=True)
    item_id: Mapped[str] = mapped_column(ForeignKey("items.id"))
    warehouse_id: Mapped[str] = mapped_column(ForeignKey("warehouses.id"))
    quantity_on_hand: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False), default=0)
    quantity_reserved: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False), default=0)
    quantity_available: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False), default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class InventorySeedClaim(Base):
    """One row per tenant whose on-hand positions have been (or are being) seeded."""

    __tablename__ = "inventory_seed_claim"

    tenant_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    claimed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


__all__ = ["InventoryOnHand", "InventorySeedClaim", "Item", "Warehouse"]
