"""SQLAlchemy-backed inventory queries used by the seeder and the forecast."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence

from sqlalchemy import and_, delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp_metrics.models import InventoryOnHand, InventorySeedClaim, Item, Warehouse
from erp_metrics.services.demand_planning import PlanningItem
from erp_metrics.services.inventory_seeding import OnHandRow, SeedItem, SeedWarehouse

DEFAULT_CLAIM_TIMEOUT = timedelta(minutes=10)
_DELETE_CHUNK = 500

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventoryOverview:
    total_items: int
    total_warehouses: int
    total_inventory_value: float
    low_stock_alerts: int


class SqlInventoryStore:
    """Inventory store over an ``AsyncSession``; each write commits on its own.

    ``claim_timeout`` bounds how long an unfinished seed claim blocks other
    callers; past it the claim is treated as abandoned and can be taken over.
    """

    def __init__(self, session: AsyncSession, claim_timeout: timedelta = DEFAULT_CLAIM_TIMEOUT):
        self.session = session
        self.claim_timeout = claim_timeout

    async def count_on_hand(self, tenant_id: str) -> int:
        stmt = select(func.count()).select_from(InventoryOnHand).where(InventoryOnHand.tenant_id == tenant_id)
        return int((await self.session.execute(stmt)).scalar_one())

    async def list_active_items(self, tenant_id: str) -> Sequence[SeedItem]:
        stmt = (
            select(Item.id, Item.reorder_point)
            .where(Item.tenant_id == tenant_id, Item.is_active.is_(True))
            .order_by(Item.item_number, Item.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [SeedItem(id=row.id, reorder_point=row.reorder_point or 0) for row in rows]

    async def list_warehouses(self, tenant_id: str) -> Sequence[SeedWarehouse]:
        stmt = (
            select(Warehouse.id)
            .where(Warehouse.tenant_id == tenant_id, Warehouse.is_active.is_(True))
            .order_by(Warehouse.warehouse_code, Warehouse.id)
        )
        return [SeedWarehouse(id=warehouse_id) for warehouse_id in (await self.session.scalars(stmt)).all()]

    async def claim_seed(self, tenant_id: str) -> bool:
        now = datetime.now(timezone.utc)
        try:
            await self.session.execute(insert(InventorySeedClaim).values(tenant_id=tenant_id, claimed_at=now))
            await self.session.commit()
            return True
        except IntegrityError:
            await self.session.rollback()

        # The conditional update is the take-over: only one caller can match it.
        result = await self.session.execute(
            update(InventorySeedClaim)
            .where(
                InventorySeedClaim.tenant_id == tenant_id,
                or_(
                    InventorySeedClaim.completed_at.is_not(None),
                    InventorySeedClaim.claimed_at < now - self.claim_timeout,
                ),
            )
            .values(claimed_at=now, completed_at=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 1:
            logger.info("Took over the seed claim for tenant %s", tenant_id)
            return True
        return False

    async def release_seed(self, tenant_id: str, item_ids: Sequence[str]) -> None:
        # the failed statement may have left the transaction unusable
        await self.session.rollback()
        for start in range(0, len(item_ids), _DELETE_CHUNK):
            await self.session.execute(
                delete(InventoryOnHand).where(
                    InventoryOnHand.tenant_id == tenant_id,
                    InventoryOnHand.item_id.in_(item_ids[start : start + _DELETE_CHUNK]),
                )
            )
        await self.session.execute(
            delete(InventorySeedClaim).where(
                InventorySeedClaim.tenant_id == tenant_id,
                InventorySeedClaim.completed_at.is_(None),
            )
        )
        await self.session.commit()

    async def insert_on_hand_batch(self, rows: Sequence[OnHandRow]) -> None:
        if not rows:
            return
        now = datetime.now(timezone.utc)
        payload = [
            {
                "tenant_id": row.tenant_id,
                "item_id": row.item_id,
                "warehouse_id": row.warehouse_id,
                "quantity_on_hand": row.quantity_on_hand,
                "quantity_reserved": row.quantity_reserved,
                "quantity_available": row.quantity_available,
                "updated_at": now,
            }
            for row in rows
        ]
        try:
            self.session.add_all(InventoryOnHand(**values) for values in payload)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.exception("Duplicate on-hand positions while seeding tenant %s", rows[0].tenant_id)
            raise

    async def complete_seed(self, tenant_id: str) -> None:
        await self.session.execute(
            update(InventorySeedClaim)
            .where(InventorySeedClaim.tenant_id == tenant_id)
            .values(completed_at=datetime.now(timezone.utc))
        )
        await self.session.commit()

    async def list_planning_items(self, tenant_id: str) -> list[PlanningItem]:
        stmt = (
            select(Item)
            .where(Item.tenant_id == tenant_id, Item.is_active.is_(True))
            .order_by(Item.item_number, Item.id)
        )
        items = (await self.session.scalars(stmt)).all()
        return [
            PlanningItem(
                id=item.id,
                reorder_point=item.reorder_point or 0,
                reorder_quantity=item.reorder_quantity or None,
                unit_cost=float(item.unit_cost or 0),
                item_number=item.item_number,
                item_name=item.item_name,
            )
            for item in items
        ]

    async def stock_rows(self, tenant_id: str) -> list[tuple[str, float]]:
        stmt = select(InventoryOnHand.item_id, InventoryOnHand.quantity_on_hand).where(
            InventoryOnHand.tenant_id == tenant_id
        )
        return [(row.item_id, float(row.quantity_on_hand or 0)) for row in (await self.session.execute(stmt)).all()]

    async def overview(self, tenant_id: str) -> InventoryOverview:
        item_count = await self.session.scalar(
            select(func.count()).select_from(Item).where(Item.tenant_id == tenant_id, Item.is_active.is_(True))
        )
        warehouse_count = await self.session.scalar(
            select(func.count())
            .select_from(Warehouse)
            .where(Warehouse.tenant_id == tenant_id, Warehouse.is_active.is_(True))
        )
        on_hand_join = InventoryOnHand.__table__.join(Item.__table__, InventoryOnHand.item_id == Item.id)
        total_value = await self.session.scalar(
            select(func.coalesce(func.sum(InventoryOnHand.quantity_on_hand * Item.unit_cost), 0))
            .select_from(on_hand_join)
            .where(InventoryOnHand.tenant_id == tenant_id)
        )
        low_stock = await self.session.scalar(
            select(func.count())
            .select_from(on_hand_join)
            .where(
                and_(
                    InventoryOnHand.tenant_id == tenant_id,
                    InventoryOnHand.quantity_on_hand <= Item.reorder_point,
                )
            )
        )
        return InventoryOverview(
            total_items=int(item_count or 0),
            total_warehouses=int(warehouse_count or 0),
            total_inventory_value=float(total_value or 0),
            low_stock_alerts=int(low_stock or 0),
        )


__all__ = ["DEFAULT_CLAIM_TIMEOUT", "InventoryOverview", "SqlInventoryStore"]
