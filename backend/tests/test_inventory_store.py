from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete, select

from erp_metrics.db.session import Database
from erp_metrics.models import InventoryOnHand, InventorySeedClaim, Item, Warehouse
from erp_metrics.services.inventory_seeding import SeedingCancelled, SeedOutcome, ensure_seeded
from erp_metrics.services.inventory_store import SqlInventoryStore

TENANT = "tenant-sql"


async def _populate(database: Database, item_count: int = 10, warehouse_count: int = 3) -> None:
    await database.create_all()
    async with database.session() as session:
        session.add_all(
            Item(
                tenant_id=TENANT,
                item_number=f"ITM-{index:03d}",
                item_name=f"Item {index}",
                unit_cost=2.0,
                reorder_point=index * 10,
            )
            for index in range(item_count)
        )
        session.add_all(
            Warehouse(tenant_id=TENANT, warehouse_code=f"WH-{index}", warehouse_name=f"Warehouse {index}")
            for index in range(warehouse_count)
        )
        session.add(Item(tenant_id=TENANT, item_number="ITM-999", item_name="Retired", is_active=False))
        await session.commit()


def test_seed_is_idempotent_against_database(database: Database):
    async def _scenario():
        await _populate(database)
        async with database.session() as session:
            store = SqlInventoryStore(session)

            first = await ensure_seeded(TENANT, store, batch_size=4)
            second = await ensure_seeded(TENANT, store, batch_size=4)

            assert first.outcome is SeedOutcome.SEEDED
            assert first.rows_inserted == 10
            assert first.batches == 3
            assert second.outcome is SeedOutcome.ALREADY_SEEDED
            assert await store.count_on_hand(TENANT) == 10

            claim = await session.get(InventorySeedClaim, TENANT)
            assert claim is not None and claim.completed_at is not None

            rows = (await session.execute(select(InventoryOnHand))).scalars().all()
            assert len({row.item_id for row in rows}) == 10
        await database.dispose()

    asyncio.run(_scenario())


def test_items_are_seeded_in_item_number_order(database: Database):
    async def _scenario():
        await _populate(database, item_count=4, warehouse_count=2)
        async with database.session() as session:
            store = SqlInventoryStore(session)
            items = await store.list_active_items(TENANT)
            warehouses = await store.list_warehouses(TENANT)

            assert [item.reorder_point for item in items] == [0, 10, 20, 30]
            assert len(warehouses) == 2

            await ensure_seeded(TENANT, store)
            stock = dict(await store.stock_rows(TENANT))
            assert [stock[item.id] for item in items] == [50, 30, 80, 150]
        await database.dispose()

    asyncio.run(_scenario())


def test_overview_totals(database: Database):
    async def _scenario():
        await _populate(database)
        async with database.session() as session:
            store = SqlInventoryStore(session)
            await ensure_seeded(TENANT, store)

            overview = await store.overview(TENANT)

            assert overview.total_items == 10
            assert overview.total_warehouses == 3
            assert overview.total_inventory_value == 3120
            assert overview.low_stock_alerts == 0

            planning_items = await store.list_planning_items(TENANT)
            assert [item.item_number for item in planning_items][:2] == ["ITM-000", "ITM-001"]
            assert planning_items[0].reorder_quantity is None
        await database.dispose()

    asyncio.run(_scenario())


def test_tenant_without_warehouses_is_not_claimed(database: Database):
    async def _scenario():
        await _populate(database, warehouse_count=0)
        async with database.session() as session:
            result = await ensure_seeded(TENANT, SqlInventoryStore(session))

            assert result.outcome is SeedOutcome.NOTHING_TO_SEED
            assert await session.get(InventorySeedClaim, TENANT) is None
        await database.dispose()

    asyncio.run(_scenario())


class CancellingSqlStore(SqlInventoryStore):
    """Sets ``cancel_event`` once the first batch is committed."""

    def __init__(self, session, cancel_event: asyncio.Event):
        super().__init__(session)
        self.cancel_event = cancel_event

    async def insert_on_hand_batch(self, rows):
        await super().insert_on_hand_batch(rows)
        self.cancel_event.set()


def test_cancelled_seed_is_retried_from_scratch(database: Database):
    async def _scenario():
        await _populate(database)
        async with database.session() as session:
            cancel = asyncio.Event()
            with pytest.raises(SeedingCancelled) as excinfo:
                await ensure_seeded(TENANT, CancellingSqlStore(session, cancel), batch_size=4, cancel_event=cancel)
            assert excinfo.value.rows_written == 4

            store = SqlInventoryStore(session)
            assert await store.count_on_hand(TENANT) == 0
            assert await session.get(InventorySeedClaim, TENANT) is None

            retry = await ensure_seeded(TENANT, store, batch_size=4)
            assert retry.outcome is SeedOutcome.SEEDED
            assert await store.count_on_hand(TENANT) == 10
        await database.dispose()

    asyncio.run(_scenario())


def test_cancel_before_first_batch_releases_claim(database: Database):
    async def _scenario():
        await _populate(database)
        async with database.session() as session:
            store = SqlInventoryStore(session)
            cancel = asyncio.Event()
            cancel.set()
            with pytest.raises(SeedingCancelled):
                await ensure_seeded(TENANT, store, cancel_event=cancel)

            retry = await ensure_seeded(TENANT, store)
            assert retry.outcome is SeedOutcome.SEEDED
            assert retry.rows_inserted == 10
        await database.dispose()

    asyncio.run(_scenario())


def test_completed_claim_is_taken_over_when_rows_are_gone(database: Database):
    async def _scenario():
        await _populate(database)
        async with database.session() as session:
            store = SqlInventoryStore(session)
            await ensure_seeded(TENANT, store)
            await session.execute(delete(InventoryOnHand).where(InventoryOnHand.tenant_id == TENANT))
            await session.commit()

            result = await ensure_seeded(TENANT, store)

            assert result.outcome is SeedOutcome.SEEDED
            assert await store.count_on_hand(TENANT) == 10
        await database.dispose()

    asyncio.run(_scenario())


def test_open_claim_blocks_until_it_goes_stale(database: Database):
    async def _scenario():
        await _populate(database)
        async with database.session() as session:
            session.add(InventorySeedClaim(tenant_id=TENANT, claimed_at=datetime.now(timezone.utc)))
            await session.commit()

            store = SqlInventoryStore(session, claim_timeout=timedelta(minutes=10))
            blocked = await ensure_seeded(TENANT, store)
            assert blocked.outcome is SeedOutcome.CLAIMED_ELSEWHERE
            assert await store.count_on_hand(TENANT) == 0

            claim = await session.get(InventorySeedClaim, TENANT)
            claim.claimed_at = datetime.now(timezone.utc) - timedelta(hours=1)
            await session.commit()

            recovered = await ensure_seeded(TENANT, store)
            assert recovered.outcome is SeedOutcome.SEEDED
            assert await store.count_on_hand(TENANT) == 10
        await database.dispose()

    asyncio.run(_scenario())
