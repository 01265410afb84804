"""One-time seeding of on-hand inventory positions for a tenant.

When a tenant has no on-hand rows yet, every active item is placed in one
warehouse (round-robin) with a deterministic placeholder quantity derived
from its reorder point. Rows are written in bounded batches.

Concurrent first calls are serialised through an atomic claim on the store:
only the caller that wins the claim inserts rows. A run that fails or is
cancelled part-way removes the rows it wrote and releases its claim, so the
next call seeds the tenant from scratch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Protocol, Sequence

from opentelemetry import trace

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_BATCH_SIZE = 500


class SeedingError(RuntimeError):
    """Raised when seeding cannot complete."""


class SeedingCancelled(SeedingError):
    def __init__(self, tenant_id: str, rows_written: int):
        super().__init__(f"Seeding for tenant {tenant_id} cancelled after {rows_written} rows")
        self.tenant_id = tenant_id
        self.rows_written = rows_written


class SeedOutcome(str, Enum):
    SEEDED = "seeded"
    ALREADY_SEEDED = "already_seeded"
    NOTHING_TO_SEED = "nothing_to_seed"
    CLAIMED_ELSEWHERE = "claimed_elsewhere"


@dataclass(frozen=True)
class SeedItem:
    id: str
    reorder_point: float | None = 0


@dataclass(frozen=True)
class SeedWarehouse:
    id: str


@dataclass(frozen=True)
class OnHandRow:
    tenant_id: str
    item_id: str
    warehouse_id: str
    quantity_on_hand: float
    quantity_reserved: float
    quantity_available: float


@dataclass(frozen=True)
class SeedResult:
    tenant_id: str
    outcome: SeedOutcome
    rows_inserted: int = 0
    batches: int = 0


class InventoryStore(Protocol):
    """Storage operations the seeder needs."""

    async def count_on_hand(self, tenant_id: str) -> int:
        ...

    async def list_active_items(self, tenant_id: str) -> Sequence[SeedItem]:
        ...

    async def list_warehouses(self, tenant_id: str) -> Sequence[SeedWarehouse]:
        ...

    async def claim_seed(self, tenant_id: str) -> bool:
        """Atomically claim the right to seed ``tenant_id``.

        Only called while the tenant has no on-hand rows. A claim left by a
        completed run (or an abandoned one) may be taken over; ``False`` means
        another caller is seeding right now.
        """
        ...

    async def insert_on_hand_batch(self, rows: Sequence[OnHandRow]) -> None:
        ...

    async def complete_seed(self, tenant_id: str) -> None:
        ...

    async def release_seed(self, tenant_id: str, item_ids: Sequence[str]) -> None:
        """Delete the on-hand rows written for ``item_ids`` and drop the open claim."""
        ...


def seed_quantity(index: int, reorder_point: float | None) -> float:
    if reorder_point and reorder_point > 0:
        return reorder_point * (2 + (index % 4))
    return 50 + (index % 20) * 10


def plan_seed_rows(
    tenant_id: str,
    items: Sequence[SeedItem],
    warehouses: Sequence[SeedWarehouse],
) -> list[OnHandRow]:
    """Distribute ``items`` round-robin across ``warehouses``."""

    if not items or not warehouses:
        return []
    rows: list[OnHandRow] = []
    for index, item in enumerate(items):
        warehouse = warehouses[index % len(warehouses)]
        quantity = seed_quantity(index, item.reorder_point)
        rows.append(
            OnHandRow(
                tenant_id=tenant_id,
                item_id=item.id,
                warehouse_id=warehouse.id,
                quantity_on_hand=quantity,
                quantity_reserved=0,
                quantity_available=quantity,
            )
        )
    return rows


def _batched(rows: Sequence[OnHandRow], size: int) -> Iterator[Sequence[OnHandRow]]:
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


async def ensure_seeded(
    tenant_id: str,
    store: InventoryStore,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel_event: asyncio.Event | None = None,
) -> SeedResult:
    """Seed on-hand rows for ``tenant_id`` unless it already has some.

    ``cancel_event`` is checked before every batch; when set, the run stops
    with :class:`SeedingCancelled`.
    """

    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    existing = await store.count_on_hand(tenant_id)
    if existing > 0:
        return SeedResult(tenant_id=tenant_id, outcome=SeedOutcome.ALREADY_SEEDED)

    items = await store.list_active_items(tenant_id)
    warehouses = await store.list_warehouses(tenant_id)
    if not items or not warehouses:
        logger.info(
            "Nothing to seed for tenant %s (%d items, %d warehouses)", tenant_id, len(items), len(warehouses)
        )
        return SeedResult(tenant_id=tenant_id, outcome=SeedOutcome.NOTHING_TO_SEED)

    if not await store.claim_seed(tenant_id):
        logger.info("Seeding for tenant %s already claimed by another request", tenant_id)
        return SeedResult(tenant_id=tenant_id, outcome=SeedOutcome.CLAIMED_ELSEWHERE)

    rows = plan_seed_rows(tenant_id, items, warehouses)
    written_item_ids: list[str] = []
    batches = 0
    with tracer.start_as_current_span("inventory.seed_on_hand") as span:
        span.set_attribute("erp.tenant_id", tenant_id)
        span.set_attribute("erp.seed.rows_planned", len(rows))
        try:
            for batch in _batched(rows, batch_size):
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(
                        "Seeding for tenant %s cancelled after %d rows", tenant_id, len(written_item_ids)
                    )
                    raise SeedingCancelled(tenant_id, len(written_item_ids))
                await store.insert_on_hand_batch(batch)
                written_item_ids.extend(row.item_id for row in batch)
                batches += 1
                logger.debug("Seeded batch %d for tenant %s (%d rows)", batches, tenant_id, len(batch))
        except (Exception, asyncio.CancelledError):
            logger.warning(
                "Aborting seed for tenant %s; removing %d rows and releasing the claim",
                tenant_id,
                len(written_item_ids),
            )
            await store.release_seed(tenant_id, written_item_ids)
            raise
        written = len(written_item_ids)
        span.set_attribute("erp.seed.rows_written", written)

    await store.complete_seed(tenant_id)
    logger.info(
        "Seeded %d on-hand rows for tenant %s across %d warehouses in %d batches",
        written,
        tenant_id,
        len(warehouses),
        batches,
    )
    return SeedResult(tenant_id=tenant_id, outcome=SeedOutcome.SEEDED, rows_inserted=written, batches=batches)


@dataclass
class InMemoryInventoryStore:
    """Simple store for tests and the client-side demo path."""

    items: dict[str, list[SeedItem]] = field(default_factory=dict)
    warehouses: dict[str, list[SeedWarehouse]] = field(default_factory=dict)
    rows: list[OnHandRow] = field(default_factory=list)
    claims: dict[str, bool] = field(default_factory=dict)
    batch_sizes: list[int] = field(default_factory=list)

    async def count_on_hand(self, tenant_id: str) -> int:
        return sum(1 for row in self.rows if row.tenant_id == tenant_id)

    async def list_active_items(self, tenant_id: str) -> Sequence[SeedItem]:
        return list(self.items.get(tenant_id, []))

    async def list_warehouses(self, tenant_id: str) -> Sequence[SeedWarehouse]:
        return list(self.warehouses.get(tenant_id, []))

    async def claim_seed(self, tenant_id: str) -> bool:
        # value is the completed flag; an open claim blocks, a completed one is taken over
        if self.claims.get(tenant_id) is False:
            return False
        self.claims[tenant_id] = False
        return True

    async def insert_on_hand_batch(self, rows: Sequence[OnHandRow]) -> None:
        positions = {(row.tenant_id, row.item_id, row.warehouse_id) for row in self.rows}
        for row in rows:
            key = (row.tenant_id, row.item_id, row.warehouse_id)
            if key in positions:
                raise SeedingError(f"Duplicate on-hand position {key}")
            positions.add(key)
        self.rows.extend(rows)
        self.batch_sizes.append(len(rows))

    async def complete_seed(self, tenant_id: str) -> None:
        self.claims[tenant_id] = True

    async def release_seed(self, tenant_id: str, item_ids: Sequence[str]) -> None:
        discarded = set(item_ids)
        self.rows = [row for row in self.rows if row.tenant_id != tenant_id or row.item_id not in discarded]
        if self.claims.get(tenant_id) is False:
            del self.claims[tenant_id]


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "InMemoryInventoryStore",
    "InventoryStore",
    "OnHandRow",
    "SeedItem",
    "SeedOutcome",
    "SeedResult",
    "SeedWarehouse",
    "SeedingCancelled",
    "SeedingError",
    "ensure_seeded",
    "plan_seed_rows",
    "seed_quantity",
]
