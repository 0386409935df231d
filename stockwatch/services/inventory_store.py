# stockwatch/services/inventory_store.py
"""
Persistence boundary for the inventory core.

``InventoryStore`` is the record-store interface the services depend on;
``SqlAlchemyInventoryStore`` implements it over an AsyncSession. Writes are
flushed, never committed: the caller owns the unit of work and commits once
per event or per out-of-band operation.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stockwatch.core.enums import InventoryStatus
from stockwatch.core.utils import utc_now
from stockwatch.models import (
    AlertRecord,
    InventoryItemIndex,
    ProductOverride,
    StoreAccount,
    TrackedProduct,
    WebhookEvent,
)
from stockwatch.schemas.results import ResetResult

logger = logging.getLogger(__name__)


class InventoryStore(ABC):

    # --- Stores ---

    @abstractmethod
    async def get_store(self, store_id: int) -> Optional[StoreAccount]:
        pass

    @abstractmethod
    async def get_store_by_domain(self, shop_domain: str) -> Optional[StoreAccount]:
        """Active (not uninstalled) store for a shop domain."""
        pass

    @abstractmethod
    async def list_active_stores(self) -> List[StoreAccount]:
        pass

    @abstractmethod
    async def save_store(self, store: StoreAccount) -> StoreAccount:
        pass

    # --- Tracked products ---

    @abstractmethod
    async def get_tracked_product(self, store_id: int, product_id: str) -> Optional[TrackedProduct]:
        pass

    @abstractmethod
    async def save_tracked_product(self, tracked: TrackedProduct) -> TrackedProduct:
        pass

    @abstractmethod
    async def insert_tracked_product(self, tracked: TrackedProduct) -> Optional[TrackedProduct]:
        """Insert a first-seen product; None when a row for it already exists."""
        pass

    @abstractmethod
    async def count_active_products(self, store_id: int) -> int:
        """Tracked products that are not deactivated."""
        pass

    @abstractmethod
    async def list_active_products(self, store_id: int) -> List[TrackedProduct]:
        """Non-deactivated products, most recently updated first."""
        pass

    @abstractmethod
    async def list_deactivated_products(self, store_id: int) -> List[TrackedProduct]:
        """Deactivated products, most recently updated first."""
        pass

    # --- Overrides ---

    @abstractmethod
    async def get_override(self, store_id: int, product_id: str) -> Optional[ProductOverride]:
        pass

    # --- Inventory item index ---

    @abstractmethod
    async def get_index_entry(self, store_id: int, inventory_item_id: str) -> Optional[InventoryItemIndex]:
        pass

    @abstractmethod
    async def upsert_index_entry(
        self, store_id: int, inventory_item_id: str, product_id: str, variant_id: Optional[str]
    ) -> InventoryItemIndex:
        pass

    @abstractmethod
    async def delete_index_entry(self, store_id: int, inventory_item_id: str) -> None:
        pass

    # --- Alerts ---

    @abstractmethod
    async def latest_alert(self, store_id: int, product_id: str, alert_kind: str) -> Optional[AlertRecord]:
        pass

    @abstractmethod
    async def add_alert_record(self, record: AlertRecord) -> AlertRecord:
        pass

    # --- Webhook log ---

    @abstractmethod
    async def save_webhook_event(self, event: WebhookEvent) -> WebhookEvent:
        pass

    # --- Bulk ---

    @abstractmethod
    async def delete_store_data(self, store_id: int, include_alerts: bool = True) -> ResetResult:
        pass

    # --- Unit of work ---

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass


class SqlAlchemyInventoryStore(InventoryStore):
    """InventoryStore backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Stores ---

    async def get_store(self, store_id: int) -> Optional[StoreAccount]:
        return await self.db.get(StoreAccount, store_id)

    async def get_store_by_domain(self, shop_domain: str) -> Optional[StoreAccount]:
        stmt = select(StoreAccount).where(
            StoreAccount.shop_domain == shop_domain,
            StoreAccount.uninstalled_at.is_(None),
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def list_active_stores(self) -> List[StoreAccount]:
        stmt = select(StoreAccount).where(StoreAccount.uninstalled_at.is_(None)).order_by(StoreAccount.id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def save_store(self, store: StoreAccount) -> StoreAccount:
        self.db.add(store)
        await self.db.flush()
        return store

    # --- Tracked products ---

    async def get_tracked_product(self, store_id: int, product_id: str) -> Optional[TrackedProduct]:
        stmt = select(TrackedProduct).where(
            TrackedProduct.store_id == store_id,
            TrackedProduct.product_id == str(product_id),
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def save_tracked_product(self, tracked: TrackedProduct) -> TrackedProduct:
        self.db.add(tracked)
        await self.db.flush()
        return tracked

    async def insert_tracked_product(self, tracked: TrackedProduct) -> Optional[TrackedProduct]:
        values = {
            column.name: getattr(tracked, column.name)
            for column in TrackedProduct.__table__.columns
            if column.name != "id"
        }
        # Concurrent first sightings of a product must not collide on the unique key
        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(TrackedProduct).values(**values).on_conflict_do_nothing(
            index_elements=["store_id", "product_id"],
        )
        result = await self.db.execute(stmt)
        if not result.rowcount:
            return None

        inserted = (
            select(TrackedProduct)
            .where(
                TrackedProduct.store_id == tracked.store_id,
                TrackedProduct.product_id == str(tracked.product_id),
            )
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(inserted)).scalar_one()

    async def count_active_products(self, store_id: int) -> int:
        stmt = select(func.count(TrackedProduct.id)).where(
            TrackedProduct.store_id == store_id,
            TrackedProduct.inventory_status != InventoryStatus.DEACTIVATED.value,
        )
        return int((await self.db.execute(stmt)).scalar_one() or 0)

    async def list_active_products(self, store_id: int) -> List[TrackedProduct]:
        stmt = (
            select(TrackedProduct)
            .where(
                TrackedProduct.store_id == store_id,
                TrackedProduct.inventory_status != InventoryStatus.DEACTIVATED.value,
            )
            .order_by(TrackedProduct.updated_at.desc(), TrackedProduct.id.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_deactivated_products(self, store_id: int) -> List[TrackedProduct]:
        stmt = (
            select(TrackedProduct)
            .where(
                TrackedProduct.store_id == store_id,
                TrackedProduct.inventory_status == InventoryStatus.DEACTIVATED.value,
            )
            .order_by(TrackedProduct.updated_at.desc(), TrackedProduct.id.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    # --- Overrides ---

    async def get_override(self, store_id: int, product_id: str) -> Optional[ProductOverride]:
        stmt = select(ProductOverride).where(
            ProductOverride.store_id == store_id,
            ProductOverride.product_id == str(product_id),
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    # --- Inventory item index ---

    async def get_index_entry(self, store_id: int, inventory_item_id: str) -> Optional[InventoryItemIndex]:
        stmt = select(InventoryItemIndex).where(
            InventoryItemIndex.store_id == store_id,
            InventoryItemIndex.inventory_item_id == str(inventory_item_id),
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def upsert_index_entry(
        self, store_id: int, inventory_item_id: str, product_id: str, variant_id: Optional[str]
    ) -> InventoryItemIndex:
        values = {
            "store_id": store_id,
            "inventory_item_id": str(inventory_item_id),
            "product_id": str(product_id),
            "variant_id": variant_id,
            "updated_at": utc_now(),
        }
        # ON CONFLICT keeps concurrent repairs of the same item from failing
        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(InventoryItemIndex).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["store_id", "inventory_item_id"],
            set_={key: stmt.excluded[key] for key in ("product_id", "variant_id", "updated_at")},
        )
        await self.db.execute(stmt)

        refreshed = (
            select(InventoryItemIndex)
            .where(
                InventoryItemIndex.store_id == store_id,
                InventoryItemIndex.inventory_item_id == str(inventory_item_id),
            )
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(refreshed)).scalar_one()

    async def delete_index_entry(self, store_id: int, inventory_item_id: str) -> None:
        await self.db.execute(
            delete(InventoryItemIndex).where(
                InventoryItemIndex.store_id == store_id,
                InventoryItemIndex.inventory_item_id == str(inventory_item_id),
            )
        )

    # --- Alerts ---

    async def latest_alert(self, store_id: int, product_id: str, alert_kind: str) -> Optional[AlertRecord]:
        stmt = (
            select(AlertRecord)
            .where(
                AlertRecord.store_id == store_id,
                AlertRecord.product_id == str(product_id),
                AlertRecord.alert_kind == alert_kind,
            )
            .order_by(AlertRecord.sent_at.desc(), AlertRecord.id.desc())
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalars().first()

    async def add_alert_record(self, record: AlertRecord) -> AlertRecord:
        self.db.add(record)
        await self.db.flush()
        return record

    # --- Webhook log ---

    async def save_webhook_event(self, event: WebhookEvent) -> WebhookEvent:
        self.db.add(event)
        await self.db.flush()
        return event

    # --- Bulk ---

    async def delete_store_data(self, store_id: int, include_alerts: bool = True) -> ResetResult:
        result = ResetResult(store_id=store_id)

        deleted = await self.db.execute(delete(TrackedProduct).where(TrackedProduct.store_id == store_id))
        result.tracked_products = deleted.rowcount or 0

        deleted = await self.db.execute(delete(ProductOverride).where(ProductOverride.store_id == store_id))
        result.overrides = deleted.rowcount or 0

        deleted = await self.db.execute(delete(InventoryItemIndex).where(InventoryItemIndex.store_id == store_id))
        result.index_entries = deleted.rowcount or 0

        if include_alerts:
            deleted = await self.db.execute(delete(AlertRecord).where(AlertRecord.store_id == store_id))
            result.alert_records = deleted.rowcount or 0

        return result

    # --- Unit of work ---

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
