# stockwatch/services/catalog_sync.py
"""
Full catalog sync for one store.

Walks every product page, reconciles each product into a tracked row (the
plan quota decides admission, as for webhooks) and indexes every variant's
inventory item so later webhooks resolve from the index.
"""

import logging
from typing import Optional

from stockwatch.core.config import get_settings
from stockwatch.integrations.base import CatalogGateway
from stockwatch.models import StoreAccount
from stockwatch.schemas.results import SyncResult
from stockwatch.services.inventory_store import InventoryStore
from stockwatch.services.reconciler import InventoryReconciler

logger = logging.getLogger(__name__)


class CatalogSyncService:

    def __init__(
        self,
        store: InventoryStore,
        catalog: CatalogGateway,
        reconciler: Optional[InventoryReconciler] = None,
        page_size: Optional[int] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.reconciler = reconciler or InventoryReconciler(store)
        self.page_size = page_size or get_settings().FALLBACK_SCAN_PAGE_SIZE

    async def sync(self, account: StoreAccount) -> SyncResult:
        result = SyncResult(store_id=account.id)
        since_id = None

        while True:
            page = await self.catalog.list_products(self.page_size, since_id=since_id)

            for product in page:
                result.products_seen += 1

                for variant in product.variants:
                    if variant.inventory_item_id:
                        await self.store.upsert_index_entry(
                            account.id, variant.inventory_item_id, product.id, variant.id
                        )
                        result.indexed_items += 1

                override = await self.store.get_override(account.id, product.id)
                reconciled = await self.reconciler.reconcile(account, product, override)
                if reconciled.deactivated:
                    result.deactivated += 1
                elif reconciled.created:
                    result.created += 1
                elif not reconciled.skipped:
                    result.updated += 1

            if len(page) < self.page_size:
                break
            since_id = page[-1].id

        logger.info(
            f"Catalog sync for {account.shop_domain}: {result.products_seen} products, "
            f"{result.created} new, {result.updated} updated, {result.deactivated} over plan limit, "
            f"{result.indexed_items} items indexed"
        )
        return result
