# stockwatch/services/reconciler.py
"""
Inventory reconciliation: turns an authoritative catalog read into the local
product-level stock record.

The aggregate is always recomputed from the full variant list, never from the
webhook's delta, so replays and out-of-order deliveries converge on the same
row. Reconciling the same upstream quantity twice leaves
``previous_quantity == current_quantity``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from stockwatch.core.config import get_settings
from stockwatch.core.enums import InventoryStatus
from stockwatch.core.utils import utc_now
from stockwatch.models import ProductOverride, StoreAccount, TrackedProduct
from stockwatch.schemas.catalog import CatalogProduct
from stockwatch.services.inventory_store import InventoryStore
from stockwatch.services.quota import PlanQuotaEnforcer

logger = logging.getLogger(__name__)


def effective_threshold(account: StoreAccount, override: Optional[ProductOverride] = None) -> int:
    """Product override if set, else the store's threshold, else the configured default."""
    if override is not None and override.custom_threshold is not None:
        return override.custom_threshold
    if account.low_stock_threshold is not None:
        return account.low_stock_threshold
    return get_settings().DEFAULT_LOW_STOCK_THRESHOLD


def classify_quantity(quantity: int, threshold: int) -> InventoryStatus:
    if quantity <= 0:
        return InventoryStatus.OUT_OF_STOCK
    if quantity <= threshold:
        return InventoryStatus.LOW_STOCK
    return InventoryStatus.IN_STOCK


@dataclass
class ReconcileResult:
    tracked: TrackedProduct
    previous_quantity: int
    current_quantity: int
    threshold: int
    created: bool = False
    skipped: bool = False       # Existing row is deactivated; left untouched
    deactivated: bool = False   # New row admitted as deactivated (plan limit reached)

    @property
    def should_continue(self) -> bool:
        """Whether visibility and alerting should run for this result."""
        return not (self.skipped or self.deactivated)


class InventoryReconciler:

    def __init__(self, store: InventoryStore, quota: Optional[PlanQuotaEnforcer] = None):
        self.store = store
        self.quota = quota or PlanQuotaEnforcer(store)

    async def reconcile(
        self,
        account: StoreAccount,
        product: CatalogProduct,
        override: Optional[ProductOverride] = None,
    ) -> ReconcileResult:
        threshold = effective_threshold(account, override)
        current = product.total_quantity
        combined_sku = product.combined_sku or None
        now = utc_now()

        tracked = await self.store.get_tracked_product(account.id, product.id)

        if tracked is None:
            result = await self._track_new_product(account, product, current, combined_sku, threshold, now)
            if result is not None:
                return result
            # Another event created the row first; reconcile against it instead
            logger.info(f"Product {product.id} for store {account.id} was created concurrently; updating existing row")
            tracked = await self.store.get_tracked_product(account.id, product.id)

        if tracked.is_deactivated:
            logger.debug(f"Skipping deactivated product {product.id} for store {account.id}")
            return ReconcileResult(
                tracked=tracked,
                previous_quantity=tracked.current_quantity or 0,
                current_quantity=current,
                threshold=threshold,
                skipped=True,
            )

        previous = tracked.current_quantity or 0
        tracked.product_title = product.title
        tracked.sku = combined_sku
        tracked.previous_quantity = previous
        tracked.current_quantity = current
        tracked.inventory_status = classify_quantity(current, threshold).value
        tracked.last_checked_at = now
        tracked.updated_at = now
        await self.store.save_tracked_product(tracked)

        if previous != current:
            logger.info(f"Product {product.id} for store {account.id}: {previous} -> {current} units")

        return ReconcileResult(
            tracked=tracked,
            previous_quantity=previous,
            current_quantity=current,
            threshold=threshold,
        )

    async def _track_new_product(
        self,
        account: StoreAccount,
        product: CatalogProduct,
        current: int,
        combined_sku: Optional[str],
        threshold: int,
        now: datetime,
    ) -> Optional[ReconcileResult]:
        """First sighting of a product. Returns None if the row already exists."""
        admitted = await self.quota.can_add_product(account)
        candidate = TrackedProduct(
            store_id=account.id,
            product_id=product.id,
            product_title=product.title,
            sku=combined_sku,
            current_quantity=current,
            previous_quantity=0,
            is_hidden=False,
            last_checked_at=now,
            created_at=now,
            updated_at=now,
        )
        if admitted:
            candidate.inventory_status = classify_quantity(current, threshold).value
        else:
            candidate.inventory_status = InventoryStatus.DEACTIVATED.value
            candidate.deactivated_at = now

        tracked = await self.store.insert_tracked_product(candidate)
        if tracked is None:
            return None

        if not admitted:
            logger.info(f"Plan limit reached for store {account.id}; product {product.id} recorded as deactivated")
        else:
            logger.info(f"Tracking new product {product.id} ({product.title}) for store {account.id}: {current} units")
        return ReconcileResult(
            tracked=tracked,
            previous_quantity=0,
            current_quantity=current,
            threshold=threshold,
            created=True,
            deactivated=not admitted,
        )
