# stockwatch/services/store_lifecycle.py

import logging

from stockwatch.core.exceptions import StoreNotFoundError
from stockwatch.core.utils import normalize_shop_domain, utc_now
from stockwatch.models import StoreAccount
from stockwatch.schemas.results import ResetResult
from stockwatch.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class StoreLifecycleService:
    """Product reset and app uninstall for a store."""

    def __init__(self, store: InventoryStore):
        self.store = store

    async def get_active_store(self, shop_domain: str) -> StoreAccount:
        domain = normalize_shop_domain(shop_domain)
        account = await self.store.get_store_by_domain(domain) if domain else None
        if account is None:
            raise StoreNotFoundError(f"No active store for {shop_domain}")
        return account

    async def reset_products(self, account: StoreAccount) -> ResetResult:
        """Delete all tracking data of the store, alert history included."""
        result = await self.store.delete_store_data(account.id, include_alerts=True)
        logger.info(
            f"Reset {account.shop_domain}: {result.tracked_products} products, {result.overrides} overrides, "
            f"{result.index_entries} index entries, {result.alert_records} alerts removed"
        )
        return result

    async def uninstall(self, shop_domain: str) -> ResetResult:
        """Soft-delete the store and drop its tracking data. Alert records are kept."""
        account = await self.get_active_store(shop_domain)
        account.uninstalled_at = utc_now()
        await self.store.save_store(account)
        result = await self.store.delete_store_data(account.id, include_alerts=False)
        logger.info(f"Store {account.shop_domain} uninstalled; {result.tracked_products} tracked products removed")
        return result
