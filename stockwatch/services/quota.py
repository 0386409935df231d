# stockwatch/services/quota.py
"""
Plan quota enforcement.

Decides which tracked products stay active under a store's plan. Runs out of
band: after a plan change, from the admin routes, or from the
``enforce-quotas`` CLI. Enforcement is idempotent; running it twice for the
same plan leaves the same active set.
"""

import logging
from typing import List

from stockwatch.core.enums import InventoryStatus, PlanTier
from stockwatch.core.plans import get_plan_quota
from stockwatch.core.utils import utc_now
from stockwatch.models import StoreAccount, TrackedProduct
from stockwatch.schemas.results import EnforcementResult
from stockwatch.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class PlanQuotaEnforcer:

    def __init__(self, store: InventoryStore):
        self.store = store

    async def can_add_product(self, account: StoreAccount) -> bool:
        quota = get_plan_quota(account.plan)
        if quota.is_unlimited:
            return True
        active = await self.store.count_active_products(account.id)
        return quota.has_room_for(active)

    async def change_plan(self, account: StoreAccount, tier) -> EnforcementResult:
        """Persist the new tier, then enforce it."""
        new_tier = PlanTier.parse(tier)
        old_plan = account.plan
        account.plan = new_tier.value
        await self.store.save_store(account)
        logger.info(f"Store {account.shop_domain} plan changed {old_plan} -> {new_tier.value}")
        return await self.enforce(account)

    async def enforce(self, account: StoreAccount) -> EnforcementResult:
        quota = get_plan_quota(account.plan)

        if quota.is_unlimited:
            reactivated = await self._reactivate(await self.store.list_deactivated_products(account.id))
            active_count = await self.store.count_active_products(account.id)
            return EnforcementResult(
                store_id=account.id,
                plan=quota.tier.value,
                max_allowed=None,
                active_count=active_count,
                reactivated_count=reactivated,
                message=f"{quota.name} plan is unlimited; reactivated {reactivated} products",
            )

        limit = quota.max_products
        active = await self.store.list_active_products(account.id)
        deactivated_count = 0
        reactivated_count = 0

        if len(active) > limit:
            # Newest first: the tail is the least recently updated
            deactivated_count = await self._deactivate(active[limit:])
            active_count = limit
        else:
            room = limit - len(active)
            if room > 0:
                candidates = await self.store.list_deactivated_products(account.id)
                reactivated_count = await self._reactivate(candidates[:room])
            active_count = len(active) + reactivated_count

        if deactivated_count:
            message = f"Deactivated {deactivated_count} products to fit the {quota.name} limit of {limit}"
        elif reactivated_count:
            message = f"Reactivated {reactivated_count} products within the {quota.name} limit of {limit}"
        else:
            message = f"Within the {quota.name} limit of {limit}; nothing to change"

        logger.info(f"Quota enforcement for {account.shop_domain}: {message}")
        return EnforcementResult(
            store_id=account.id,
            plan=quota.tier.value,
            max_allowed=limit,
            active_count=active_count,
            deactivated_count=deactivated_count,
            reactivated_count=reactivated_count,
            message=message,
        )

    async def _deactivate(self, products: List[TrackedProduct]) -> int:
        now = utc_now()
        for tracked in products:
            tracked.inventory_status = InventoryStatus.DEACTIVATED.value
            tracked.deactivated_at = now
            await self.store.save_tracked_product(tracked)
        return len(products)

    async def _reactivate(self, products: List[TrackedProduct]) -> int:
        # Pending until the next event or sync recomputes the real status
        for tracked in products:
            tracked.inventory_status = InventoryStatus.PENDING.value
            tracked.deactivated_at = None
            await self.store.save_tracked_product(tracked)
        return len(products)
