# stockwatch/services/visibility.py

import logging
from typing import Optional

from stockwatch.core.enums import VisibilityState, VisibilityTransition
from stockwatch.core.exceptions import MutationError
from stockwatch.integrations.base import CatalogGateway
from stockwatch.models import ProductOverride, StoreAccount, TrackedProduct
from stockwatch.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class VisibilityStateMachine:
    """
    Visible/Hidden transitions for a tracked product.

    - aggregate == 0 and Visible -> Hidden, if auto-hide is on for the store
      and the product isn't excluded.
    - aggregate > 0 and Hidden -> Visible, if auto-republish is on and the
      product isn't excluded.

    The catalog mutation goes first; ``is_hidden`` is persisted only once the
    catalog has accepted it. A failed mutation leaves local state untouched so
    the next event retries the transition.
    """

    def __init__(self, store: InventoryStore, catalog: CatalogGateway):
        self.store = store
        self.catalog = catalog

    def decide(
        self,
        account: StoreAccount,
        tracked: TrackedProduct,
        aggregate: int,
        override: Optional[ProductOverride] = None,
    ) -> VisibilityTransition:
        excluded = bool(override is not None and override.exclude_from_auto_hide)
        state = tracked.visibility

        if aggregate == 0:
            if state == VisibilityState.VISIBLE and account.auto_hide_enabled and not excluded:
                return VisibilityTransition.HIDE
            return VisibilityTransition.NONE

        if aggregate > 0 and state == VisibilityState.HIDDEN:
            if account.auto_republish_enabled and not excluded:
                return VisibilityTransition.REPUBLISH

        return VisibilityTransition.NONE

    async def apply(self, tracked: TrackedProduct, transition: VisibilityTransition) -> bool:
        """Issue the catalog mutation, then persist. Returns True if the transition took effect."""
        if transition == VisibilityTransition.NONE:
            return False

        visible = transition == VisibilityTransition.REPUBLISH
        try:
            await self.catalog.set_product_visibility(tracked.product_id, visible)
        except MutationError as e:
            logger.error(f"Failed to {transition.value} product {tracked.product_id}: {e}")
            return False

        tracked.is_hidden = not visible
        await self.store.save_tracked_product(tracked)
        logger.info(f"Product {tracked.product_id} {'republished' if visible else 'hidden'} for store {tracked.store_id}")
        return True

    async def evaluate(
        self,
        account: StoreAccount,
        tracked: TrackedProduct,
        aggregate: int,
        override: Optional[ProductOverride] = None,
    ) -> VisibilityTransition:
        """Decide and apply. Returns the transition that was applied, or NONE."""
        transition = self.decide(account, tracked, aggregate, override)
        if await self.apply(tracked, transition):
            return transition
        return VisibilityTransition.NONE
