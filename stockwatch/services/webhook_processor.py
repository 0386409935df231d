"""
Processing of Shopify ``inventory_levels/update`` webhooks.

Per event: resolve the inventory item to its product, re-read authoritative
stock, reconcile the tracked product, then run the visibility state machine
and the alert dispatcher. Every accepted event is logged as a WebhookEvent
with its outcome.

This is the one place that turns service exceptions into acknowledged
outcomes. The webhook source retries on non-2xx, and retrying can't fix an
untracked item or a missing store, so those are acknowledged rather than
surfaced.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from stockwatch.core.enums import VisibilityTransition, WebhookOutcome
from stockwatch.core.exceptions import StoreNotFoundError, UnresolvedItemError, UpstreamFetchError
from stockwatch.core.utils import normalize_shop_domain, utc_now
from stockwatch.integrations.base import CatalogGateway, ChatSender, EmailSender
from stockwatch.models import StoreAccount, WebhookEvent
from stockwatch.schemas.webhook import InventoryLevelPayload, WebhookAck
from stockwatch.services.alerts import AlertDispatcher
from stockwatch.services.inventory_store import InventoryStore
from stockwatch.services.item_resolver import ItemResolver
from stockwatch.services.quota import PlanQuotaEnforcer
from stockwatch.services.reconciler import InventoryReconciler
from stockwatch.services.shopify.client import ShopifyCatalogClient
from stockwatch.services.visibility import VisibilityStateMachine

logger = logging.getLogger(__name__)

INVENTORY_TOPIC = "inventory_levels/update"

CatalogFactory = Callable[[StoreAccount], CatalogGateway]


def shopify_catalog_for(account: StoreAccount) -> CatalogGateway:
    return ShopifyCatalogClient(account.shop_domain, account.access_token)


class InventoryWebhookProcessor:

    def __init__(
        self,
        store: InventoryStore,
        catalog_factory: Optional[CatalogFactory] = None,
        email_sender: Optional[EmailSender] = None,
        chat_sender: Optional[ChatSender] = None,
    ):
        self.store = store
        self.catalog_factory = catalog_factory or shopify_catalog_for
        self.quota = PlanQuotaEnforcer(store)
        self.reconciler = InventoryReconciler(store, self.quota)
        self.alerts = AlertDispatcher(store, email_sender=email_sender, chat_sender=chat_sender)

    async def process(self, shop_domain: Optional[str], payload: Dict[str, Any], topic: Optional[str] = None) -> WebhookAck:
        topic = topic or INVENTORY_TOPIC
        if topic != INVENTORY_TOPIC:
            logger.info(f"Ignoring webhook topic {topic}")
            return WebhookAck(outcome=WebhookOutcome.IGNORED.value, message=f"Topic {topic} not handled")

        domain = normalize_shop_domain(shop_domain)
        try:
            account = await self._get_account(domain)
        except StoreNotFoundError as e:
            logger.warning(f"Inventory webhook for unknown store: {e}")
            return WebhookAck(outcome=WebhookOutcome.STORE_NOT_FOUND.value, message=str(e))

        event = WebhookEvent(
            store_id=account.id,
            topic=topic,
            payload=payload,
            processed=False,
            created_at=utc_now(),
        )
        await self.store.save_webhook_event(event)

        try:
            outcome, message = await self._handle(account, payload)
        except Exception:
            await self.store.rollback()
            raise

        event.processed = True
        event.outcome = outcome.value
        event.processed_at = utc_now()
        await self.store.save_webhook_event(event)
        await self.store.commit()

        return WebhookAck(outcome=outcome.value, message=message)

    async def _get_account(self, domain: Optional[str]) -> StoreAccount:
        if not domain:
            raise StoreNotFoundError("Missing shop domain")
        account = await self.store.get_store_by_domain(domain)
        if account is None:
            raise StoreNotFoundError(f"No active store for {domain}")
        return account

    async def _handle(self, account: StoreAccount, payload: Dict[str, Any]):
        try:
            level = InventoryLevelPayload.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Invalid inventory payload for {account.shop_domain}: {e.errors()}")
            return WebhookOutcome.IGNORED, "Invalid payload"

        catalog = self.catalog_factory(account)
        resolver = ItemResolver(self.store, catalog)
        visibility = VisibilityStateMachine(self.store, catalog)

        try:
            resolved = await resolver.resolve(account.id, level.inventory_item_id)
        except UnresolvedItemError as e:
            return WebhookOutcome.UNTRACKED, str(e)
        except UpstreamFetchError as e:
            logger.error(f"Catalog unavailable while resolving item {level.inventory_item_id} for {account.shop_domain}: {e}")
            return WebhookOutcome.UPSTREAM_ERROR, "Catalog unavailable"

        product = resolved.product
        override = await self.store.get_override(account.id, product.id)

        result = await self.reconciler.reconcile(account, product, override)
        if not result.should_continue:
            return WebhookOutcome.DEACTIVATED, f"Product {product.id} is deactivated by plan limits"

        transition = await visibility.evaluate(account, result.tracked, result.current_quantity, override)

        await self.alerts.dispatch(
            account,
            result.tracked,
            previous=result.previous_quantity,
            current=result.current_quantity,
            threshold=result.threshold,
            override=override,
            hidden=result.tracked.is_hidden,
            republished=transition == VisibilityTransition.REPUBLISH,
        )

        return WebhookOutcome.PROCESSED, (
            f"Product {product.id}: {result.previous_quantity} -> {result.current_quantity}"
        )
