# stockwatch/services/alerts.py
"""
Alert dispatch: decides whether a stock alert is due, suppresses repeats inside
the dedup window, and fans out to the configured channels.

Rules, first match wins (none apply when the product is excluded from alerts):

1. out_of_stock - current == 0 and previous > 0
2. low_stock    - 0 < current <= threshold and previous > current
3. restock      - previous == 0 and current > 0, only when the store enabled
                  restock alerts and its plan includes them

The dedup check reads the latest AlertRecord for (store, product, kind) and
compares its timestamp with the window. It is best-effort: two concurrent
events for the same product can both pass it.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from stockwatch.core.config import get_settings
from stockwatch.core.enums import AlertChannel, AlertKind, PlanFeature
from stockwatch.core.plans import get_plan_quota
from stockwatch.core.utils import as_utc, utc_now
from stockwatch.integrations.base import ChatSender, EmailSender
from stockwatch.models import AlertRecord, ProductOverride, StoreAccount, TrackedProduct
from stockwatch.services.alert_messages import AlertContext, render_chat, render_email
from stockwatch.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    kind: Optional[AlertKind] = None
    suppressed: bool = False
    records: List[AlertRecord] = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        return any(record.delivered for record in self.records)


class AlertDispatcher:

    def __init__(
        self,
        store: InventoryStore,
        email_sender: Optional[EmailSender] = None,
        chat_sender: Optional[ChatSender] = None,
        dedup_window_hours: Optional[int] = None,
    ):
        self.store = store
        self.email_sender = email_sender
        self.chat_sender = chat_sender
        if dedup_window_hours is None:
            dedup_window_hours = get_settings().ALERT_DEDUP_WINDOW_HOURS
        self.dedup_window = timedelta(hours=dedup_window_hours)

    def decide(
        self,
        account: StoreAccount,
        previous: int,
        current: int,
        threshold: int,
        override: Optional[ProductOverride] = None,
    ) -> Optional[AlertKind]:
        if override is not None and override.exclude_from_alerts:
            return None

        if current == 0 and previous > 0:
            return AlertKind.OUT_OF_STOCK

        if 0 < current <= threshold and previous > current:
            return AlertKind.LOW_STOCK

        if previous == 0 and current > 0:
            quota = get_plan_quota(account.plan)
            if account.restock_alerts_enabled and quota.allows(PlanFeature.RESTOCK_ALERTS):
                return AlertKind.RESTOCK

        return None

    async def is_duplicate(self, store_id: int, product_id: str, kind: AlertKind) -> bool:
        """Whether an alert of this same kind went out for the product within the dedup window."""
        latest = await self.store.latest_alert(store_id, product_id, kind.value)
        if latest is None or latest.sent_at is None:
            return False
        return as_utc(latest.sent_at) > utc_now() - self.dedup_window

    async def dispatch(
        self,
        account: StoreAccount,
        tracked: TrackedProduct,
        previous: int,
        current: int,
        threshold: int,
        override: Optional[ProductOverride] = None,
        hidden: bool = False,
        republished: bool = False,
    ) -> DispatchResult:
        kind = self.decide(account, previous, current, threshold, override)
        if kind is None:
            return DispatchResult()

        if await self.is_duplicate(account.id, tracked.product_id, kind):
            logger.info(f"Suppressing duplicate {kind.value} alert for product {tracked.product_id} (store {account.id})")
            return DispatchResult(kind=kind, suppressed=True)

        context = AlertContext(
            kind=kind,
            shop_domain=account.shop_domain,
            product_id=tracked.product_id,
            product_title=tracked.product_title or tracked.product_id,
            sku=tracked.sku,
            quantity=current,
            threshold=threshold,
            hidden=hidden,
            republished=republished,
        )
        result = DispatchResult(kind=kind)

        destination = account.alert_email
        if account.email_notifications and destination and self.email_sender is not None:
            result.records.append(await self._send_email(account, context, destination))

        quota = get_plan_quota(account.plan)
        if (account.chat_notifications and account.chat_webhook_url
                and quota.allows(PlanFeature.CHAT_NOTIFICATIONS) and self.chat_sender is not None):
            result.records.append(await self._send_chat(account, context))

        if result.delivered:
            tracked.last_alert_sent_at = utc_now()
            await self.store.save_tracked_product(tracked)

        if not result.records:
            logger.debug(f"{kind.value} alert for product {tracked.product_id} had no enabled channel")

        return result

    async def _send_email(self, account: StoreAccount, context: AlertContext, destination: str) -> AlertRecord:
        rendered = render_email(context)
        error = None
        try:
            delivered = await self.email_sender.send(destination, rendered["subject"], rendered["body"], html=rendered["html"])
            if not delivered:
                error = "Email delivery failed"
        except Exception as e:
            logger.error(f"Email alert for product {context.product_id} failed: {e}", exc_info=True)
            delivered = False
            error = str(e)

        return await self._record(account, context, AlertChannel.EMAIL, delivered, error, rendered["body"])

    async def _send_chat(self, account: StoreAccount, context: AlertContext) -> AlertRecord:
        payload = render_chat(context)
        error = None
        try:
            delivered = await self.chat_sender.send(account.chat_webhook_url, payload)
            if not delivered:
                error = "Chat delivery failed"
        except Exception as e:
            logger.error(f"Chat alert for product {context.product_id} failed: {e}", exc_info=True)
            delivered = False
            error = str(e)

        return await self._record(account, context, AlertChannel.CHAT, delivered, error, payload["text"])

    async def _record(
        self,
        account: StoreAccount,
        context: AlertContext,
        channel: AlertChannel,
        delivered: bool,
        error: Optional[str],
        message: str,
    ) -> AlertRecord:
        record = AlertRecord(
            store_id=account.id,
            product_id=context.product_id,
            product_title=context.product_title,
            alert_kind=context.kind.value,
            channel=channel.value,
            quantity_at_alert=context.quantity,
            threshold_at_alert=context.threshold,
            delivered=delivered,
            error=error,
            message=message,
            sent_at=utc_now(),
        )
        await self.store.add_alert_record(record)
        if delivered:
            logger.info(f"{context.kind.value} alert sent via {channel.value} for product {context.product_id}")
        else:
            logger.warning(f"{context.kind.value} alert via {channel.value} not delivered for product {context.product_id}: {error}")
        return record
