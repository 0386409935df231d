import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from stockwatch.core.config import get_webhook_secret
from stockwatch.core.enums import WebhookOutcome
from stockwatch.core.exceptions import AuthenticationError, StoreNotFoundError
from stockwatch.core.security import verify_webhook_signature
from stockwatch.dependencies import get_inventory_store, get_webhook_processor
from stockwatch.schemas.webhook import WebhookAck
from stockwatch.services.inventory_store import InventoryStore
from stockwatch.services.store_lifecycle import StoreLifecycleService
from stockwatch.services.webhook_processor import InventoryWebhookProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def verified_body(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    webhook_secret: str = Depends(get_webhook_secret),
) -> bytes:
    """Raw request body, once its signature has been checked against the shared secret."""
    body = await request.body()
    try:
        verify_webhook_signature(body, x_shopify_hmac_sha256, webhook_secret)
    except AuthenticationError as e:
        logger.warning(f"Rejected webhook {request.url.path}: {e}")
        raise HTTPException(status_code=401, detail=str(e))
    return body


def _parse_json(body: bytes) -> Optional[dict]:
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


@router.post("/inventory", response_model=WebhookAck)
async def inventory_webhook(
    body: bytes = Depends(verified_body),
    x_shopify_shop_domain: Optional[str] = Header(None),
    x_shopify_topic: Optional[str] = Header(None),
    processor: InventoryWebhookProcessor = Depends(get_webhook_processor),
):
    """
    inventory_levels/update receiver.

    Always answers 200 once the signature is valid; the outcome says what
    happened. Failures are logged, not surfaced, so the source doesn't retry
    events that can't succeed.
    """
    if not x_shopify_shop_domain:
        logger.warning("Inventory webhook without shop domain header")
        return WebhookAck(outcome=WebhookOutcome.IGNORED.value, message="Missing shop domain")

    payload = _parse_json(body)
    if payload is None:
        logger.warning(f"Malformed inventory webhook body from {x_shopify_shop_domain}")
        return WebhookAck(outcome=WebhookOutcome.IGNORED.value, message="Malformed JSON")

    try:
        return await processor.process(x_shopify_shop_domain, payload, topic=x_shopify_topic)
    except Exception as e:
        logger.error(f"Inventory webhook for {x_shopify_shop_domain} failed: {e}", exc_info=True)
        return WebhookAck(success=False, outcome=WebhookOutcome.ERROR.value, message="Processing failed")


@router.post("/app-uninstalled", response_model=WebhookAck)
async def app_uninstalled_webhook(
    body: bytes = Depends(verified_body),
    x_shopify_shop_domain: Optional[str] = Header(None),
    store: InventoryStore = Depends(get_inventory_store),
):
    shop = x_shopify_shop_domain
    if not shop:
        payload = _parse_json(body) or {}
        shop = payload.get("myshopify_domain") or payload.get("domain")

    service = StoreLifecycleService(store)
    try:
        result = await service.uninstall(shop)
    except StoreNotFoundError as e:
        logger.info(f"Uninstall webhook for unknown store: {e}")
        return WebhookAck(outcome=WebhookOutcome.STORE_NOT_FOUND.value, message=str(e))

    await store.commit()
    return WebhookAck(
        outcome=WebhookOutcome.PROCESSED.value,
        message=f"Store uninstalled; {result.tracked_products} tracked products removed",
    )
