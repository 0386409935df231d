import base64
import hashlib
import hmac
import json

import pytest
from fastapi.testclient import TestClient

from stockwatch.core.config import get_settings
from stockwatch.core.enums import WebhookOutcome
from stockwatch.dependencies import (
    get_catalog_factory,
    get_chat_notifier,
    get_email_notifier,
    get_inventory_store,
)
from stockwatch.main import app
from tests.mocks import make_product, make_store, make_tracked

SHOP = "test-shop.myshopify.com"


def sign(body: bytes, secret: str = None) -> str:
    secret = secret or get_settings().webhook_secret
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


def headers(body: bytes, topic: str = "inventory_levels/update", shop: str = SHOP, signature=None):
    result = {
        "Content-Type": "application/json",
        "X-Shopify-Hmac-Sha256": signature if signature is not None else sign(body),
        "X-Shopify-Topic": topic,
    }
    if shop:
        result["X-Shopify-Shop-Domain"] = shop
    return result


@pytest.fixture
def account(memory_store):
    store = make_store(shop_domain=SHOP)
    store.id = 1000
    memory_store.stores[store.id] = store
    return store


@pytest.fixture
def test_client(memory_store, catalog, email_sender, chat_sender):
    """Provide a test client with in-memory collaborators"""
    app.dependency_overrides[get_inventory_store] = lambda: memory_store
    app.dependency_overrides[get_catalog_factory] = lambda: (lambda account: catalog)
    app.dependency_overrides[get_email_notifier] = lambda: email_sender
    app.dependency_overrides[get_chat_notifier] = lambda: chat_sender
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_inventory_webhook_processes_event(test_client, memory_store, catalog, account):
    catalog.add(make_product(100, (1, 11, 0, "A")))
    memory_store.tracked.append(make_tracked(account.id, "100", quantity=3, id=1))
    body = json.dumps({"inventory_item_id": 11, "location_id": 1, "available": 0}).encode()

    response = test_client.post("/webhooks/inventory", content=body, headers=headers(body))

    assert response.status_code == 200
    assert response.json()["outcome"] == WebhookOutcome.PROCESSED.value
    assert memory_store.tracked[0].current_quantity == 0
    assert memory_store.tracked[0].is_hidden is True


def test_bad_signature_is_401(test_client, memory_store, account):
    body = b'{"inventory_item_id": 11}'

    response = test_client.post("/webhooks/inventory", content=body, headers=headers(body, signature=sign(body, "wrong")))

    assert response.status_code == 401
    assert memory_store.webhook_events == []


def test_missing_signature_is_401(test_client, account):
    body = b'{"inventory_item_id": 11}'
    request_headers = headers(body)
    del request_headers["X-Shopify-Hmac-Sha256"]

    response = test_client.post("/webhooks/inventory", content=body, headers=request_headers)

    assert response.status_code == 401


def test_malformed_json_is_acknowledged(test_client, account):
    body = b'{"inventory_item_id": '

    response = test_client.post("/webhooks/inventory", content=body, headers=headers(body))

    assert response.status_code == 200
    assert response.json()["outcome"] == WebhookOutcome.IGNORED.value


def test_missing_shop_header_is_acknowledged(test_client, account):
    body = b'{"inventory_item_id": 11}'

    response = test_client.post("/webhooks/inventory", content=body, headers=headers(body, shop=None))

    assert response.status_code == 200
    assert response.json()["outcome"] == WebhookOutcome.IGNORED.value


def test_untracked_item_is_acknowledged(test_client, catalog, account):
    body = b'{"inventory_item_id": 424242}'

    response = test_client.post("/webhooks/inventory", content=body, headers=headers(body))

    assert response.status_code == 200
    assert response.json()["outcome"] == WebhookOutcome.UNTRACKED.value


def test_processing_error_still_returns_200(test_client, mocker, account):
    mocker.patch(
        "stockwatch.services.webhook_processor.InventoryWebhookProcessor._handle",
        side_effect=RuntimeError("database went away"),
    )
    body = b'{"inventory_item_id": 11}'

    response = test_client.post("/webhooks/inventory", content=body, headers=headers(body))

    assert response.status_code == 200
    assert response.json()["outcome"] == WebhookOutcome.ERROR.value


def test_app_uninstalled_soft_deletes(test_client, memory_store, account):
    memory_store.tracked.append(make_tracked(account.id, "100", id=1))
    body = json.dumps({"id": 1, "myshopify_domain": SHOP}).encode()

    response = test_client.post("/webhooks/app-uninstalled", content=body, headers=headers(body, topic="app/uninstalled"))

    assert response.status_code == 200
    assert response.json()["outcome"] == WebhookOutcome.PROCESSED.value
    assert account.uninstalled_at is not None
    assert memory_store.tracked == []
    assert memory_store.commits == 1


def test_health(test_client):
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
