# stockwatch/routes/admin.py
"""
Operator routes for a single store: plan changes and quota enforcement,
catalog sync, product reset. Protected by HTTP Basic auth.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from stockwatch.core.exceptions import ShopifyAPIError, StoreNotFoundError
from stockwatch.core.security import require_auth
from stockwatch.dependencies import get_catalog_factory, get_inventory_store
from stockwatch.models import StoreAccount
from stockwatch.schemas.results import EnforcementResult, ResetResult, SyncResult
from stockwatch.services.catalog_sync import CatalogSyncService
from stockwatch.services.inventory_store import InventoryStore
from stockwatch.services.quota import PlanQuotaEnforcer
from stockwatch.services.store_lifecycle import StoreLifecycleService
from stockwatch.services.webhook_processor import CatalogFactory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/stores", tags=["admin"], dependencies=[require_auth()])


class PlanChangeRequest(BaseModel):
    plan: Optional[str] = None  # None re-enforces the current plan


async def _active_store(shop: str, store: InventoryStore) -> StoreAccount:
    try:
        return await StoreLifecycleService(store).get_active_store(shop)
    except StoreNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{shop}/plan", response_model=EnforcementResult)
async def change_plan(
    shop: str,
    request: Optional[PlanChangeRequest] = None,
    store: InventoryStore = Depends(get_inventory_store),
):
    account = await _active_store(shop, store)
    enforcer = PlanQuotaEnforcer(store)

    if request is not None and request.plan:
        result = await enforcer.change_plan(account, request.plan)
    else:
        result = await enforcer.enforce(account)

    await store.commit()
    return result


@router.post("/{shop}/sync", response_model=SyncResult)
async def sync_catalog(
    shop: str,
    store: InventoryStore = Depends(get_inventory_store),
    catalog_factory: CatalogFactory = Depends(get_catalog_factory),
):
    account = await _active_store(shop, store)
    service = CatalogSyncService(store, catalog_factory(account))

    try:
        result = await service.sync(account)
    except ShopifyAPIError as e:
        await store.rollback()
        logger.error(f"Catalog sync for {account.shop_domain} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Catalog sync failed: {e}")

    await store.commit()
    return result


@router.post("/{shop}/reset", response_model=ResetResult)
async def reset_products(shop: str, store: InventoryStore = Depends(get_inventory_store)):
    account = await _active_store(shop, store)
    result = await StoreLifecycleService(store).reset_products(account)
    await store.commit()
    return result
