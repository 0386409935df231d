# File: stockwatch/schemas/results.py
"""
Result DTOs returned by the out-of-band operations (quota enforcement,
catalog sync, reset) and serialised by the admin routes.
"""

from typing import Optional

from pydantic import BaseModel


class EnforcementResult(BaseModel):
    store_id: int
    plan: str
    max_allowed: Optional[int]  # None when the plan is unlimited
    active_count: int
    deactivated_count: int = 0
    reactivated_count: int = 0
    message: str


class SyncResult(BaseModel):
    store_id: int
    products_seen: int = 0
    created: int = 0
    updated: int = 0
    deactivated: int = 0
    indexed_items: int = 0


class ResetResult(BaseModel):
    store_id: int
    tracked_products: int = 0
    overrides: int = 0
    index_entries: int = 0
    alert_records: int = 0
