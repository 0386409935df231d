# File: stockwatch/schemas/webhook.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from stockwatch.core.utils import legacy_id


class InventoryLevelPayload(BaseModel):
    """
    Body of an inventory_levels/update webhook.

    ``available`` is informational only; quantities are always re-read from
    the catalog.
    """
    model_config = ConfigDict(extra="ignore")

    inventory_item_id: str
    location_id: Optional[str] = None
    available: Optional[int] = None

    @field_validator("inventory_item_id", "location_id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return legacy_id(value)


class WebhookAck(BaseModel):
    success: bool = True
    outcome: str
    message: Optional[str] = None
