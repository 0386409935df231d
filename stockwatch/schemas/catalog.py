# File: stockwatch/schemas/catalog.py
"""
Catalog data as returned by the commerce platform, reduced to what
resolution and reconciliation need.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockwatch.core.utils import legacy_id


class CatalogVariant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    sku: Optional[str] = None
    quantity: int = Field(0, alias="inventory_quantity")
    inventory_item_id: Optional[str] = None

    @field_validator("id", "inventory_item_id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return legacy_id(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value):
        return 0 if value is None else value


class CatalogProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str = ""
    status: Optional[str] = None  # active, draft, archived
    variants: List[CatalogVariant] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return legacy_id(value)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value):
        return value or ""

    def find_variant(self, inventory_item_id) -> Optional[CatalogVariant]:
        wanted = legacy_id(inventory_item_id)
        for variant in self.variants:
            if variant.inventory_item_id is not None and variant.inventory_item_id == wanted:
                return variant
        return None

    @property
    def total_quantity(self) -> int:
        return sum(variant.quantity for variant in self.variants)

    @property
    def combined_sku(self) -> str:
        return ", ".join(variant.sku for variant in self.variants if variant.sku)
