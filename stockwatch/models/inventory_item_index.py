# stockwatch/models/inventory_item_index.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from stockwatch.core.utils import utc_now
from stockwatch.database import Base


class InventoryItemIndex(Base):
    """
    Maps an inventory item id to the product/variant that owns it.

    A cache for O(1) webhook resolution, never authoritative: the product
    behind an entry may have been deleted or had the variant removed.
    """
    __tablename__ = "inventory_item_index"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(String(64), nullable=False)
    product_id = Column(String(64), nullable=False, index=True)
    variant_id = Column(String(64), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("store_id", "inventory_item_id", name="uq_inventory_item_index_store_item"),
    )

    def __repr__(self):
        return (f"<InventoryItemIndex(store_id={self.store_id}, item='{self.inventory_item_id}', "
                f"product='{self.product_id}', variant='{self.variant_id}')>")
