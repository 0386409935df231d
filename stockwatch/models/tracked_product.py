# stockwatch/models/tracked_product.py
"""
Product-level stock record.

One row per product per store (never per variant). ``current_quantity`` is the
sum of all variant quantities as last observed from the catalog.

``updated_at`` is written explicitly by reconciliation and catalog sync only;
quota enforcement stamps ``deactivated_at`` instead so that the
most-recently-updated ordering it relies on stays stable across runs.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Index

from stockwatch.core.enums import InventoryStatus, VisibilityState
from stockwatch.core.utils import utc_now
from stockwatch.database import Base


class TrackedProduct(Base):
    __tablename__ = "tracked_products"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(64), nullable=False)  # Numeric catalog id, stored as text

    product_title = Column(String(512), nullable=True)
    sku = Column(String(2048), nullable=True)  # Combined variant SKUs, display only

    current_quantity = Column(Integer, nullable=False, default=0)
    previous_quantity = Column(Integer, nullable=False, default=0)
    inventory_status = Column(String(20), nullable=False, default=InventoryStatus.PENDING.value, index=True)
    is_hidden = Column(Boolean, nullable=False, default=False)

    last_checked_at = Column(DateTime(timezone=True), nullable=True)
    last_alert_sent_at = Column(DateTime(timezone=True), nullable=True)
    deactivated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("store_id", "product_id", name="uq_tracked_products_store_product"),
        Index("ix_tracked_products_store_updated", "store_id", "updated_at"),
    )

    @property
    def visibility(self) -> VisibilityState:
        return VisibilityState.HIDDEN if self.is_hidden else VisibilityState.VISIBLE

    @property
    def is_deactivated(self) -> bool:
        return self.inventory_status == InventoryStatus.DEACTIVATED.value

    def __repr__(self):
        return (f"<TrackedProduct(store_id={self.store_id}, product_id='{self.product_id}', "
                f"qty={self.current_quantity}, status='{self.inventory_status}', hidden={self.is_hidden})>")
