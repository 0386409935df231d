# stockwatch/models/product_override.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint

from stockwatch.core.utils import utc_now
from stockwatch.database import Base


class ProductOverride(Base):
    """Per-product exclusions and threshold. Zero or one row per product."""
    __tablename__ = "product_overrides"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(64), nullable=False)

    custom_threshold = Column(Integer, nullable=True)  # None -> store default applies
    exclude_from_auto_hide = Column(Boolean, nullable=False, default=False)
    exclude_from_alerts = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("store_id", "product_id", name="uq_product_overrides_store_product"),
    )

    def __repr__(self):
        return (f"<ProductOverride(store_id={self.store_id}, product_id='{self.product_id}', "
                f"threshold={self.custom_threshold})>")
