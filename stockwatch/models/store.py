# stockwatch/models/store.py
"""
Store account model: one row per installed shop (tenant).

Holds the plan tier, notification configuration and the auto-hide /
auto-republish feature flags. Uninstall soft-deletes the row by stamping
``uninstalled_at``; tracking rows are removed by the store lifecycle service.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from sqlalchemy.sql import func

from stockwatch.core.enums import PlanTier
from stockwatch.core.utils import utc_now
from stockwatch.database import Base


class StoreAccount(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True)
    shop_domain = Column(String(255), nullable=False, unique=True, index=True)
    access_token = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)  # Shop contact address

    # Subscription
    plan = Column(String(20), nullable=False, default=PlanTier.FREE.value)

    # Notification configuration
    email_notifications = Column(Boolean, nullable=False, default=True)
    notification_email = Column(String(255), nullable=True)
    chat_notifications = Column(Boolean, nullable=False, default=False)
    chat_webhook_url = Column(String(2048), nullable=True)
    restock_alerts_enabled = Column(Boolean, nullable=False, default=False)
    low_stock_threshold = Column(Integer, nullable=False, default=5)

    # Feature flags
    auto_hide_enabled = Column(Boolean, nullable=False, default=True)
    auto_republish_enabled = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
    uninstalled_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_stores_plan", "plan"),
    )

    @property
    def plan_tier(self) -> PlanTier:
        return PlanTier.parse(self.plan)

    @property
    def is_active(self) -> bool:
        return self.uninstalled_at is None

    @property
    def alert_email(self):
        """Destination for email alerts: explicit notification address, else the shop contact."""
        return self.notification_email or self.email

    def __repr__(self):
        return f"<StoreAccount(id={self.id}, shop_domain='{self.shop_domain}', plan='{self.plan}')>"
