# stockwatch/models/alert_record.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Index

from stockwatch.core.utils import utc_now
from stockwatch.database import Base


class AlertRecord(Base):
    """
    Append-only log of alert sends, one row per channel attempt.

    Serves both the merchant-facing audit trail and the dedup window lookup.
    No foreign key to stores: the audit trail outlives an uninstall.
    """
    __tablename__ = "alert_records"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, nullable=False, index=True)
    product_id = Column(String(64), nullable=False)
    product_title = Column(String(512), nullable=True)

    alert_kind = Column(String(20), nullable=False)   # low_stock, out_of_stock, restock
    channel = Column(String(20), nullable=False)      # email, chat
    quantity_at_alert = Column(Integer, nullable=False)
    threshold_at_alert = Column(Integer, nullable=True)

    delivered = Column(Boolean, nullable=False, default=True)
    error = Column(Text, nullable=True)
    message = Column(Text, nullable=True)

    sent_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_alert_records_dedup", "store_id", "product_id", "alert_kind", "sent_at"),
    )

    def __repr__(self):
        return (f"<AlertRecord(store_id={self.store_id}, product_id='{self.product_id}', "
                f"kind='{self.alert_kind}', channel='{self.channel}', delivered={self.delivered})>")
