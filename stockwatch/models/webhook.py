# stockwatch/models/webhook.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, Boolean

from stockwatch.core.utils import utc_now
from stockwatch.database import Base


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, nullable=True, index=True)
    topic = Column(String(100), nullable=False)  # e.g. 'inventory_levels/update'
    payload = Column(JSON)
    processed = Column(Boolean, default=False, nullable=False)
    outcome = Column(String(30), nullable=True)  # WebhookOutcome value
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return f"<WebhookEvent(id={self.id}, topic='{self.topic}', processed={self.processed}, outcome='{self.outcome}')>"
