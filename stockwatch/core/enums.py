"""
Shared enums and constants used across the application.
"""

from enum import Enum


class PlanTier(str, Enum):
    FREE = "free"
    PRO = "pro"

    @classmethod
    def parse(cls, value) -> "PlanTier":
        """Unknown or missing tiers are treated as the free plan."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.FREE


class InventoryStatus(str, Enum):
    """Product-level stock classification stored on tracked products"""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    DEACTIVATED = "deactivated"  # Over the plan quota; not reconciled
    PENDING = "pending"          # Reactivated; next event recomputes


class VisibilityState(str, Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"


class VisibilityTransition(str, Enum):
    HIDE = "hide"
    REPUBLISH = "republish"
    NONE = "none"


class AlertKind(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    RESTOCK = "restock"


class AlertChannel(str, Enum):
    EMAIL = "email"
    CHAT = "chat"


class PlanFeature(str, Enum):
    CHAT_NOTIFICATIONS = "chat_notifications"
    RESTOCK_ALERTS = "restock_alerts"


class WebhookOutcome(str, Enum):
    """Result of handling one inbound inventory event"""
    PROCESSED = "processed"
    UNTRACKED = "untracked"
    DEACTIVATED = "deactivated"
    STORE_NOT_FOUND = "store_not_found"
    UPSTREAM_ERROR = "upstream_error"
    IGNORED = "ignored"
    ERROR = "error"
