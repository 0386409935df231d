"""
Utility functions for the application.
"""
import re
from datetime import datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime read back from the database to an aware UTC value.

    Some drivers (sqlite) drop tzinfo on round trip; naive values are stored as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


_GID_PATTERN = re.compile(r"^gid://shopify/\w+/(\d+)$")


def legacy_id(value: Union[str, int, None]) -> Optional[str]:
    """
    Reduce a Shopify identifier to its numeric legacy form.

    "gid://shopify/Product/123" -> "123", 123 -> "123".
    """
    if value is None:
        return None
    text = str(value).strip()
    match = _GID_PATTERN.match(text)
    if match:
        return match.group(1)
    return text or None


def product_gid(product_id: Union[str, int]) -> str:
    return f"gid://shopify/Product/{legacy_id(product_id)}"


def normalize_shop_domain(shop: Optional[str]) -> Optional[str]:
    """Lowercase and strip scheme/trailing slash from a shop domain header value."""
    if not shop:
        return None
    domain = shop.strip().lower()
    domain = re.sub(r"^https?://", "", domain)
    return domain.rstrip("/") or None
