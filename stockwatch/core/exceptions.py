class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class AuthenticationError(BaseServiceError):
    """Raised when an inbound webhook signature is missing or invalid."""
    pass

class StoreNotFoundError(BaseServiceError):
    """Raised when no active store account matches the shop domain or id."""
    pass

class UnresolvedItemError(BaseServiceError):
    """Raised when no product in the catalog owns an inventory item.

    Not a failure for the caller: the event concerns a product we don't track.
    """

    def __init__(self, inventory_item_id: str, store_id=None):
        self.inventory_item_id = str(inventory_item_id)
        self.store_id = store_id
        super().__init__(f"No product owns inventory item {inventory_item_id}")

class ShopifyAPIError(BaseServiceError):
    """Base exception for catalog API errors."""
    pass

class UpstreamFetchError(ShopifyAPIError):
    """Raised when product or variant data cannot be fetched from the catalog."""
    pass

class MutationError(ShopifyAPIError):
    """Raised when a product visibility change is rejected or fails."""
    pass

class NotificationError(BaseServiceError):
    """Raised when an alert cannot be delivered on a channel."""

    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(f"{channel}: {message}")
