from .store import StoreAccount
from .tracked_product import TrackedProduct
from .inventory_item_index import InventoryItemIndex
from .product_override import ProductOverride
from .alert_record import AlertRecord
from .webhook import WebhookEvent

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'StoreAccount',
    'TrackedProduct',
    'InventoryItemIndex',
    'ProductOverride',
    'AlertRecord',
    'WebhookEvent',
]
