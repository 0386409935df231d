from .memory_store import MemoryInventoryStore, make_override, make_store, make_tracked
from .mock_catalog import MockCatalog, make_product
from .mock_channels import MockChatSender, MockEmailSender
