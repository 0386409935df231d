"""
Interfaces for the external collaborators the inventory core talks to.

Services receive implementations of these by injection so reconciliation,
visibility and alerting logic can be exercised without network calls.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from stockwatch.schemas.catalog import CatalogProduct


class CatalogGateway(ABC):
    """Source of truth for products, variants and stock quantities."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[CatalogProduct]:
        """Fetch one product with all variants. None if it no longer exists.

        Raises UpstreamFetchError when the catalog can't be reached.
        """
        pass

    @abstractmethod
    async def list_products(self, page_size: int, since_id: Optional[str] = None) -> List[CatalogProduct]:
        """Fetch one page of products ordered by id, starting after ``since_id``."""
        pass

    @abstractmethod
    async def set_product_visibility(self, product_id: str, visible: bool) -> None:
        """Publish (ACTIVE) or hide (DRAFT) a product. Raises MutationError on failure."""
        pass


class EmailSender(ABC):
    @abstractmethod
    async def send(self, to: str, subject: str, body: str, html: Optional[str] = None) -> bool:
        """Deliver one email. Returns False on failure."""
        pass


class ChatSender(ABC):
    @abstractmethod
    async def send(self, webhook_url: str, message: Dict[str, Any]) -> bool:
        """Post one message to an incoming-webhook URL. Returns False on failure."""
        pass
