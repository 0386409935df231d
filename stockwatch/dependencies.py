from typing import AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stockwatch.database import async_session
from stockwatch.integrations.base import ChatSender, EmailSender
from stockwatch.services.inventory_store import InventoryStore, SqlAlchemyInventoryStore
from stockwatch.services.notification_service import get_email_sender
from stockwatch.services.slack_service import get_chat_sender
from stockwatch.services.webhook_processor import CatalogFactory, InventoryWebhookProcessor, shopify_catalog_for


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_inventory_store(db: AsyncSession = Depends(get_db)) -> InventoryStore:
    return SqlAlchemyInventoryStore(db)


def get_catalog_factory() -> CatalogFactory:
    return shopify_catalog_for


def get_email_notifier() -> Optional[EmailSender]:
    return get_email_sender()


def get_chat_notifier() -> Optional[ChatSender]:
    return get_chat_sender()


async def get_webhook_processor(
    store: InventoryStore = Depends(get_inventory_store),
    catalog_factory: CatalogFactory = Depends(get_catalog_factory),
    email_sender: Optional[EmailSender] = Depends(get_email_notifier),
    chat_sender: Optional[ChatSender] = Depends(get_chat_notifier),
) -> InventoryWebhookProcessor:
    return InventoryWebhookProcessor(
        store,
        catalog_factory=catalog_factory,
        email_sender=email_sender,
        chat_sender=chat_sender,
    )
