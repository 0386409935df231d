"""Chat alerts posted to a Slack incoming webhook."""

import logging
from typing import Any, Dict, Optional

import httpx

from stockwatch.core.config import get_settings
from stockwatch.core.enums import AlertChannel
from stockwatch.core.exceptions import NotificationError
from stockwatch.integrations.base import ChatSender

logger = logging.getLogger(__name__)


class SlackWebhookSender(ChatSender):

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout if timeout is not None else get_settings().CHAT_TIMEOUT_SECONDS
        self._transport = transport

    async def send(self, webhook_url: str, message: Dict[str, Any]) -> bool:
        try:
            await self._post(webhook_url, message)
        except NotificationError as e:
            logger.error(f"Slack send error: {e}")
            return False
        logger.info("Slack notification sent successfully")
        return True

    async def _post(self, webhook_url: str, message: Dict[str, Any]) -> None:
        if not webhook_url:
            raise NotificationError(AlertChannel.CHAT.value, "No webhook URL configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(webhook_url, json=message)
        except httpx.RequestError as e:
            raise NotificationError(AlertChannel.CHAT.value, f"Network error: {str(e)}")

        # Slack answers a plain "ok" on success
        if response.status_code != 200:
            raise NotificationError(
                AlertChannel.CHAT.value,
                f"Webhook returned HTTP {response.status_code}: {response.text[:200]}",
            )


def get_chat_sender() -> SlackWebhookSender:
    return SlackWebhookSender()
