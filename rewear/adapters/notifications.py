from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from rewear import config

logger = logging.getLogger(__name__)


class NotificationRequestFail(Exception):
    ...


class AbstractNotificationSink(ABC):
    @abstractmethod
    async def notify(
        self,
        user_id: str,
        kind: str,
        title: str,
        message: str,
        related_id: str | None = None,
        related_type: str | None = None,
    ):
        raise NotImplementedError


class LoggingNotificationSink(AbstractNotificationSink):
    async def notify(self, user_id, kind, title, message, related_id=None, related_type=None):
        logger.info("notify %s [%s] %s - %s (%s:%s)", user_id, kind, title, message, related_type, related_id)


class HttpNotificationSink(AbstractNotificationSink):
    """
    Hands notifications over to the notification service.
    """

    def __init__(
        self,
        host: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = config.NOTIFICATION_SETTINGS
        self.transport = transport
        self.url = (host or settings.NOTIFICATION_HOST) + settings.NOTIFICATION_PATH
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT

    async def notify(self, user_id, kind, title, message, related_id=None, related_type=None):
        data = {
            "user_id": user_id,
            "type": kind,
            "title": title,
            "message": message,
            "related_id": related_id,
            "related_type": related_type,
        }
        try:
            async with httpx.AsyncClient(transport=self.transport) as cl:
                response = await cl.post(self.url, json=data, timeout=self.timeout)
                response.raise_for_status()  # If not in 200 ~ or 300 ~ range, raise exception.
        except httpx.HTTPError as e:
            logger.error(e)
            raise NotificationRequestFail("Notification Service Connection ERROR")
