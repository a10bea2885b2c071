"""Outbound notifications sent after a workflow transition has committed.

Delivery is fire-and-forget: ``dispatch`` schedules a background task and
returns immediately. Failures are logged and never reach the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from asset_approvals.config import get_settings
from asset_approvals.models.enums import NotificationEvent

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """One message for one recipient. Template rendering happens downstream."""

    event_type: NotificationEvent
    recipient: str
    subject: str
    template_data: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class Notifier(Protocol):
    """Interface for outbound notification delivery."""

    async def send(self, notification: Notification) -> None:
        """Deliver a single notification. May raise on failure."""
        ...


class InMemoryNotifier:
    """Records notifications instead of delivering them. Used in development and tests."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        self.sent.append(notification)

    def clear(self) -> None:
        self.sent.clear()


class WebhookNotifier:
    """POSTs each notification as JSON to a configured webhook (e.g. an email relay)."""

    def __init__(self, url: str, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    async def send(self, notification: Notification) -> None:
        payload = notification.model_dump(mode="json")
        if self._client is not None:
            response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()


_notifier: Notifier | None = None
_pending: set[asyncio.Task[None]] = set()


def get_notifier() -> Notifier:
    """Return the configured notifier: webhook if a URL is set, in-memory otherwise."""
    global _notifier
    if _notifier is None:
        settings = get_settings()
        if settings.notification_webhook_url:
            _notifier = WebhookNotifier(
                settings.notification_webhook_url,
                timeout=settings.notification_timeout_seconds,
            )
        else:
            _notifier = InMemoryNotifier()
    return _notifier


def set_notifier(notifier: Notifier | None) -> None:
    """Override the notifier (for testing or production wiring). ``None`` resets to settings."""
    global _notifier
    _notifier = notifier


async def deliver(notifier: Notifier, notifications: list[Notification]) -> int:
    """Send every notification, logging and swallowing individual failures.

    Returns the number delivered successfully.
    """
    delivered = 0
    for notification in notifications:
        try:
            await notifier.send(notification)
        except Exception:
            logger.exception(
                "Notification delivery failed: event=%s recipient=%s",
                notification.event_type,
                notification.recipient,
            )
            continue
        delivered += 1
    return delivered


def dispatch(notifications: list[Notification], notifier: Notifier | None = None) -> asyncio.Task[None] | None:
    """Schedule delivery in the background without awaiting it."""
    if not notifications:
        return None
    target = notifier or get_notifier()

    async def _run() -> None:
        delivered = await deliver(target, notifications)
        logger.debug("Delivered %d/%d notifications", delivered, len(notifications))

    task = asyncio.get_running_loop().create_task(_run())
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def wait_for_pending_notifications() -> None:
    """Wait for every scheduled delivery to finish. Called on shutdown and in tests."""
    while _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)
