# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""In-process event bus for outbound notifications.

Services publish what happened; collaborators such as the email sender
subscribe. A failing subscriber is logged and never affects the publisher.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class AppEvent(str, Enum):
    """Application events that collaborators can subscribe to."""

    # Account events
    USER_CREATED = "user.created"
    USER_ROLE_CHANGED = "user.role_changed"
    USER_DELETED = "user.deleted"
    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"

    # Credential events
    CREDENTIAL_CREATED = "credential.created"
    CREDENTIAL_UPDATED = "credential.updated"
    CREDENTIAL_DELETED = "credential.deleted"
    CREDENTIALS_BULK_DELETED = "credential.bulk_deleted"
    CREDENTIAL_DISCLOSED = "credential.disclosed"
    CREDENTIAL_SHARED = "credential.shared"
    CREDENTIAL_SHARE_REVOKED = "credential.share_revoked"

    # Invoice events
    INVOICE_CREATED = "invoice.created"
    INVOICE_UPDATED = "invoice.updated"
    INVOICE_APPROVED = "invoice.approved"
    INVOICE_REJECTED = "invoice.rejected"
    INVOICE_DELETED = "invoice.deleted"
    INVOICES_CLEARED = "invoice.cleared"


@dataclass
class EventPayload:
    """Payload for an application event."""

    event_type: AppEvent
    timestamp: datetime
    data: dict[str, Any]


# Type alias for event handlers
EventHandler = Callable[[EventPayload], Any]


class EventBus:
    """Central event bus for application-wide events."""

    def __init__(self) -> None:
        self._handlers: dict[AppEvent, list[tuple[str | None, EventHandler]]] = (
            defaultdict(list)
        )
        self._async_handlers: dict[
            AppEvent, list[tuple[str | None, EventHandler]]
        ] = defaultdict(list)

    def subscribe(
        self,
        event_type: AppEvent,
        handler: EventHandler,
        subscriber: str | None = None,
    ) -> None:
        """Subscribe to an event.

        Args:
            event_type: Event type to subscribe to
            handler: Function to call when event fires (sync or async)
            subscriber: Name of the subscribing collaborator (for unsubscribe)
        """
        if asyncio.iscoroutinefunction(handler):
            self._async_handlers[event_type].append((subscriber, handler))
        else:
            self._handlers[event_type].append((subscriber, handler))

        logger.debug(f"Subscribed {subscriber or 'anonymous'} to {event_type.value}")

    def unsubscribe(
        self,
        event_type: AppEvent,
        handler: EventHandler,
        subscriber: str | None = None,
    ) -> None:
        """Remove a single handler registration."""
        entry = (subscriber, handler)
        if entry in self._handlers[event_type]:
            self._handlers[event_type].remove(entry)
        if entry in self._async_handlers[event_type]:
            self._async_handlers[event_type].remove(entry)

    def unsubscribe_all(self, subscriber: str) -> None:
        """Remove every handler registered under ``subscriber``."""
        for registry in (self._handlers, self._async_handlers):
            for event_type in list(registry.keys()):
                registry[event_type] = [
                    (name, handler)
                    for name, handler in registry[event_type]
                    if name != subscriber
                ]

    def clear(self) -> None:
        """Drop all subscriptions."""
        self._handlers.clear()
        self._async_handlers.clear()

    async def publish(self, event_type: AppEvent, data: dict[str, Any]) -> None:
        """Publish an event to sync and async subscribers."""
        payload = EventPayload(
            event_type=event_type, timestamp=datetime.utcnow(), data=data
        )

        for subscriber, handler in self._handlers.get(event_type, []):
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event_type.value} "
                    f"(subscriber: {subscriber}): {e}"
                )

        for subscriber, handler in self._async_handlers.get(event_type, []):
            try:
                await handler(payload)
            except Exception as e:
                logger.error(
                    f"Error in async event handler for {event_type.value} "
                    f"(subscriber: {subscriber}): {e}"
                )

    def publish_sync(self, event_type: AppEvent, data: dict[str, Any]) -> None:
        """Publish an event from sync code (sync handlers only).

        Async handlers are skipped with a warning.
        """
        payload = EventPayload(
            event_type=event_type, timestamp=datetime.utcnow(), data=data
        )

        for subscriber, handler in self._handlers.get(event_type, []):
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event_type.value} "
                    f"(subscriber: {subscriber}): {e}"
                )

        if self._async_handlers.get(event_type):
            logger.warning(
                f"Event {event_type.value} has async handlers that were "
                "not called due to sync publish"
            )

    def get_subscriber_count(self, event_type: AppEvent) -> int:
        sync_count = len(self._handlers.get(event_type, []))
        async_count = len(self._async_handlers.get(event_type, []))
        return sync_count + async_count


# Global event bus singleton
event_bus = EventBus()
