"""
Client-side state containers.

Each hook owns the state a view renders (``is_loading``, ``error`` and the
data itself) and any change-feed subscription it needs. Fetches are never
cancelled; a generation counter makes sure only the latest request may
write state.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from carlot.client.api_client import ApiClient
from carlot.client.notifier import LoggingNotifier, Notifier
from carlot.services.message_service import unread_criteria
from carlot.store.backend import StoreError
from carlot.store.filters import eq
from carlot.store.notifications import Change, Subscription

logger = logging.getLogger(__name__)

DROPDOWN_LOAD_FAILED = "Failed to load dropdown options. Please try again."


class DropdownOptionsHook:
    def __init__(self, client: ApiClient, notifier: Optional[Notifier] = None):
        self.client = client
        self.notifier = notifier or LoggingNotifier()
        self.options: List[Dict[str, str]] = []
        self.is_loading = False
        self.error: Optional[str] = None
        self._inputs = None
        self._loaded = False
        self._generation = 0

    async def load(self, category: str, active_only: bool = True) -> List[Dict[str, str]]:
        inputs = (category, active_only)
        if inputs == self._inputs and self._loaded:
            return self.options

        self._inputs = inputs
        self._loaded = False
        self._generation += 1
        generation = self._generation

        if not category:
            self.is_loading = False
            return self.options

        self.is_loading = True
        self.error = None
        try:
            options = await self.client.get_dropdown_options(category, active_only)
        except Exception as e:
            # malformed bodies fail the same way as HTTP errors
            if generation != self._generation:
                return self.options
            logger.error(f"Error fetching dropdown options for {category}: {e}")
            self.error = str(e) or "Failed to load dropdown options"
            self.options = []
            self.notifier.error(DROPDOWN_LOAD_FAILED)
        else:
            if generation != self._generation:
                return self.options
            self.options = options
        self.is_loading = False
        self._loaded = True
        return self.options


class UnreadCountHook:
    """
    Live count of a user's unread messages.

    ``store_factory`` is a zero-argument callable returning an async context
    manager that yields a store (see ``create_client_store``); every fetch
    opens its own store so a long-lived hook never pins a session.
    """

    def __init__(self, store_factory: Callable[[], Any]):
        self.store_factory = store_factory
        self.user_id: Optional[str] = None
        self.unread_count = 0
        self._subscription: Optional[Subscription] = None
        self._generation = 0
        self._closed = False

    async def set_user(self, user_id: Optional[str]) -> None:
        self._release()
        self.user_id = None if self._closed else user_id
        if self.user_id is None:
            self.unread_count = 0
            return

        generation = self._generation
        await self.refresh()
        if generation != self._generation:
            return
        async with self.store_factory() as store:
            subscription = store.subscribe("messages", {"receiver_id": user_id}, self._on_change)
        # closed or switched user while subscribing
        if generation != self._generation:
            subscription.unsubscribe()
            return
        self._subscription = subscription

    async def _on_change(self, change: Change) -> None:
        await self.refresh()

    async def refresh(self) -> int:
        user_id, generation = self.user_id, self._generation
        if user_id is None:
            return self.unread_count
        try:
            async with self.store_factory() as store:
                filters = [eq(k, v) for k, v in unread_criteria(user_id).items()]
                count = await store.count("messages", filters)
        except StoreError:
            logger.warning(f"Could not fetch unread count for {user_id}", exc_info=True)
            return self.unread_count
        # the user may have changed while we were waiting
        if generation == self._generation:
            self.unread_count = count
        return self.unread_count

    async def mark_as_read(self, message_id: str) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        try:
            async with self.store_factory() as store:
                message = await store.get("messages", message_id)
                if message is None or message["receiver_id"] != user_id:
                    return False
                updated = await store.update("messages", message_id, {"read": True})
        except StoreError:
            logger.warning(f"Could not mark message {message_id} as read", exc_info=True)
            return False
        if updated is None:
            return False
        await self.refresh()
        return True

    def _release(self) -> None:
        self._generation += 1
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def close(self) -> None:
        self._closed = True
        self.user_id = None
        self._release()

    async def __aenter__(self) -> "UnreadCountHook":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
