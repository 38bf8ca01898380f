"""In-process change feed for store rows.

Writes through ``BackendStore`` publish a ``Change``; subscribers register a
table, an equality predicate and an async callback and get back a
``Subscription`` handle that must be released exactly once.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from carlot.store.filters import matches

logger = logging.getLogger(__name__)

Listener = Callable[["Change"], Awaitable[None]]


@dataclass(frozen=True)
class Change:
    table: str
    event: str  # INSERT | UPDATE | DELETE
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)


class Subscription:
    """Handle for one registered listener; ``unsubscribe`` is idempotent."""

    def __init__(self, feed: Optional["ChangeFeed"], table: str, criteria: Dict[str, Any], listener: Listener):
        self._feed = feed
        self.table = table
        self.criteria = dict(criteria)
        self.listener = listener

    @property
    def active(self) -> bool:
        return self._feed is not None

    def unsubscribe(self) -> None:
        if self._feed is None:
            return
        feed, self._feed = self._feed, None
        feed._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.unsubscribe()
        return False


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscription]] = defaultdict(list)

    def subscribe(self, table: str, criteria: Dict[str, Any], listener: Listener) -> Subscription:
        subscription = Subscription(self, table, criteria, listener)
        self._subscribers[table].append(subscription)
        logger.debug("Subscribed to %s changes where %s", table, criteria)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscribers.get(subscription.table, []):
            self._subscribers[subscription.table].remove(subscription)

    def subscriber_count(self, table: Optional[str] = None) -> int:
        if table is not None:
            return len(self._subscribers.get(table, []))
        return sum(len(subs) for subs in self._subscribers.values())

    async def publish(self, change: Change) -> None:
        for subscription in list(self._subscribers.get(change.table, [])):
            if not subscription.active:
                continue
            # an UPDATE can move a row out of the predicate; notify on either side
            if not (matches(change.new, subscription.criteria) or matches(change.old, subscription.criteria)):
                continue
            try:
                await subscription.listener(change)
            except Exception:
                # a failing listener must not fail the write that triggered it
                logger.exception("Change listener for %s failed", change.table)


# Global feed instance
change_feed = ChangeFeed()
