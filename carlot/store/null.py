import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Mapping, Optional, Sequence

from carlot.core.environment import missing_env_vars
from carlot.store.notifications import Subscription

logger = logging.getLogger(__name__)


class NullStore:
    """
    Stand-in store for client contexts started without backend configuration.

    Reads come back empty, writes are dropped and subscriptions are inert, so
    a UI can still render instead of crashing on startup.
    """

    async def select(self, table: str, filters: Sequence = (), order_by: Optional[str] = None,
                     descending: bool = False, limit: Optional[int] = None,
                     offset: Optional[int] = None) -> List[Dict[str, Any]]:
        return []

    async def select_one(self, table: str, filters: Sequence = ()) -> Optional[Dict[str, Any]]:
        return None

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        return None

    async def count(self, table: str, filters: Sequence = ()) -> int:
        return 0

    async def insert(self, table: str, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        logger.warning("Dropping insert into %s: backend store is not configured", table)
        return None

    async def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        logger.warning("Dropping update of %s: backend store is not configured", table)
        return None

    def subscribe(self, table: str, criteria: Dict[str, Any], listener) -> Subscription:
        # already released: nothing will ever be published to it
        return Subscription(None, table, criteria, listener)


def create_client_store(session_factory=None, feed=None):
    """
    Returns a zero-argument callable producing an async context manager that
    yields a store.

    With the backend configured each call opens a fresh session; without it
    the missing variables are logged once and every call yields a ``NullStore``.
    """
    missing = missing_env_vars()
    if missing and session_factory is None:
        logger.error(f"Missing required environment variables: {', '.join(missing)}; using a no-op backend")

        @asynccontextmanager
        async def open_null_store():
            yield NullStore()

        return open_null_store

    from carlot.core.db import get_sessionmaker
    from carlot.store.backend import BackendStore

    factory = session_factory or get_sessionmaker()

    @asynccontextmanager
    async def open_store():
        async with factory() as session:
            yield BackendStore(session, feed)

    return open_store
