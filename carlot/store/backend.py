import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carlot.models import DropdownSetting, Message, Profile, Task, Vehicle, VehicleArbRecord
from carlot.store.filters import to_clause
from carlot.store.notifications import Change, ChangeFeed, Subscription, change_feed

logger = logging.getLogger(__name__)

TABLES = {
    "profiles": Profile,
    "vehicles": Vehicle,
    "tasks": Task,
    "vehicle_arb_records": VehicleArbRecord,
    "messages": Message,
    "dropdown_settings": DropdownSetting,
}


class StoreError(Exception):
    """Raised when the backend store fails or is asked for something it does not hold."""


class DuplicateRowError(StoreError):
    """A write violated an integrity constraint, typically a duplicate key."""


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def row_to_dict(row) -> Dict[str, Any]:
    """Serializes an ORM row, honouring ``__hidden__`` and ``__embedded__``."""
    hidden = getattr(row, "__hidden__", ())
    data = {
        column.key: _plain(getattr(row, column.key))
        for column in row.__table__.columns
        if column.key not in hidden
    }
    for name, fields in getattr(row, "__embedded__", {}).items():
        related = getattr(row, name)
        data[name] = {f: _plain(getattr(related, f)) for f in fields} if related is not None else None
    return data


class BackendStore:
    """
    Generic query/mutation interface over the named collections.

    Every method performs a single statement (plus commit for writes) and
    returns plain dicts, so callers never hold ORM instances. Writes publish
    a ``Change`` on the feed after they are committed.
    """

    def __init__(self, db: AsyncSession, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.feed = feed if feed is not None else change_feed

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown collection: {table}")

    async def _reload(self, row) -> None:
        await self.db.refresh(row)
        embedded = list(getattr(row, "__embedded__", {}))
        if embedded:
            await self.db.refresh(row, attribute_names=embedded)

    async def select(
        self,
        table: str,
        filters: Sequence = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        model = self._model(table)
        stmt = select(model).where(*(to_clause(model, f) for f in filters))
        if order_by:
            column = getattr(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        return [row_to_dict(row) for row in result.unique().scalars().all()]

    async def select_one(self, table: str, filters: Sequence = ()) -> Optional[Dict[str, Any]]:
        rows = await self.select(table, filters, limit=1)
        return rows[0] if rows else None

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        model = self._model(table)
        try:
            row = await self.db.get(model, row_id)
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        return row_to_dict(row) if row is not None else None

    async def count(self, table: str, filters: Sequence = ()) -> int:
        model = self._model(table)
        stmt = select(func.count()).select_from(model).where(*(to_clause(model, f) for f in filters))
        try:
            return (await self.db.execute(stmt)).scalar() or 0
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    async def insert(self, table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        model = self._model(table)
        row = model(**values)
        self.db.add(row)
        try:
            await self.db.commit()
            await self._reload(row)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateRowError(str(e)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(str(e)) from e

        data = row_to_dict(row)
        await self.feed.publish(Change(table=table, event="INSERT", new=data))
        return data

    async def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Applies ``values`` to one row; returns None when the row does not exist."""
        model = self._model(table)
        try:
            row = await self.db.get(model, row_id)
            if row is None:
                return None
            old = row_to_dict(row)
            for key, value in values.items():
                setattr(row, key, value)
            await self.db.commit()
            await self._reload(row)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(str(e)) from e

        data = row_to_dict(row)
        await self.feed.publish(Change(table=table, event="UPDATE", new=data, old=old))
        return data

    def subscribe(self, table: str, criteria: Dict[str, Any], listener) -> Subscription:
        self._model(table)
        return self.feed.subscribe(table, criteria, listener)
