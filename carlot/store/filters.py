from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple

from sqlalchemy import or_


@dataclass(frozen=True)
class Filter:
    """One predicate on a collection column: eq, neq, gte, lte, ilike."""
    column: str
    op: str
    value: Any


@dataclass(frozen=True)
class AnyILike:
    """Case-insensitive substring match on any of several columns."""
    columns: Tuple[str, ...]
    term: str


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def any_ilike(columns: Sequence[str], term: str) -> AnyILike:
    return AnyILike(tuple(columns), term)


def to_clause(model, predicate):
    if isinstance(predicate, AnyILike):
        pattern = f"%{predicate.term}%"
        return or_(*(getattr(model, name).ilike(pattern) for name in predicate.columns))

    column = getattr(model, predicate.column)
    if predicate.op == "eq":
        return column.is_(None) if predicate.value is None else column == predicate.value
    if predicate.op == "neq":
        return column.is_not(None) if predicate.value is None else column != predicate.value
    if predicate.op == "gte":
        return column >= predicate.value
    if predicate.op == "lte":
        return column <= predicate.value
    if predicate.op == "ilike":
        return column.ilike(predicate.value)
    raise ValueError(f"Unsupported filter operator: {predicate.op}")


def matches(row: Mapping[str, Any], criteria: Dict[str, Any]) -> bool:
    """Equality match used by change-feed subscriptions."""
    return all(row.get(key) == value for key, value in criteria.items())
