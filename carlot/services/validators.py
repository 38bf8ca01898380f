"""
Validation layer for every write (and list filter) that reaches the store.

``validate_entity`` is the single entry point: it takes the kind of entity
and an arbitrary payload and always returns a ``ValidationResult``; it never
raises for malformed input. Violations are collected for every field at
once, one message per field.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from carlot.core.metrics import validation_failures_total
from carlot.exceptions import BadRequestError, ValidationError
from carlot.schemas.arb import ArbType
from carlot.schemas.task import TaskFilters, TaskInput, TaskUpdate
from carlot.schemas.vehicle import VehicleInput, VehicleStatus, VehicleUpdate


class EntityKind(str, Enum):
    VEHICLE = "vehicle"
    VEHICLE_UPDATE = "vehicle_update"
    TASK = "task"
    TASK_UPDATE = "task_update"
    TASK_FILTERS = "task_filters"


SCHEMAS: Dict[EntityKind, type[BaseModel]] = {
    EntityKind.VEHICLE: VehicleInput,
    EntityKind.VEHICLE_UPDATE: VehicleUpdate,
    EntityKind.TASK: TaskInput,
    EntityKind.TASK_UPDATE: TaskUpdate,
    EntityKind.TASK_FILTERS: TaskFilters,
}

# partial payloads keep only what the caller sent
_PARTIAL = {EntityKind.VEHICLE_UPDATE, EntityKind.TASK_UPDATE}
_SPARSE = {EntityKind.TASK_FILTERS}


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    record: Optional[Dict[str, Any]] = None
    violations: List[FieldViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def fields(self) -> Dict[str, str]:
        return {v.field: v.message for v in self.violations}


def _message(error: dict) -> str:
    kind = error.get("type")
    if kind == "missing":
        name = str(error["loc"][0]).replace("_", " ").capitalize()
        return f"{name} is required"
    if kind == "extra_forbidden":
        return "Unknown field"
    ctx_error = error.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return error["msg"]


def _violations(exc: PydanticValidationError) -> List[FieldViolation]:
    """First message per field, in the order pydantic reported them."""
    seen: Dict[str, FieldViolation] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        name = str(loc[0]) if loc else "payload"
        if name not in seen:
            seen[name] = FieldViolation(name, _message(error))
    return list(seen.values())


def validate_entity(kind: Any, payload: Any) -> ValidationResult:
    try:
        kind = EntityKind(kind)
    except ValueError:
        return ValidationResult(violations=[FieldViolation("kind", f"Unknown entity kind: {kind!r}")])

    if not isinstance(payload, Mapping):
        return ValidationResult(violations=[FieldViolation("payload", "Expected an object")])

    schema = SCHEMAS[kind]
    try:
        model = schema.model_validate(dict(payload))
    except PydanticValidationError as exc:
        validation_failures_total.labels(kind=kind.value).inc()
        return ValidationResult(violations=_violations(exc))

    record = model.model_dump(
        mode="json",
        exclude_unset=kind in _PARTIAL,
        exclude_none=kind in _SPARSE,
    )
    return ValidationResult(record=record)


def require_valid(kind: EntityKind, payload: Any) -> Dict[str, Any]:
    """Boundary helper: the normalized record, or a 422 with itemized fields."""
    result = validate_entity(kind, payload)
    if not result.ok:
        raise ValidationError([v.to_dict() for v in result.violations])
    return result.record


class BusinessRules:
    @staticmethod
    def validate_arb_initiation(arb_type: ArbType, vehicle_status: str):
        if arb_type == ArbType.SOLD and vehicle_status != VehicleStatus.SOLD.value:
            raise BadRequestError("Sold ARB can only be initiated for vehicles with sold status")
        if arb_type == ArbType.INVENTORY and vehicle_status == VehicleStatus.SOLD.value:
            raise BadRequestError("Inventory ARB cannot be initiated for sold vehicles")
