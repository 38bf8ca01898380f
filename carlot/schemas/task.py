from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: Optional[str] = None
    task_name: str
    due_date: str
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    category: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING

    @field_validator("task_name", "due_date", mode="before")
    @classmethod
    def not_empty(cls, v, info):
        if v is None or (isinstance(v, str) and not v):
            raise ValueError(f"{info.field_name.replace('_', ' ').capitalize()} is required")
        return v


class TaskUpdate(TaskInput):
    task_name: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[TaskStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Status cannot be null")
        return v

    @model_validator(mode="after")
    def has_changes(self):
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        return self


class TaskFilters(BaseModel):
    """List filters; a missing or empty value means no filter on that dimension."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    search: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    vehicle_id: Optional[str] = Field(None, alias="vehicleId")
    date_from: Optional[str] = Field(None, alias="dateFrom")
    date_to: Optional[str] = Field(None, alias="dateTo")

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
