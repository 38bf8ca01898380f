from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class VehicleStatus(str, Enum):
    PENDING = "pending"
    SOLD = "sold"
    WITHDREW = "withdrew"
    COMPLETE = "complete"
    ARB = "arb"
    IN_PROGRESS = "in_progress"


class TitleStatus(str, Enum):
    ABSENT = "absent"
    PRESENT = "present"
    IN_TRANSIT = "in_transit"
    RECEIVED = "received"
    AVAILABLE_NOT_RECEIVED = "available_not_received"
    RELEASED = "released"
    VALIDATED = "validated"
    SENT_NOT_VALIDATED = "sent_not_validated"


class ArbStatus(str, Enum):
    ABSENT = "absent"
    PRESENT = "present"
    IN_TRANSIT = "in_transit"
    FAILED = "failed"


MIN_YEAR = 1900
VIN_LENGTH = 17

REQUIRED_TEXT = ("make", "model", "purchase_date", "pickup_location")
NUMERIC = ("odometer", "bought_price", "sale_invoice")


def max_year() -> int:
    return date.today().year + 1


class VehicleInput(BaseModel):
    """Payload accepted when a vehicle is created."""
    model_config = ConfigDict(extra="forbid")

    make: str
    model: str
    year: int
    vin: Optional[str] = ""
    purchase_date: str
    status: VehicleStatus = VehicleStatus.PENDING
    pickup_location: str
    odometer: Optional[float] = Field(None, ge=0)
    bought_price: Optional[float] = Field(None, ge=0)
    title_status: TitleStatus = TitleStatus.ABSENT
    arb_status: ArbStatus = ArbStatus.ABSENT

    trim: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    vehicle_location: Optional[str] = None
    seller_name: Optional[str] = None
    buyer_dealership: Optional[str] = None
    sale_date: Optional[str] = None
    sale_invoice: Optional[float] = Field(None, ge=0)

    @field_validator(*REQUIRED_TEXT, mode="before")
    @classmethod
    def not_empty(cls, v, info):
        if v is None or (isinstance(v, str) and not v):
            raise ValueError(f"{info.field_name.replace('_', ' ').capitalize()} is required")
        return v

    @field_validator("year", mode="before")
    @classmethod
    def whole_number_year(cls, v):
        # bool is an int subclass and numeric strings would be coerced
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("Year must be a whole number")
        return v

    @field_validator("year")
    @classmethod
    def year_in_range(cls, v):
        if v < MIN_YEAR:
            raise ValueError("Invalid year")
        if v > max_year():
            raise ValueError("Year cannot be in the future")
        return v

    @field_validator("vin")
    @classmethod
    def vin_length(cls, v):
        if not v:
            return ""
        if len(v) != VIN_LENGTH:
            raise ValueError(f"VIN must be {VIN_LENGTH} characters")
        return v

    @field_validator(*NUMERIC, mode="before")
    @classmethod
    def plain_number(cls, v):
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("Must be a number")
        return v


class VehicleUpdate(VehicleInput):
    """Partial update: same rules, every field optional, at least one present."""

    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    vin: Optional[str] = None
    purchase_date: Optional[str] = None
    status: Optional[VehicleStatus] = None
    pickup_location: Optional[str] = None
    title_status: Optional[TitleStatus] = None
    arb_status: Optional[ArbStatus] = None

    @field_validator("status", "title_status", "arb_status", mode="before")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name.replace('_', ' ').capitalize()} cannot be null")
        return v

    @model_validator(mode="after")
    def has_changes(self):
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        return self
