from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ArbType(str, Enum):
    SOLD = "sold"
    INVENTORY = "inventory"


class ArbInitiateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    arb_type: ArbType
    notes: Optional[str] = None
