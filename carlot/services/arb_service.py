import logging
from typing import Any, Dict, List

from carlot.core.metrics import track_performance
from carlot.exceptions import BackendError, NotFoundError
from carlot.schemas.arb import ArbInitiateRequest
from carlot.services.validators import BusinessRules
from carlot.store.backend import BackendStore, StoreError
from carlot.store.filters import eq

logger = logging.getLogger(__name__)


class ArbService:
    """
    Arbitration audit trail for a vehicle.

    Records are append-only: this service can read the history and add an
    entry, and deliberately offers nothing that edits or removes one.
    """

    def __init__(self, store: BackendStore):
        self.store = store

    @track_performance(service_name="ArbService")
    async def get_history(self, vehicle_id: str) -> List[Dict[str, Any]]:
        """Newest first, each joined with the creator's id, username and email."""
        try:
            return await self.store.select(
                "vehicle_arb_records",
                [eq("vehicle_id", vehicle_id)],
                order_by="created_at",
                descending=True,
            )
        except StoreError as e:
            raise BackendError("Failed to fetch ARB history") from e

    @track_performance(service_name="ArbService")
    async def initiate(self, vehicle_id: str, request: ArbInitiateRequest, created_by: str) -> Dict[str, Any]:
        try:
            vehicle = await self.store.get("vehicles", vehicle_id)
        except StoreError as e:
            raise BackendError("Failed to create ARB record") from e
        if vehicle is None:
            raise NotFoundError("Vehicle not found")

        BusinessRules.validate_arb_initiation(request.arb_type, vehicle["status"])

        try:
            record = await self.store.insert(
                "vehicle_arb_records",
                {
                    "vehicle_id": vehicle_id,
                    "arb_type": request.arb_type.value,
                    "notes": request.notes,
                    "created_by": created_by,
                },
            )
        except StoreError as e:
            raise BackendError("Failed to create ARB record") from e
        logger.info(f"{request.arb_type.value} ARB initiated for vehicle {vehicle_id}")
        return record
