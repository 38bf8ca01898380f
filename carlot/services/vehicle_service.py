import logging
from typing import Any, Dict, List, Optional, Tuple

from carlot.core.metrics import track_performance
from carlot.exceptions import BackendError, NotFoundError
from carlot.services.validators import EntityKind, require_valid
from carlot.store.backend import BackendStore, StoreError
from carlot.store.filters import any_ilike, eq

logger = logging.getLogger(__name__)


class VehicleService:
    """Reads and validated writes of inventory vehicles."""

    def __init__(self, store: BackendStore):
        self.store = store

    @track_performance(service_name="VehicleService")
    async def list_vehicles(
        self,
        status: Optional[str] = None,
        make: Optional[str] = None,
        model: Optional[str] = None,
        year: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        filters = []
        if status:
            filters.append(eq("status", status))
        if make:
            filters.append(eq("make", make))
        if model:
            filters.append(eq("model", model))
        if year is not None:
            filters.append(eq("year", year))
        if search:
            filters.append(any_ilike(["make", "model", "vin"], search))

        try:
            rows = await self.store.select(
                "vehicles",
                filters,
                order_by="created_at",
                descending=True,
                limit=limit,
                offset=(page - 1) * limit,
            )
            total = await self.store.count("vehicles", filters)
        except StoreError as e:
            raise BackendError("Failed to fetch vehicles") from e
        return rows, total

    @track_performance(service_name="VehicleService")
    async def get_vehicle(self, vehicle_id: str) -> Dict[str, Any]:
        try:
            vehicle = await self.store.get("vehicles", vehicle_id)
        except StoreError as e:
            raise BackendError("Failed to fetch vehicle") from e
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        return vehicle

    @track_performance(service_name="VehicleService")
    async def create_vehicle(self, payload: Any, created_by: str) -> Dict[str, Any]:
        record = require_valid(EntityKind.VEHICLE, payload)
        try:
            vehicle = await self.store.insert("vehicles", {**record, "created_by": created_by})
        except StoreError as e:
            raise BackendError("Failed to create vehicle") from e
        logger.info("Vehicle created", extra={"vehicle_id": vehicle["id"], "created_by": created_by})
        return vehicle

    @track_performance(service_name="VehicleService")
    async def update_vehicle(self, vehicle_id: str, payload: Any) -> Dict[str, Any]:
        changes = require_valid(EntityKind.VEHICLE_UPDATE, payload)
        try:
            vehicle = await self.store.update("vehicles", vehicle_id, changes)
        except StoreError as e:
            raise BackendError("Failed to update vehicle") from e
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        return vehicle
