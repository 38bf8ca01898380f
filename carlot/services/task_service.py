from typing import Any, Dict, List, Tuple

from carlot.core.metrics import track_performance
from carlot.exceptions import BackendError, NotFoundError
from carlot.services.validators import EntityKind, require_valid
from carlot.store.backend import BackendStore, StoreError
from carlot.store.filters import any_ilike, eq, gte, lte


def filters_from(criteria: Dict[str, Any]) -> list:
    """Translates normalized TaskFilters into store predicates."""
    filters = []
    for key in ("category", "status", "assigned_to", "vehicle_id"):
        if criteria.get(key):
            filters.append(eq(key, criteria[key]))
    if criteria.get("search"):
        filters.append(any_ilike(["task_name", "notes"], criteria["search"]))
    if criteria.get("date_from"):
        filters.append(gte("due_date", criteria["date_from"]))
    if criteria.get("date_to"):
        filters.append(lte("due_date", criteria["date_to"]))
    return filters


class TaskService:
    def __init__(self, store: BackendStore):
        self.store = store

    @track_performance(service_name="TaskService")
    async def list_tasks(self, raw_filters: Any, page: int = 1, limit: int = 10) -> Tuple[List[Dict[str, Any]], int]:
        criteria = require_valid(EntityKind.TASK_FILTERS, raw_filters)
        filters = filters_from(criteria)
        try:
            rows = await self.store.select(
                "tasks",
                filters,
                order_by="created_at",
                descending=True,
                limit=limit,
                offset=(page - 1) * limit,
            )
            total = await self.store.count("tasks", filters)
        except StoreError as e:
            raise BackendError("Failed to fetch tasks") from e
        return rows, total

    @track_performance(service_name="TaskService")
    async def get_task(self, task_id: str) -> Dict[str, Any]:
        try:
            task = await self.store.get("tasks", task_id)
        except StoreError as e:
            raise BackendError("Failed to fetch task") from e
        if task is None:
            raise NotFoundError("Task not found")
        return task

    @track_performance(service_name="TaskService")
    async def create_task(self, payload: Any, assigned_by: str) -> Dict[str, Any]:
        record = require_valid(EntityKind.TASK, payload)
        try:
            return await self.store.insert("tasks", {**record, "assigned_by": assigned_by})
        except StoreError as e:
            raise BackendError("Failed to create task") from e

    @track_performance(service_name="TaskService")
    async def update_task(self, task_id: str, payload: Any) -> Dict[str, Any]:
        changes = require_valid(EntityKind.TASK_UPDATE, payload)
        try:
            task = await self.store.update("tasks", task_id, changes)
        except StoreError as e:
            raise BackendError("Failed to update task") from e
        if task is None:
            raise NotFoundError("Task not found")
        return task
