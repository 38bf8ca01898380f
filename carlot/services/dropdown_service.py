from typing import Any, Dict, List

from carlot.core.metrics import track_performance
from carlot.exceptions import BackendError, ConflictError
from carlot.schemas.dropdown import DropdownSettingCreate
from carlot.store.backend import BackendStore, DuplicateRowError, StoreError
from carlot.store.filters import eq


class DropdownService:
    """Admin-configurable option lists grouped by category."""

    def __init__(self, store: BackendStore):
        self.store = store

    @track_performance(service_name="DropdownService")
    async def list_options(self, category: str, active_only: bool = True) -> List[Dict[str, str]]:
        filters = [eq("category", category)]
        if active_only:
            filters.append(eq("is_active", True))
        try:
            rows = await self.store.select("dropdown_settings", filters, order_by="created_at")
        except StoreError as e:
            raise BackendError("Failed to fetch dropdown options") from e
        return [{"label": row["label"], "value": row["value"]} for row in rows]

    @track_performance(service_name="DropdownService")
    async def create_option(self, setting: DropdownSettingCreate) -> Dict[str, Any]:
        duplicate = f"Option '{setting.label}' already exists in {setting.category}"
        try:
            existing = await self.store.select_one(
                "dropdown_settings",
                [eq("category", setting.category), eq("label", setting.label)],
            )
            if existing is not None:
                raise ConflictError(duplicate)
            return await self.store.insert("dropdown_settings", setting.model_dump())
        except DuplicateRowError as e:
            # lost a race with a concurrent create
            raise ConflictError(duplicate) from e
        except StoreError as e:
            raise BackendError("Failed to create dropdown option") from e
