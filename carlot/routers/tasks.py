from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from carlot.auth.context import RequestContext, get_store, require_permission, verify_public_key
from carlot.auth.rbac import Permission
from carlot.routers.vehicles import pagination
from carlot.services.task_service import TaskService
from carlot.store.backend import BackendStore

router = APIRouter(prefix="/api/tasks", tags=["tasks"], dependencies=[Depends(verify_public_key)])


@router.get("")
async def list_tasks(
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    vehicle_id: Optional[str] = Query(None, alias="vehicleId"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: RequestContext = Depends(require_permission(Permission.VIEW_TASKS)),
    store: BackendStore = Depends(get_store),
):
    raw_filters = {
        "search": search,
        "category": category,
        "status": status,
        "assignedTo": assigned_to,
        "vehicleId": vehicle_id,
        "dateFrom": date_from,
        "dateTo": date_to,
    }
    tasks, total = await TaskService(store).list_tasks(raw_filters, page=page, limit=limit)
    return {"data": tasks, "pagination": pagination(page, limit, total)}


@router.post("", status_code=201)
async def create_task(
    payload: Any = Body(...),
    ctx: RequestContext = Depends(require_permission(Permission.MANAGE_TASKS)),
    store: BackendStore = Depends(get_store),
):
    return {"data": await TaskService(store).create_task(payload, assigned_by=ctx.user_id)}


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    ctx: RequestContext = Depends(require_permission(Permission.VIEW_TASKS)),
    store: BackendStore = Depends(get_store),
):
    return {"data": await TaskService(store).get_task(task_id)}


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    payload: Any = Body(...),
    ctx: RequestContext = Depends(require_permission(Permission.MANAGE_TASKS)),
    store: BackendStore = Depends(get_store),
):
    return {"data": await TaskService(store).update_task(task_id, payload)}
