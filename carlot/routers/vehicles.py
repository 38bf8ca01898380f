import math
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from carlot.auth.context import RequestContext, get_store, require_permission, verify_public_key
from carlot.auth.rbac import Permission
from carlot.services.vehicle_service import VehicleService
from carlot.store.backend import BackendStore

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"], dependencies=[Depends(verify_public_key)])


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.get("")
async def list_vehicles(
    status: Optional[str] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
    year: Optional[int] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: RequestContext = Depends(require_permission(Permission.VIEW_VEHICLES)),
    store: BackendStore = Depends(get_store),
):
    vehicles, total = await VehicleService(store).list_vehicles(
        status=status, make=make, model=model, year=year, search=search, page=page, limit=limit
    )
    return {"data": vehicles, "pagination": pagination(page, limit, total)}


@router.post("", status_code=201)
async def create_vehicle(
    payload: Any = Body(...),
    ctx: RequestContext = Depends(require_permission(Permission.CREATE_VEHICLES)),
    store: BackendStore = Depends(get_store),
):
    vehicle = await VehicleService(store).create_vehicle(payload, created_by=ctx.user_id)
    return {"data": vehicle}


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: str,
    ctx: RequestContext = Depends(require_permission(Permission.VIEW_VEHICLES)),
    store: BackendStore = Depends(get_store),
):
    return {"data": await VehicleService(store).get_vehicle(vehicle_id)}


@router.patch("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: str,
    payload: Any = Body(...),
    ctx: RequestContext = Depends(require_permission(Permission.EDIT_VEHICLES)),
    store: BackendStore = Depends(get_store),
):
    return {"data": await VehicleService(store).update_vehicle(vehicle_id, payload)}
