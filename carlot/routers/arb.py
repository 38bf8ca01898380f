from fastapi import APIRouter, Depends

from carlot.auth.context import RequestContext, get_store, require_permission, require_user, verify_public_key
from carlot.auth.rbac import Permission
from carlot.schemas.arb import ArbInitiateRequest
from carlot.services.arb_service import ArbService
from carlot.store.backend import BackendStore

# Records are append-only: there is deliberately no PATCH or DELETE here.
router = APIRouter(prefix="/api/vehicles/{vehicle_id}/arb", tags=["arb"], dependencies=[Depends(verify_public_key)])


@router.get("/history")
async def get_arb_history(
    vehicle_id: str,
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    return {"data": await ArbService(store).get_history(vehicle_id)}


@router.post("/initiate", status_code=201)
async def initiate_arb(
    vehicle_id: str,
    req: ArbInitiateRequest,
    ctx: RequestContext = Depends(require_permission(Permission.INITIATE_ARB)),
    store: BackendStore = Depends(get_store),
):
    record = await ArbService(store).initiate(vehicle_id, req, created_by=ctx.user_id)
    return {"data": record}
