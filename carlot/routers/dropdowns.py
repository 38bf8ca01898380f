from fastapi import APIRouter, Depends

from carlot.auth.context import RequestContext, get_store, require_permission, require_user, verify_public_key
from carlot.auth.rbac import Permission
from carlot.schemas.dropdown import DropdownSettingCreate
from carlot.services.dropdown_service import DropdownService
from carlot.store.backend import BackendStore

router = APIRouter(prefix="/api/dropdown-settings", tags=["dropdowns"], dependencies=[Depends(verify_public_key)])


@router.get("")
async def list_dropdown_options(
    category: str,
    active_only: bool = True,
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    return {"data": await DropdownService(store).list_options(category, active_only=active_only)}


@router.post("", status_code=201)
async def create_dropdown_option(
    setting: DropdownSettingCreate,
    ctx: RequestContext = Depends(require_permission(Permission.MANAGE_DROPDOWNS)),
    store: BackendStore = Depends(get_store),
):
    return {"data": await DropdownService(store).create_option(setting)}
