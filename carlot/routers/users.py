
from fastapi import APIRouter, Depends, Response

from carlot.auth.auth_handler import IMPERSONATION_COOKIE
from carlot.auth.context import RequestContext, get_request_context, get_store, require_user, verify_public_key
from carlot.core.environment import get_impersonation_max_age, is_production
from carlot.exceptions import BackendError, NotFoundError
from carlot.services.impersonation_service import ImpersonationService
from carlot.store.backend import BackendStore, StoreError


router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(verify_public_key)])

# The impersonation banner polls this on every page; it must never block.
status_router = APIRouter(prefix="/api/users", tags=["users"])


@status_router.get("/check-impersonation")
async def check_impersonation(
    ctx: RequestContext = Depends(get_request_context),
    store: BackendStore = Depends(get_store),
):
    status = await ImpersonationService(store).check(ctx)
    return status.to_response()


@router.get("/me")
async def current_user(
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    try:
        profile = await store.get("profiles", ctx.user_id)
    except StoreError as e:
        raise BackendError("Failed to fetch profile") from e
    if profile is None:
        raise NotFoundError("User not found")
    return {"data": {**profile, "is_impersonating": ctx.is_impersonating}}


@router.post("/{user_id}/impersonate")
async def impersonate_user(
    user_id: str,
    response: Response,
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    token, marker, target = await ImpersonationService(store).start(ctx, user_id)
    response.set_cookie(
        IMPERSONATION_COOKIE,
        marker,
        max_age=get_impersonation_max_age(),
        httponly=True,
        secure=is_production(),
        samesite="lax",
    )
    return {"data": {**token, "user": target}}


@router.post("/restore-admin")
async def restore_admin(
    response: Response,
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    token, admin = await ImpersonationService(store).restore(ctx)
    response.delete_cookie(IMPERSONATION_COOKIE, httponly=True, secure=is_production(), samesite="lax")
    return {"data": {**token, "user": admin}}
