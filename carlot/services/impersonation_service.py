"""
Admin impersonation.

While impersonating, the session token belongs to the target user and a
signed marker cookie remembers the admin who started it. Starting and
ending an impersonation is always decided by the real admin identity,
never by the impersonated one.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from carlot.auth.auth_handler import sign_impersonation_marker, sign_jwt
from carlot.auth.context import RequestContext
from carlot.auth.rbac import Permission, Role, has_permission
from carlot.core.metrics import track_performance
from carlot.exceptions import BackendError, BadRequestError, ForbiddenError, NotFoundError
from carlot.schemas.user import ImpersonationStatus
from carlot.store.backend import BackendStore, StoreError

logger = logging.getLogger(__name__)

FALLBACK_ADMIN_USERNAME = "Admin"


class ImpersonationService:
    def __init__(self, store: BackendStore):
        self.store = store

    async def _profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.store.get("profiles", user_id)
        except StoreError as e:
            raise BackendError("Failed to fetch profile") from e

    async def check(self, ctx: RequestContext) -> ImpersonationStatus:
        """Never fails: any lookup error degrades to "not impersonating"."""
        if not ctx.is_impersonating:
            return ImpersonationStatus(is_impersonating=False)
        try:
            admin = await self.store.get("profiles", ctx.impersonator_id)
        except StoreError:
            logger.exception("Impersonation check failed")
            return ImpersonationStatus(is_impersonating=False)
        admin = admin or {}
        username = admin.get("username") or admin.get("email") or FALLBACK_ADMIN_USERNAME
        return ImpersonationStatus(
            is_impersonating=True,
            admin_id=ctx.impersonator_id,
            admin_username=username,
        )

    async def _require_admin(self, ctx: RequestContext) -> Dict[str, Any]:
        real_id = ctx.real_user_id
        if not real_id:
            raise ForbiddenError("Forbidden - admin required")
        admin = await self._profile(real_id)
        if admin is None or not has_permission(admin["role"], Permission.IMPERSONATE_USERS):
            raise ForbiddenError("Forbidden - admin required")
        return admin

    @track_performance(service_name="ImpersonationService")
    async def start(self, ctx: RequestContext, target_id: str) -> Tuple[Dict[str, str], str, Dict[str, Any]]:
        """Returns the target's session token, the marker cookie value and the target profile."""
        admin = await self._require_admin(ctx)
        if target_id == admin["id"]:
            raise BadRequestError("Cannot impersonate yourself")
        target = await self._profile(target_id)
        if target is None:
            raise NotFoundError("User not found")
        if target["status"] != "active":
            raise BadRequestError("Cannot impersonate an inactive user")
        if target["role"] == Role.ADMIN.value:
            raise ForbiddenError("Cannot impersonate another admin")

        logger.info("Impersonation started", extra={"admin_id": admin["id"], "target_id": target_id})
        token = sign_jwt(target["id"], target["role"])
        marker = sign_impersonation_marker(admin["id"], target["id"])
        return token, marker, target

    @track_performance(service_name="ImpersonationService")
    async def restore(self, ctx: RequestContext) -> Tuple[Dict[str, str], Dict[str, Any]]:
        if not ctx.is_impersonating:
            raise BadRequestError("Not currently impersonating")
        admin = await self._require_admin(ctx)
        logger.info("Impersonation ended", extra={"admin_id": admin["id"], "target_id": ctx.user_id})
        return sign_jwt(admin["id"], admin["role"]), admin
