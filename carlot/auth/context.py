from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carlot.auth.auth_handler import (
    IMPERSONATION_COOKIE,
    decode_impersonation_marker,
    get_session_from_request,
)
from carlot.auth.rbac import Permission, has_permission
from carlot.core.db import get_db
from carlot.core.environment import get_public_key
from carlot.exceptions import ForbiddenError, UnauthorizedError
from carlot.store.backend import BackendStore


@dataclass(frozen=True)
class RequestContext:
    """
    Everything a handler knows about its caller, built once per request.

    ``user_id``/``role`` are the session (display) identity. When an admin is
    impersonating, ``impersonator_id`` holds the admin's real ID taken from
    the signed marker cookie.
    """
    user_id: Optional[str] = None
    role: Optional[str] = None
    impersonator_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_impersonating(self) -> bool:
        return self.impersonator_id is not None

    @property
    def real_user_id(self) -> Optional[str]:
        """Identity used to decide who may start or end an impersonation."""
        return self.impersonator_id or self.user_id

    def require_user(self) -> str:
        if not self.user_id:
            raise UnauthorizedError()
        return self.user_id

    def require(self, permission: Permission) -> str:
        user_id = self.require_user()
        if not has_permission(self.role, permission):
            raise ForbiddenError(f"Forbidden - {permission.value} required")
        return user_id


def build_context(request: Request) -> RequestContext:
    session = get_session_from_request(request)
    if session is None:
        return RequestContext()
    # a marker only counts for the user it was issued to
    impersonator_id = decode_impersonation_marker(request.cookies.get(IMPERSONATION_COOKIE), session["user_id"])
    return RequestContext(
        user_id=session["user_id"],
        role=session.get("role"),
        impersonator_id=impersonator_id,
    )


async def get_request_context(request: Request) -> RequestContext:
    return build_context(request)


async def get_store(request: Request, db: AsyncSession = Depends(get_db)) -> BackendStore:
    return BackendStore(db, getattr(request.app.state, "change_feed", None))


async def verify_public_key(request: Request):
    """Every API client must present the public access key."""
    expected = get_public_key()
    if not expected or request.headers.get("apikey") != expected:
        raise UnauthorizedError("Invalid API key")


def require_permission(permission: Permission):
    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        ctx.require(permission)
        return ctx
    return dependency


async def require_user(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    ctx.require_user()
    return ctx
