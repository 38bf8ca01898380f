from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carlot.auth.auth_handler import sign_jwt
from carlot.auth.passwords_handler import hash_password_async, verify_password_async
from carlot.core.db import get_db
from carlot.exceptions import ConflictError, ForbiddenError, UnauthorizedError
from carlot.middleware.rate_limit import AUTH_RATE_LIMIT, limiter
from carlot.models.profile import Profile
from carlot.schemas.user import UserLoginSchema, UserSchema

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
async def register_user(request: Request, user: UserSchema, db: AsyncSession = Depends(get_db)):
    # Verify if user exists in db
    existing_user = (await db.execute(select(Profile).where(Profile.email == user.email))).scalar_one_or_none()
    if existing_user:
        raise ConflictError("Email already registered")

    hashed_password = await hash_password_async(user.password)

    # New accounts are sellers; admins promote them
    new_user = Profile(
        email=user.email,
        username=user.username,
        password=hashed_password,
    )
    db.add(new_user)

    try:
        await db.commit()
    except IntegrityError:
        # handle race where another request created the same email
        await db.rollback()
        raise ConflictError("Email already registered")

    return {"data": sign_jwt(new_user.id, new_user.role)}


@router.post("/login")
@limiter.limit(AUTH_RATE_LIMIT)
async def login_user(request: Request, user: UserLoginSchema, db: AsyncSession = Depends(get_db)):
    existing_user = (await db.execute(select(Profile).where(Profile.email == user.email))).scalar_one_or_none()
    # Same message for unknown email and bad password
    if not existing_user:
        raise UnauthorizedError("Invalid email or password")

    password_valid = await verify_password_async(user.password, existing_user.password)
    if not password_valid:
        raise UnauthorizedError("Invalid email or password")
    if existing_user.status != "active":
        raise ForbiddenError("Account is inactive")

    return {"data": sign_jwt(existing_user.id, existing_user.role)}
