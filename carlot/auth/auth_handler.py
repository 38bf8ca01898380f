import time
from typing import Dict, Optional

import jwt
from fastapi import Request

from carlot.core.environment import (
    get_impersonation_max_age,
    get_jwt_algorithm,
    get_jwt_exp_seconds,
    get_jwt_secret,
)

IMPERSONATION_COOKIE = "impersonating_admin_id"


def token_response(token: str):
    return {
        "access_token": token
    }


def _encode(payload: dict) -> str:
    return jwt.encode(payload, get_jwt_secret(), algorithm=get_jwt_algorithm())


def decode_jwt(token: str) -> Optional[dict]:
    """Decode a JWT token and return the payload if valid, else None."""
    try:
        decoded_token = jwt.decode(token, get_jwt_secret(), algorithms=[get_jwt_algorithm()])
        if decoded_token["expires"] >= time.time():
            return decoded_token
        else:
            return None
    except (jwt.InvalidTokenError, KeyError, TypeError):
        return None


def sign_jwt(user_id: str, role: str) -> Dict[str, str]:
    """Generate a session token for a given user ID."""
    payload = {
        "user_id": user_id,
        "role": role,
        "expires": time.time() + get_jwt_exp_seconds()
    }
    return token_response(_encode(payload))


def sign_impersonation_marker(admin_id: str, target_id: str) -> str:
    """Signed cookie value remembering which admin started an impersonation."""
    payload = {
        "kind": "impersonation",
        "admin_id": admin_id,
        "target_id": target_id,
        "expires": time.time() + get_impersonation_max_age()
    }
    return _encode(payload)


def decode_impersonation_marker(value: Optional[str], session_user_id: Optional[str]) -> Optional[str]:
    """
    Returns the admin ID held by a marker, or None if absent, forged, expired
    or minted for someone other than the current session user.
    """
    if not value or not session_user_id:
        return None
    payload = decode_jwt(value)
    if not payload or payload.get("kind") != "impersonation":
        return None
    if payload.get("target_id") != session_user_id:
        return None
    return payload.get("admin_id")


def get_session_from_request(request: Request) -> Optional[dict]:
    """Extract the session payload from the bearer token, or None."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = auth_header.split(" ", 1)[1]
    payload = decode_jwt(token)
    if not payload or not payload.get("user_id"):
        return None
    return payload
