"""Caller identity and API key verification."""

from fastapi import Header, HTTPException

from orbitgoals.config import settings
from orbitgoals.engine.models import Identity


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Validate API key via X-API-Key or Authorization: Bearer.

    If ORBIT_API_KEY is not set, passes through (no auth).
    If set, requires matching key or raises 401.
    """
    if settings.orbit_api_key is None:
        return ""

    key = x_api_key
    if key is None and authorization and authorization.startswith("Bearer "):
        key = authorization[7:].strip()

    if key != settings.orbit_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return key


async def current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_name: str | None = Header(default=None, alias="X-User-Name"),
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    x_user_photo: str | None = Header(default=None, alias="X-User-Photo"),
) -> Identity:
    """Identity forwarded by the identity provider. No id means guest."""
    user_id = (x_user_id or "").strip() or settings.guest_user_id
    return Identity(
        id=user_id,
        name=(x_user_name or "").strip() or "Guest",
        email=x_user_email or "",
        photo_url=x_user_photo,
    )
