"""API key verification and user identity for KPI endpoints."""

from fastapi import HTTPException, Header

from app.config import settings


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Validate API key via X-API-Key or Authorization: Bearer.

    If KPI_API_KEY is not set, passes through (no auth).
    If set, requires matching key or raises 401.
    """
    if settings.kpi_api_key is None:
        return ""

    key = x_api_key
    if key is None and authorization and authorization.startswith("Bearer "):
        key = authorization[7:].strip()

    if key != settings.kpi_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return key


async def current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str | None:
    """Resolved user identity from the upstream auth layer, or None when signed out."""
    if x_user_id is None:
        return None
    user_id = x_user_id.strip()
    return user_id or None
