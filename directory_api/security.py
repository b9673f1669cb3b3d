"""Bearer token authorization for the directory routes."""

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException

from .config import Settings, get_settings


async def authorize(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Require ``Authorization: Bearer <TOKEN>`` when a token is configured.

    A missing header is a bad request (400) and a wrong token is
    unauthorized (401). With no token configured every request passes,
    which is the development setup.
    """
    if not settings.token:
        return

    if not authorization:
        raise HTTPException(status_code=400, detail="Missing Authorization header")

    expected = f"Bearer {settings.token}"
    if not secrets.compare_digest(authorization.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid token")
