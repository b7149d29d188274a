"""Request dependencies: app state accessors and API key authentication."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

if TYPE_CHECKING:
    from shotthumb.config import Settings
    from shotthumb.imaging.pool import ThumbnailPool

_bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_thumbnail_pool(request: Request) -> ThumbnailPool:
    pool: ThumbnailPool = request.app.state.thumbnail_pool
    return pool


async def verify_api_key(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> None:
    """Reject the request unless it carries the configured Bearer key.

    Authentication is off when SHOTTHUMB_API_KEY is not set.
    """
    api_key = get_settings(request).api_key
    if api_key is None:
        return

    token = credentials.credentials if credentials is not None else ""
    if not secrets.compare_digest(token.encode(), api_key.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
