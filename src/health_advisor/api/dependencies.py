"""Request dependencies shared by the API routers."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from health_advisor.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def _get_api_token(request: Request) -> str:
    return get_container(request).settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def current_user_id(x_user_id: UUID = Header()) -> UUID:
    """Return the user the request acts for."""
    return x_user_id
