"""Session token dependency."""

from fastapi import Header, HTTPException, Request, status

from nutrichat.containers import AppContainer
from nutrichat.services.controller import AppController


async def require_session(
    request: Request, x_session_token: str | None = Header(default=None)
) -> AppController:
    """Return the controller for the caller's session token."""
    container: AppContainer = request.app.state.container
    controller = (
        container.session_manager.get(x_session_token) if x_session_token else None
    )
    if controller is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return controller
