"""
Shared route dependencies
"""

from fastapi import Depends, Request

from ..core.security import get_bearer_token
from ..services import AuthService, ReservationWorkspace, WorkspaceRegistry


def get_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.registry


def get_auth_service(request: Request) -> AuthService:
    """Auth service bound to a fresh client identity"""
    registry = get_registry(request)
    return AuthService(
        registry.identity_factory(),
        registry.persistence,
        request.app.state.settings,
    )


async def get_workspace(
    token: str = Depends(get_bearer_token),
    registry: WorkspaceRegistry = Depends(get_registry),
) -> ReservationWorkspace:
    """Workspace of the bearer token's owner"""
    return await registry.for_token(token)
