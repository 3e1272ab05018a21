"""
Authentication routes
Email/password sign-up and login, one-click test login, logout and the
current session
"""

from fastapi import APIRouter, Depends

from ...models import Session
from ...schemas.auth import (
    LoginRequest,
    MeResponse,
    ProfileResponse,
    SignupRequest,
    TokenResponse,
)
from ...services import AuthService, ReservationWorkspace, WorkspaceRegistry
from ..deps import get_auth_service, get_registry, get_workspace

router = APIRouter()


def _token_response(session: Session) -> TokenResponse:
    return TokenResponse(
        token=session.access_token,
        token_type=session.token_type,
        expires_at=session.expires_at,
        user_id=session.owner_id,
        email=session.user.email,
    )


@router.post("/signup", response_model=TokenResponse)
async def signup(
    req: SignupRequest,
    service: AuthService = Depends(get_auth_service),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """
    Register an employee account

    Creates the identity, the profile row and a workspace bound to the new
    session.
    """
    session = await service.sign_up(
        req.email, req.password, req.full_name, req.employee_id, req.department
    )
    await registry.adopt(service.identity)
    return _token_response(session)


@router.post("/login", response_model=TokenResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """Email/password login"""
    session = await service.login(req.email, req.password)
    await registry.adopt(service.identity)
    return _token_response(session)


@router.post("/test-login", response_model=TokenResponse)
async def test_login(
    service: AuthService = Depends(get_auth_service),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """Sign in as the demo test user, registering it on first use"""
    session = await service.test_login()
    await registry.adopt(service.identity)
    return _token_response(session)


@router.post("/logout")
async def logout(
    workspace: ReservationWorkspace = Depends(get_workspace),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """Sign out and drop the workspace with its pending selection"""
    await registry.discard(workspace.owner_id)
    return {"success": True, "message": "Sesión cerrada"}


@router.get("/me", response_model=MeResponse)
async def me(
    workspace: ReservationWorkspace = Depends(get_workspace),
    service: AuthService = Depends(get_auth_service),
):
    session = workspace.binder.session
    profile = await service.get_profile(workspace.owner_id)
    return MeResponse(
        user_id=session.owner_id,
        email=session.user.email,
        state=workspace.state.value,
        profile=ProfileResponse(**profile.model_dump(include=set(ProfileResponse.model_fields)))
        if profile else None,
    )
