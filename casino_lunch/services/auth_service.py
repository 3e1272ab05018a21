"""
Authentication service
Input validation, sign-in / sign-up through the identity gateway and profile
creation in the data store
"""

import logging
from typing import Optional

import pydantic

from ..config.settings import Settings, settings as default_settings
from ..core.exceptions import AuthError, PersistenceError, ValidationError
from ..gateways.base import IdentityGateway, PersistenceGateway
from ..models import Profile, Session
from ..schemas.auth import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)


def first_error_message(error: pydantic.ValidationError) -> str:
    """First human readable message of a pydantic validation error"""
    message = error.errors()[0]["msg"]
    return message.removeprefix("Value error, ")


class AuthService:
    """Authentication service"""

    def __init__(self, identity: IdentityGateway, persistence: PersistenceGateway,
                 config: Settings = None):
        self.identity = identity
        self.persistence = persistence
        self.settings = config or default_settings

    async def login(self, email: str, password: str) -> Session:
        """Validate credentials format then sign in"""
        try:
            data = LoginRequest(email=email, password=password)
        except pydantic.ValidationError as e:
            raise ValidationError(first_error_message(e))
        return await self.identity.sign_in(data.email, data.password)

    async def sign_up(self, email: str, password: str, full_name: str,
                      employee_id: str, department: Optional[str] = None) -> Session:
        """Register a new employee and create the profile row"""
        try:
            data = SignupRequest(
                email=email,
                password=password,
                full_name=full_name,
                employee_id=employee_id,
                department=department,
            )
        except pydantic.ValidationError as e:
            raise ValidationError(first_error_message(e))

        session = await self.identity.sign_up(data.email, data.password, {
            "full_name": data.full_name,
            "employee_id": data.employee_id,
            "department": data.department,
        })
        await self._ensure_profile(Profile(
            owner_id=session.owner_id,
            email=session.user.email,
            full_name=data.full_name,
            employee_id=data.employee_id,
            department=data.department,
            role="employee",
        ))
        return session

    async def test_login(self) -> Session:
        """
        One-click demo login

        Sign in with the configured test user; on bad credentials register it
        (tolerating an existing account), sign in again and upsert its profile.
        """
        cfg = self.settings
        try:
            return await self.identity.sign_in(cfg.test_user_email, cfg.test_user_password)
        except AuthError as e:
            if e.error_code != "INVALID_CREDENTIALS":
                raise

        attributes = {
            "full_name": cfg.test_user_full_name,
            "employee_id": cfg.test_user_employee_id,
            "department": cfg.test_user_department,
            "role": cfg.test_user_role,
        }
        try:
            await self.identity.sign_up(cfg.test_user_email, cfg.test_user_password, attributes)
        except AuthError as e:
            if e.error_code != "USER_ALREADY_REGISTERED":
                raise

        session = await self.identity.sign_in(cfg.test_user_email, cfg.test_user_password)
        await self._ensure_profile(Profile(
            owner_id=session.owner_id,
            email=session.user.email,
            **attributes,
        ))
        return session

    async def get_profile(self, owner_id: str) -> Optional[Profile]:
        return await self.persistence.get_profile(owner_id)

    async def _ensure_profile(self, profile: Profile) -> None:
        # The account is usable without a profile row
        try:
            await self.persistence.upsert_profile(profile)
        except PersistenceError as e:
            logger.warning("Profile upsert failed for %s: %s", profile.owner_id, e.message)
            return
        try:
            await self.persistence.log_action(profile.owner_id, "profile_upsert", {
                "employee_id": profile.employee_id,
                "role": profile.role,
            })
        except PersistenceError as e:
            logger.warning("Failed to write audit log profile_upsert: %s", e.message)
