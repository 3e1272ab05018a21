import pytest

from ..core.exceptions import AuthError
from ..services.auth_service import AuthService
from .conftest import run


class TranslatedIdentity:
    """Identity gateway whose provider words its errors differently"""

    def __init__(self, inner):
        self.inner = inner

    async def sign_in(self, email, password):
        try:
            return await self.inner.sign_in(email, password)
        except AuthError as e:
            raise AuthError("Credenciales inválidas", e.error_code)

    async def sign_up(self, email, password, profile_attributes):
        try:
            return await self.inner.sign_up(email, password, profile_attributes)
        except AuthError as e:
            raise AuthError("Usuario ya registrado", e.error_code)


class TestDemoLogin:
    """One-click demo login"""

    def test_recovers_by_error_code(self, identity, fake_gateway, test_settings):
        service = AuthService(TranslatedIdentity(identity), fake_gateway, test_settings)

        session = run(service.test_login())

        assert session.user.email == test_settings.test_user_email
        assert fake_gateway.profiles[session.owner_id].email == test_settings.test_user_email

    def test_other_sign_in_errors_propagate(self, fake_gateway, test_settings):
        class Offline:
            async def sign_in(self, email, password):
                raise AuthError("Invalid login credentials", "PROVIDER_UNAVAILABLE")

        service = AuthService(Offline(), fake_gateway, test_settings)
        with pytest.raises(AuthError) as exc_info:
            run(service.test_login())
        assert exc_info.value.error_code == "PROVIDER_UNAVAILABLE"
