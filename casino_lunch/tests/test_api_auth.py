"""
Authentication API tests
"""

from ..core.security import SecurityManager


class TestSignup:
    """Sign-up"""

    def test_signup_creates_profile(self, client, auth_headers):
        response = client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "juan.perez@usm.cl"
        assert data["state"] == "authenticated"
        assert data["profile"]["employee_id"] == "EMP001"
        assert data["profile"]["role"] == "employee"

    def test_signup_duplicate_email(self, client, auth_headers):
        response = client.post("/api/v1/auth/signup", json={
            "email": "Juan.Perez@usm.cl",
            "password": "otraclave",
            "full_name": "Juan Pérez",
            "employee_id": "EMP001",
        })
        assert response.status_code == 409
        assert response.json()["error_code"] == "USER_ALREADY_REGISTERED"

    def test_signup_short_password(self, client):
        response = client.post("/api/v1/auth/signup", json={
            "email": "ana@usm.cl",
            "password": "123",
            "full_name": "Ana Soto",
            "employee_id": "EMP002",
        })
        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["message"] == "La contraseña debe tener al menos 6 caracteres"

    def test_signup_invalid_email(self, client):
        response = client.post("/api/v1/auth/signup", json={
            "email": "no-es-un-email",
            "password": "secreto123",
            "full_name": "Ana Soto",
            "employee_id": "EMP002",
        })
        assert response.status_code == 422
        assert response.json()["message"] == "Email inválido"


class TestLogin:
    """Login, test login and logout"""

    def test_login_success(self, client, auth_headers):
        response = client.post("/api/v1/auth/login", json={
            "email": "juan.perez@usm.cl",
            "password": "secreto123",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "Bearer"
        assert data["email"] == "juan.perez@usm.cl"

    def test_login_wrong_password(self, client, auth_headers):
        response = client.post("/api/v1/auth/login", json={
            "email": "juan.perez@usm.cl",
            "password": "incorrecta",
        })
        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"

    def test_test_login_registers_once(self, client):
        first = client.post("/api/v1/auth/test-login")
        second = client.post("/api/v1/auth/test-login")
        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["user_id"] == second.json()["user_id"]

        headers = {"Authorization": f"Bearer {second.json()['token']}"}
        profile = client.get("/api/v1/auth/me", headers=headers).json()["profile"]
        assert profile["role"] == "tester"
        assert profile["employee_id"] == "TEST001"

    def test_logout(self, client, auth_headers):
        response = client.post("/api/v1/auth/logout", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestTokens:
    """Bearer token handling"""

    def test_missing_token(self, client):
        response = client.get("/api/v1/pending")
        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTHENTICATION_REQUIRED"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/pending", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    def test_token_for_unknown_user(self, client, test_settings):
        security = SecurityManager(test_settings.jwt_secret_key, test_settings.jwt_algorithm, 1)
        token, _ = security.create_jwt_token("ghost")
        response = client.get("/api/v1/pending", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    assert client.get("/").json()["name"] == "Casino Lunch API (Test)"
