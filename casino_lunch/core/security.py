"""
Security helpers
JWT access tokens, password hashing and the bearer-token dependency
"""

import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .exceptions import AuthError
from ..config.settings import settings

PASSWORD_ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 260_000
SALT_SIZE = 16


def _pbkdf2_hash(password: str, salt: bytes, iterations: int = ITERATIONS) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, iterations, dklen=32
    )


def generate_password_hash(password: str) -> str:
    salt = os.urandom(SALT_SIZE)
    hash_bytes = _pbkdf2_hash(password, salt)
    return f"{PASSWORD_ALGORITHM}${ITERATIONS}${salt.hex()}${hash_bytes.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        algorithm, iterations_str, salt_hex, hash_hex = stored_hash.split("$")
        if algorithm != PASSWORD_ALGORITHM:
            return False
        new_hash = _pbkdf2_hash(password, bytes.fromhex(salt_hex), int(iterations_str))
        return hmac.compare_digest(new_hash, bytes.fromhex(hash_hex))
    except (ValueError, TypeError):
        return False


class SecurityManager:
    """JWT issue and verification"""

    def __init__(self, secret: str = None, algorithm: str = None, expire_hours: int = None):
        self.secret = secret or settings.jwt_secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expire_hours = expire_hours or settings.jwt_expire_hours

    def create_jwt_token(self, user_id: str, additional_claims: Dict[str, Any] = None) -> tuple:
        """Create a token, returns (token, expires_at)"""
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(hours=self.expire_hours)
        payload = {
            "sub": user_id,
            "exp": expires_at,
            "iat": issued_at,
        }
        if additional_claims:
            payload.update(additional_claims)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm), expires_at

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired", "TOKEN_EXPIRED")
        except jwt.InvalidTokenError as e:
            raise AuthError(f"Invalid token: {e}", "INVALID_TOKEN")

    def get_user_id_from_token(self, token: str) -> str:
        payload = self.decode_jwt_token(token)
        user_id = payload.get("sub")
        if not user_id:
            raise AuthError("Token missing subject", "INVALID_TOKEN")
        return user_id


# Global security manager instance
security_manager = SecurityManager()

bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Raw bearer token; signature and expiry are checked by the token's consumer"""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return credentials.credentials
