"""
Auth request/response schemas
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LoginRequest(BaseModel):
    """Login request"""
    email: str = Field(description="Email", examples=["juan.perez@usm.cl"])
    password: str = Field(description="Password")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if len(v) > 255:
            raise ValueError("Email muy largo")
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Email inválido")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("La contraseña debe tener al menos 6 caracteres")
        if len(v) > 100:
            raise ValueError("Contraseña muy larga")
        return v


class SignupRequest(LoginRequest):
    """Sign-up request"""
    full_name: str = Field(description="Full name")
    employee_id: str = Field(description="Employee ID")
    department: Optional[str] = Field(None, description="Department")

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("El nombre debe tener al menos 2 caracteres")
        if len(v) > 100:
            raise ValueError("Nombre muy largo")
        return v

    @field_validator("employee_id")
    @classmethod
    def validate_employee_id(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("ID de empleado requerido")
        if len(v) > 50:
            raise ValueError("ID muy largo")
        return v

    @field_validator("department")
    @classmethod
    def validate_department(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if len(v) > 100:
            raise ValueError("Departamento muy largo")
        return v or None


class TokenResponse(BaseModel):
    """Issued session"""
    token: str = Field(description="JWT access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_at: datetime = Field(description="Expiry instant")
    user_id: str = Field(description="User ID")
    email: str = Field(description="Email")


class ProfileResponse(BaseModel):
    """Employee profile"""
    owner_id: str
    email: str
    full_name: str
    employee_id: str
    department: Optional[str] = None
    role: str


class MeResponse(BaseModel):
    """Current session and profile"""
    user_id: str
    email: str
    state: str = Field(description="Session binder state")
    profile: Optional[ProfileResponse] = None
