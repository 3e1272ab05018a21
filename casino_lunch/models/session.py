"""
Identity session models
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict


class SessionUser(BaseModel):
    """Signed-in account"""
    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Sign-up attributes")


class Session(BaseModel):
    """Identity provider session"""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("Bearer", description="Token type")
    expires_at: datetime = Field(..., description="Expiry instant (UTC)")
    user: SessionUser

    @property
    def owner_id(self) -> str:
        return self.user.id
