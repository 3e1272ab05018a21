"""
Employee profile data models
"""

from pydantic import BaseModel, Field
from typing import Optional
from .base import BaseEntity, TimestampMixin


class ProfileAttributes(BaseModel):
    """Profile fields collected at sign-up"""
    full_name: str = Field(..., description="Full name")
    employee_id: str = Field(..., description="Employee ID")
    department: Optional[str] = Field(None, description="Department")
    role: str = Field("employee", description="Role")


class Profile(ProfileAttributes, BaseEntity, TimestampMixin):
    """Persisted profile row"""
    owner_id: str = Field(..., description="Owning user ID")
    email: str = Field(..., description="Email")
