"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserResponse(BaseModel):
    """Schema for user response, joined with the role name."""
    user_id: int
    user_name: str
    email: str
    role_id: int
    role_name: Optional[str] = None
    manager_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
