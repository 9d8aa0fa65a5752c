# pmtool/schemas/user.py
"""
User schemas for the PMTool API.

This module contains Pydantic models for user registration and display.
Password hashes never leave the service layer.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, validator

from pmtool.db.models.enums import UserRole


class UserBase(BaseModel):
    name: str = Field(..., description="Display name", min_length=1, max_length=255)
    email: EmailStr = Field(..., description="Email address, used to log in")
    role: UserRole = Field(UserRole.MEMBER, description="Role in the organisation")


class UserCreate(UserBase):
    """Schema for user registration."""

    password: str = Field(..., description="Plain text password")

    @validator("name")
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip()


class User(UserBase):
    """Schema for user information."""

    id: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
