"""
User data models for the Users Service.
"""

from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """User record."""
    id: Optional[int] = Field(None, description="User ID, assigned on save")
    name: str = Field(..., description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    designation: Optional[str] = Field(None, description="Job title")
