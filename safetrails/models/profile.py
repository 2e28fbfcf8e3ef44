"""
profile.py — Author display profiles (the `profiles` collection).

A profile only carries presentation data. Identity comes from the bearer
token's `sub`, which is also the profile's user_id.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_AUTHOR_NAME = "Anonymous"


class ProfileUpdate(BaseModel):
    """Payload for PUT /api/v1/authors/{user_id}/profile."""

    name:   str = Field(..., max_length=64)
    bio:    Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = Field(default=None, max_length=2000)  # opaque URL

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class AuthorProfile(BaseModel):
    user_id:    str
    name:       str = DEFAULT_AUTHOR_NAME
    bio:        Optional[str] = None
    avatar:     Optional[str] = None
    updated_at: Optional[datetime] = None
