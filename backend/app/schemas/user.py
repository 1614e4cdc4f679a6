"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, Field
from typing import Optional


class UserBase(BaseModel):
    """Base user schema."""
    username: str = Field(..., min_length=1, max_length=50)
    mantra: str = Field(..., min_length=1, max_length=128)


class UserCreate(UserBase):
    """Schema for registration; bio_photo is an optional image data URI."""
    password: str = Field(..., min_length=1)
    bio_photo: Optional[str] = None


class UserUpdate(BaseModel):
    """
    Schema for profile update.

    ``bio_photo`` is only applied when ``bio_photo_changed`` is true; a null
    photo with the flag set removes the current one.
    """
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    mantra: Optional[str] = Field(None, max_length=128)
    bio_photo: Optional[str] = None
    bio_photo_changed: bool = False


class UserSummary(BaseModel):
    """Public user card embedded in trips, participants and reviews."""
    id: int
    username: str
    mantra: str
    bio_photo: Optional[str] = None


class UserLogin(BaseModel):
    """Schema for user login."""
    username: str
    password: str


class AuthResponse(BaseModel):
    """Schema returned by register and login."""
    user: UserSummary
    token: str
    token_type: str = "bearer"
