"""
Pydantic schemas for Review entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.schemas.user import UserSummary


class ReviewCreate(BaseModel):
    """Schema for review submission."""
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ReviewResponse(BaseModel):
    """Schema for review response; author is null once the account is gone."""
    id: int
    trip_id: int
    rating: int
    comment: str
    created_at: datetime
    author: Optional[UserSummary] = None
