"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from app.models.trip import TripStatus
from app.schemas.review import ReviewResponse
from app.schemas.user import UserSummary


class TripBase(BaseModel):
    """Base trip schema."""
    title: str = Field(..., min_length=1, max_length=128)
    description: str = Field(..., max_length=255)
    destination: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: date
    min_participants: int = Field(..., ge=1)
    max_participants: int = Field(..., ge=1)


class TripCreate(TripBase):
    """Schema for trip creation; cover_photo is an optional image data URI."""
    cover_photo: Optional[str] = None


class TripUpdate(BaseModel):
    """
    Schema for trip update.

    Omitted fields keep their current value. ``cover_photo`` is applied only
    when ``cover_photo_changed`` is true.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=255)
    destination: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_participants: Optional[int] = Field(None, ge=1)
    max_participants: Optional[int] = Field(None, ge=1)
    cover_photo: Optional[str] = None
    cover_photo_changed: bool = False
    status: Optional[TripStatus] = None


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    title: str
    description: str
    destination: str
    start_date: date
    end_date: date
    min_participants: int
    max_participants: int
    status: TripStatus
    cover_photo: Optional[str] = None
    host: UserSummary
    participant_count: int
    created_at: datetime


class TripParticipantResponse(UserSummary):
    """Schema for trip participant response."""
    is_host: bool
    joined_at: datetime


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with participants and reviews."""
    participants: List[TripParticipantResponse] = []
    reviews: List[ReviewResponse] = []
