"""
Pydantic schemas for the profile page.
"""
from pydantic import BaseModel
from typing import List
from app.models.trip import TripStatus
from app.schemas.review import ReviewResponse
from app.schemas.user import UserSummary


class TripBrief(BaseModel):
    """Trip reference listed on a profile."""
    id: int
    title: str
    status: TripStatus

    class Config:
        from_attributes = True


class HostedReviewResponse(ReviewResponse):
    """Review shown on a host's profile, with the reviewed trip."""
    trip: TripBrief


class ProfileResponse(BaseModel):
    """Aggregated profile page data."""
    user: UserSummary
    hosted_trips: List[TripBrief] = []
    joined_trips: List[TripBrief] = []
    hosted_reviews: List[HostedReviewResponse] = []
