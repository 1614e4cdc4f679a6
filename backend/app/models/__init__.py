"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.trip import Trip, TripParticipant, TripStatus
from app.models.review import Review

__all__ = [
    "User",
    "Trip",
    "TripParticipant",
    "TripStatus",
    "Review",
]
