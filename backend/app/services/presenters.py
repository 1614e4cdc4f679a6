"""
Build response schemas from ORM rows, turning stored image bytes into data URIs.
"""
from typing import Optional
from app.core.utils import encode_image_data_uri
from app.models.review import Review
from app.models.trip import Trip, TripParticipant
from app.models.user import User
from app.schemas.review import ReviewResponse
from app.schemas.trip import TripResponse, TripParticipantResponse
from app.schemas.user import UserSummary


def user_summary(user: Optional[User]) -> Optional[UserSummary]:
    """Public user card, or None for a deleted account."""
    if user is None:
        return None
    return UserSummary(
        id=user.id,
        username=user.username,
        mantra=user.mantra,
        bio_photo=encode_image_data_uri(user.bio_photo)
    )


def trip_to_response(trip: Trip, participant_count: int) -> TripResponse:
    return TripResponse(
        id=trip.id,
        title=trip.title,
        description=trip.description,
        destination=trip.destination,
        start_date=trip.start_date,
        end_date=trip.end_date,
        min_participants=trip.min_participants,
        max_participants=trip.max_participants,
        status=trip.status,
        cover_photo=encode_image_data_uri(trip.cover_photo),
        host=user_summary(trip.host),
        participant_count=participant_count,
        created_at=trip.created_at
    )


def participant_to_response(participant: TripParticipant, host_id: int) -> TripParticipantResponse:
    user = participant.user
    return TripParticipantResponse(
        id=user.id,
        username=user.username,
        mantra=user.mantra,
        bio_photo=encode_image_data_uri(user.bio_photo),
        is_host=user.id == host_id,
        joined_at=participant.joined_at
    )


def review_to_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        trip_id=review.trip_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        author=user_summary(review.author)
    )
