"""
Trip routes: browsing, lifecycle transitions, membership and reviews.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.session import get_db
from app.models.user import User
from app.models.trip import TripStatus
from app.schemas.trip import TripCreate, TripUpdate, TripResponse, TripDetailResponse
from app.schemas.review import ReviewCreate, ReviewResponse
from app.api.dependencies import get_current_user
from app.services import trip_service, review_service
from app.services.presenters import trip_to_response, review_to_response

router = APIRouter(prefix="/trips", tags=["trips"])


def _trip_response(trip, db: Session) -> TripResponse:
    return trip_to_response(trip, trip_service.count_participants(trip.id, db))


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip hosted by the current user."""
    trip = trip_service.create_trip(trip_data, current_user, db)
    return _trip_response(trip, db)


@router.get("", response_model=List[TripResponse])
def list_trips(
    search: Optional[str] = None,
    trip_status: Optional[TripStatus] = Query(None, alias="status"),
    has_slots: bool = Query(False, alias="hasSlots"),
    db: Session = Depends(get_db)
):
    """List trips, optionally filtered by text, status and open slots."""
    return trip_service.list_trips(db, search=search, status=trip_status, has_slots=has_slots)


@router.get("/{trip_id}", response_model=TripDetailResponse)
def get_trip(trip_id: int, db: Session = Depends(get_db)):
    """Get trip details with participants and reviews."""
    return trip_service.get_trip_detail(trip_id, db)


@router.put("/{trip_id}", response_model=TripResponse)
def update_trip(
    trip_id: int,
    update: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Edit a trip (host only)."""
    trip = trip_service.update_trip(trip_id, update, current_user, db)
    return _trip_response(trip, db)


@router.put("/{trip_id}/cancel", response_model=TripResponse)
def cancel_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel a trip (host only)."""
    trip = trip_service.cancel_trip(trip_id, current_user, db)
    return _trip_response(trip, db)


@router.put("/{trip_id}/conclude", response_model=TripResponse)
def conclude_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Conclude a trip (host only)."""
    trip = trip_service.conclude_trip(trip_id, current_user, db)
    return _trip_response(trip, db)


@router.post("/{trip_id}/join", status_code=status.HTTP_204_NO_CONTENT)
def join_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Join a trip."""
    trip_service.join_trip(trip_id, current_user, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{trip_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Leave a trip."""
    trip_service.leave_trip(trip_id, current_user, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{trip_id}/participants/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_participant(
    trip_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a participant from the trip (host only)."""
    trip_service.remove_participant(trip_id, user_id, current_user, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{trip_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def add_review(
    trip_id: int,
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Review a concluded trip you took part in."""
    review = review_service.add_review(trip_id, review_data, current_user, db)
    return review_to_response(review)


@router.get("/{trip_id}/reviews", response_model=List[ReviewResponse])
def get_reviews(trip_id: int, db: Session = Depends(get_db)):
    """Get reviews for a trip, most recent first."""
    trip_service.get_trip_or_404(trip_id, db)
    return review_service.list_reviews(trip_id, db)
