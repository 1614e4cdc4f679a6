"""
Review service: append-only reviews for concluded trips.
"""
import logging
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from app.core.exceptions import Forbidden, NotFound, Conflict, InvalidState
from app.models.review import Review
from app.models.trip import Trip, TripParticipant, TripStatus
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services.presenters import review_to_response

logger = logging.getLogger(__name__)


def list_reviews(trip_id: int, db: Session) -> List[ReviewResponse]:
    """Reviews for a trip, most recent first, with author cards."""
    reviews = db.query(Review).options(
        joinedload(Review.author)
    ).filter(
        Review.trip_id == trip_id
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()
    return [review_to_response(r) for r in reviews]


def add_review(trip_id: int, review_data: ReviewCreate, author: User, db: Session) -> Review:
    """
    Append a review.

    The author must be a participant, the trip must be Concluded, and each
    author reviews a trip at most once.
    """
    try:
        trip = db.query(Trip).filter(Trip.id == trip_id).first()
        if not trip:
            raise NotFound("Trip not found.")

        participant = db.query(TripParticipant).filter(
            TripParticipant.trip_id == trip_id,
            TripParticipant.user_id == author.id
        ).first()
        if not participant:
            raise Forbidden("Only participants can review this trip.")

        if trip.status != TripStatus.CONCLUDED:
            raise InvalidState("Reviews can only be left on concluded trips.")

        existing = db.query(Review).filter(
            Review.trip_id == trip_id,
            Review.author_id == author.id
        ).first()
        if existing:
            raise Conflict("You have already reviewed this trip.")

        review = Review(
            trip_id=trip_id,
            author_id=author.id,
            rating=review_data.rating,
            comment=review_data.comment
        )
        db.add(review)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("You have already reviewed this trip.")
    except Exception:
        db.rollback()
        raise

    db.refresh(review)
    logger.info(f"User {author.id} reviewed trip {trip_id} ({review.rating}/5)")
    return review
