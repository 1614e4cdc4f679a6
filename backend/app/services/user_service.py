"""
User service: registration, login, self-only profile reads and edits.
"""
import logging
from typing import List, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, contains_eager
from app.core.exceptions import Unauthorized, Forbidden, NotFound, Conflict
from app.core.security import hash_password, verify_password, issue_token
from app.core.utils import decode_image_data_uri
from app.models.review import Review
from app.models.trip import Trip, TripParticipant
from app.models.user import User
from app.schemas.profile import ProfileResponse, TripBrief, HostedReviewResponse
from app.schemas.trip import TripResponse
from app.schemas.user import UserCreate, UserUpdate
from app.services.presenters import user_summary, trip_to_response, review_to_response
from app.services.trip_service import participant_count_subquery

logger = logging.getLogger(__name__)


def register_user(user_data: UserCreate, db: Session) -> Tuple[User, str]:
    """Create an account and issue its first bearer token."""
    existing_user = db.query(User).filter(User.username == user_data.username).first()
    if existing_user:
        raise Conflict("Username already exists.")

    try:
        bio_photo = None
        if user_data.bio_photo:
            bio_photo = decode_image_data_uri(user_data.bio_photo, field="profile photo")

        new_user = User(
            username=user_data.username,
            hashed_password=hash_password(user_data.password),
            mantra=user_data.mantra,
            bio_photo=bio_photo
        )
        db.add(new_user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username already exists.")
    except Exception:
        db.rollback()
        raise

    db.refresh(new_user)
    logger.info(f"Registered user {new_user.id} ({new_user.username})")
    return new_user, issue_token(new_user.id, new_user.username)


def authenticate_user(username: str, password: str, db: Session) -> Tuple[User, str]:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.debug(f"Failed login for username {username!r}")
        raise Unauthorized("Invalid username or password.")
    return user, issue_token(user.id, user.username)


def _require_self(user_id: int, current_user: User, message: str) -> None:
    if user_id != current_user.id:
        raise Forbidden(message)


def update_user(user_id: int, update: UserUpdate, current_user: User, db: Session) -> User:
    """Owner-only edit of username, mantra and (flagged) profile photo."""
    _require_self(user_id, current_user, "You can only edit your own profile.")

    try:
        if update.username is not None and update.username != current_user.username:
            taken = db.query(User).filter(
                User.username == update.username,
                User.id != current_user.id
            ).first()
            if taken:
                raise Conflict("Username is already taken.")
            current_user.username = update.username

        if update.mantra is not None:
            current_user.mantra = update.mantra

        if update.bio_photo_changed:
            current_user.bio_photo = (
                decode_image_data_uri(update.bio_photo, field="profile photo")
                if update.bio_photo else None
            )

        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username is already taken.")
    except Exception:
        db.rollback()
        raise

    db.refresh(current_user)
    return current_user


def get_profile(user_id: int, current_user: User, db: Session) -> ProfileResponse:
    """Hosted trips, joined trips and reviews received as host."""
    _require_self(user_id, current_user, "You can only view your own profile data.")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found.")

    hosted_trips = db.query(Trip).filter(
        Trip.host_id == user_id
    ).order_by(Trip.start_date.desc(), Trip.id.desc()).all()

    joined_trips = db.query(Trip).join(
        TripParticipant, TripParticipant.trip_id == Trip.id
    ).filter(
        TripParticipant.user_id == user_id,
        Trip.host_id != user_id
    ).order_by(Trip.start_date.desc(), Trip.id.desc()).all()

    hosted_reviews = db.query(Review).join(
        Trip, Review.trip_id == Trip.id
    ).options(
        contains_eager(Review.trip),
        joinedload(Review.author)
    ).filter(
        Trip.host_id == user_id
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()

    return ProfileResponse(
        user=user_summary(user),
        hosted_trips=[TripBrief.model_validate(t) for t in hosted_trips],
        joined_trips=[TripBrief.model_validate(t) for t in joined_trips],
        hosted_reviews=[
            HostedReviewResponse(
                **review_to_response(r).model_dump(),
                trip=TripBrief.model_validate(r.trip)
            )
            for r in hosted_reviews
        ]
    )


def get_my_trips(current_user: User, db: Session) -> List[TripResponse]:
    """Every trip the caller takes part in, hosted ones included."""
    participant_count = participant_count_subquery()
    rows = db.query(Trip, participant_count.label("participant_count")).join(
        TripParticipant, TripParticipant.trip_id == Trip.id
    ).options(
        joinedload(Trip.host)
    ).filter(
        TripParticipant.user_id == current_user.id
    ).order_by(Trip.start_date.desc(), Trip.id.desc()).all()

    return [trip_to_response(trip, count) for trip, count in rows]
