"""
Trip lifecycle service: creation, capacity accounting and status transitions.

Every mutating function runs as one unit of work on the given session: it
locks the trip row, validates, writes and commits once. Any failure rolls
the session back before the error propagates, so no partial rows survive.

Status rules:
    Upcoming -> Full        join saturates max_participants
    Full -> Upcoming        leave or host removal frees a slot
    Upcoming/Full -> Cancelled | Concluded   host action, terminal
Terminal trips keep their status whatever the participant count.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from app.core.exceptions import ValidationError, Forbidden, NotFound, Conflict, InvalidState
from app.core.utils import decode_image_data_uri
from app.models.trip import Trip, TripParticipant, TripStatus
from app.models.user import User
from app.schemas.trip import TripCreate, TripUpdate, TripResponse, TripDetailResponse
from app.services.presenters import trip_to_response, participant_to_response
from app.services.review_service import list_reviews

logger = logging.getLogger(__name__)


def participant_count_subquery():
    """Correlated COUNT of participation rows for ``Trip``."""
    return (
        select(func.count(TripParticipant.id))
        .where(TripParticipant.trip_id == Trip.id)
        .correlate(Trip)
        .scalar_subquery()
    )


def count_participants(trip_id: int, db: Session) -> int:
    """Count participation rows for a trip, host included."""
    return db.query(func.count(TripParticipant.id)).filter(
        TripParticipant.trip_id == trip_id
    ).scalar()


def get_participation(trip_id: int, user_id: int, db: Session) -> Optional[TripParticipant]:
    return db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id,
        TripParticipant.user_id == user_id
    ).first()


def get_trip_or_404(trip_id: int, db: Session, lock: bool = False) -> Trip:
    """Load a trip, optionally with a row lock held until commit/rollback."""
    query = db.query(Trip).filter(Trip.id == trip_id)
    if lock:
        query = query.with_for_update()
    trip = query.first()
    if not trip:
        raise NotFound("Trip not found.")
    return trip


def derive_status(participant_count: int, max_participants: int) -> TripStatus:
    """Count-driven status for a trip that is not in a terminal state."""
    if participant_count >= max_participants:
        return TripStatus.FULL
    return TripStatus.UPCOMING


def _refresh_status(trip: Trip, db: Session) -> None:
    """Recompute a non-terminal trip's status inside the current transaction."""
    if trip.status.is_terminal:
        return
    new_status = derive_status(count_participants(trip.id, db), trip.max_participants)
    if new_status != trip.status:
        logger.info(f"Trip {trip.id} status {trip.status.value} -> {new_status.value}")
        trip.status = new_status


def _validate_schedule(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationError("End date cannot be before start date.")


def _validate_capacity(min_participants: int, max_participants: int) -> None:
    if min_participants < 1:
        raise ValidationError("Minimum participants must be at least 1.")
    if max_participants < min_participants:
        raise ValidationError("Maximum participants cannot be less than minimum participants.")


def _require_host(trip: Trip, user: User, action: str) -> None:
    if trip.host_id != user.id:
        logger.warning(f"User {user.id} tried to {action} trip {trip.id} without being host")
        raise Forbidden(f"Only the host can {action} this trip.")


def create_trip(trip_data: TripCreate, host: User, db: Session) -> Trip:
    """Persist a new Upcoming trip with its host as the first participant."""
    _validate_schedule(trip_data.start_date, trip_data.end_date)
    _validate_capacity(trip_data.min_participants, trip_data.max_participants)

    try:
        cover_photo = None
        if trip_data.cover_photo:
            cover_photo = decode_image_data_uri(trip_data.cover_photo, field="cover photo")

        new_trip = Trip(
            title=trip_data.title,
            description=trip_data.description,
            destination=trip_data.destination,
            start_date=trip_data.start_date,
            end_date=trip_data.end_date,
            min_participants=trip_data.min_participants,
            max_participants=trip_data.max_participants,
            cover_photo=cover_photo,
            host_id=host.id,
            status=TripStatus.UPCOMING
        )
        db.add(new_trip)
        db.flush()

        # Host is always the first participant
        db.add(TripParticipant(trip_id=new_trip.id, user_id=host.id))
        db.flush()
        # A trip capped at one person is full from the start
        _refresh_status(new_trip, db)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(new_trip)
    logger.info(f"User {host.id} created trip {new_trip.id}")
    return new_trip


def list_trips(
    db: Session,
    search: Optional[str] = None,
    status: Optional[TripStatus] = None,
    has_slots: bool = False
) -> List[TripResponse]:
    """List trips newest first with optional text, status and open-slot filters."""
    participant_count = participant_count_subquery()
    query = db.query(Trip, participant_count.label("participant_count")).options(
        joinedload(Trip.host)
    )

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Trip.title.ilike(pattern), Trip.destination.ilike(pattern)))
    if status:
        query = query.filter(Trip.status == status)
    if has_slots:
        query = query.filter(
            Trip.status == TripStatus.UPCOMING,
            participant_count < Trip.max_participants
        )

    rows = query.order_by(Trip.created_at.desc(), Trip.id.desc()).all()
    return [trip_to_response(trip, count) for trip, count in rows]


def get_trip_detail(trip_id: int, db: Session) -> TripDetailResponse:
    """Trip with its participants (join order) and reviews (newest first)."""
    trip = get_trip_or_404(trip_id, db)

    participants = db.query(TripParticipant).options(
        joinedload(TripParticipant.user)
    ).filter(
        TripParticipant.trip_id == trip_id
    ).order_by(TripParticipant.joined_at, TripParticipant.id).all()

    summary = trip_to_response(trip, len(participants))
    return TripDetailResponse(
        **summary.model_dump(),
        participants=[participant_to_response(p, trip.host_id) for p in participants],
        reviews=list_reviews(trip_id, db)
    )


def update_trip(trip_id: int, update: TripUpdate, user: User, db: Session) -> Trip:
    """
    Host-only edit.

    Omitted fields keep their values; dates and capacity are validated on the
    merged result. An explicit status must be terminal or match the count;
    otherwise a live trip's status follows the (possibly new) capacity.
    """
    try:
        trip = get_trip_or_404(trip_id, db, lock=True)
        _require_host(trip, user, "edit")

        changes = {
            field: value
            for field, value in update.model_dump(
                exclude_unset=True,
                exclude={"cover_photo", "cover_photo_changed", "status"}
            ).items()
            if value is not None
        }

        start_date = changes.get("start_date", trip.start_date)
        end_date = changes.get("end_date", trip.end_date)
        min_participants = changes.get("min_participants", trip.min_participants)
        max_participants = changes.get("max_participants", trip.max_participants)
        _validate_schedule(start_date, end_date)
        _validate_capacity(min_participants, max_participants)

        participant_count = count_participants(trip.id, db)
        if max_participants < participant_count:
            raise ValidationError(
                f"Maximum participants cannot be below the current {participant_count} participants."
            )

        requested = update.status
        if requested is not None and requested != trip.status:
            if trip.status.is_terminal:
                raise InvalidState(f"Trip is already {trip.status.value.lower()}.")
            if not requested.is_terminal and requested != derive_status(participant_count, max_participants):
                raise InvalidState(
                    f"Trip cannot be {requested.value} with {participant_count} of {max_participants} participants."
                )

        if update.cover_photo_changed:
            trip.cover_photo = (
                decode_image_data_uri(update.cover_photo, field="cover photo")
                if update.cover_photo else None
            )

        for field, value in changes.items():
            setattr(trip, field, value)

        if requested is not None and requested != trip.status:
            logger.info(f"Trip {trip.id} status {trip.status.value} -> {requested.value} by edit")
            trip.status = requested
        else:
            _refresh_status(trip, db)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(trip)
    return trip


def _close_trip(trip_id: int, user: User, target: TripStatus, action: str, db: Session) -> Trip:
    try:
        trip = get_trip_or_404(trip_id, db, lock=True)
        _require_host(trip, user, action)
        if trip.status.is_terminal:
            raise InvalidState(f"Trip is already {trip.status.value.lower()}.")
        trip.status = target
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(trip)
    logger.info(f"Trip {trip.id} {target.value.lower()} by host {user.id}")
    return trip


def cancel_trip(trip_id: int, user: User, db: Session) -> Trip:
    """Host moves a live trip to Cancelled."""
    return _close_trip(trip_id, user, TripStatus.CANCELLED, "cancel", db)


def conclude_trip(trip_id: int, user: User, db: Session) -> Trip:
    """Host moves a live trip to Concluded, opening it for reviews."""
    return _close_trip(trip_id, user, TripStatus.CONCLUDED, "conclude", db)


def join_trip(trip_id: int, user: User, db: Session) -> None:
    """
    Add the caller as a participant.

    Joins are hard-capped: the capacity check, insert and status flip happen
    under the trip row lock in one transaction.
    """
    try:
        trip = get_trip_or_404(trip_id, db, lock=True)
        if trip.status.is_terminal:
            raise InvalidState(f"Cannot join a {trip.status.value.lower()} trip.")
        if get_participation(trip_id, user.id, db):
            raise Conflict("You have already joined this trip.")
        if count_participants(trip_id, db) >= trip.max_participants:
            raise InvalidState("Trip is full.")

        db.add(TripParticipant(trip_id=trip_id, user_id=user.id))
        db.flush()
        _refresh_status(trip, db)
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent join by the same user
        db.rollback()
        raise Conflict("You have already joined this trip.")
    except Exception:
        db.rollback()
        raise

    logger.info(f"User {user.id} joined trip {trip_id}")


def _drop_participant(trip: Trip, participation: TripParticipant, db: Session) -> None:
    db.delete(participation)
    db.flush()
    _refresh_status(trip, db)


def leave_trip(trip_id: int, user: User, db: Session) -> None:
    """Remove the caller from a live trip; the host must cancel or conclude instead."""
    try:
        trip = get_trip_or_404(trip_id, db, lock=True)
        if trip.host_id == user.id:
            raise Forbidden("The host cannot leave their own trip. Cancel or conclude it instead.")
        participation = get_participation(trip_id, user.id, db)
        if not participation:
            raise NotFound("You are not a participant of this trip.")
        if trip.status.is_terminal:
            raise InvalidState(f"Cannot leave a {trip.status.value.lower()} trip.")

        _drop_participant(trip, participation, db)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"User {user.id} left trip {trip_id}")


def remove_participant(trip_id: int, participant_id: int, user: User, db: Session) -> None:
    """Host removes another participant from a live trip."""
    try:
        trip = get_trip_or_404(trip_id, db, lock=True)
        _require_host(trip, user, "remove participants from")
        if participant_id == trip.host_id:
            raise Forbidden("The host cannot be removed from their own trip.")
        if trip.status.is_terminal:
            raise InvalidState(
                f"Cannot remove participants from a {trip.status.value.lower()} trip."
            )
        participation = get_participation(trip_id, participant_id, db)
        if not participation:
            raise NotFound("Participant not found.")

        _drop_participant(trip, participation, db)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Host {user.id} removed user {participant_id} from trip {trip_id}")
