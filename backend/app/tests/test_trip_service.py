"""
Service-level tests for transactional behaviour and cascades.
"""
import pytest
from datetime import date
from app.core.exceptions import ValidationError, Conflict, InvalidState, Forbidden
from app.core.security import hash_password
from app.models import User, Trip, TripParticipant, TripStatus, Review
from app.schemas.trip import TripCreate
from app.services import trip_service


def _user(db, username):
    user = User(username=username, hashed_password=hash_password("pw"), mantra="...")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _trip_data(**overrides):
    data = {
        "title": "Lake weekend",
        "description": "Canoes and campfires.",
        "destination": "Lake Bled",
        "start_date": date(2031, 7, 1),
        "end_date": date(2031, 7, 3),
        "min_participants": 1,
        "max_participants": 3,
    }
    data.update(overrides)
    return TripCreate(**data)


def test_create_trip_counts_exactly_one_participant(db):
    host = _user(db, "host")
    trip = trip_service.create_trip(_trip_data(), host, db)
    assert trip.status == TripStatus.UPCOMING
    assert trip_service.count_participants(trip.id, db) == 1


def test_create_trip_with_bad_photo_leaves_no_rows(db):
    host = _user(db, "host")
    with pytest.raises(ValidationError):
        trip_service.create_trip(_trip_data(cover_photo="data:image/png;base64,!!!"), host, db)
    assert db.query(Trip).count() == 0
    assert db.query(TripParticipant).count() == 0


def test_create_trip_validation_order(db):
    host = _user(db, "host")
    # Bad dates are reported before bad capacity
    with pytest.raises(ValidationError, match="End date"):
        trip_service.create_trip(
            _trip_data(end_date=date(2031, 6, 1), min_participants=3, max_participants=2), host, db
        )
    assert db.query(Trip).count() == 0


def test_single_seat_trip_starts_full(db):
    host = _user(db, "host")
    trip = trip_service.create_trip(_trip_data(max_participants=1), host, db)
    assert trip.status == TripStatus.FULL


def test_status_follows_membership(db):
    host = _user(db, "host")
    guests = [_user(db, f"guest{i}") for i in range(3)]
    trip = trip_service.create_trip(_trip_data(max_participants=3), host, db)

    trip_service.join_trip(trip.id, guests[0], db)
    db.refresh(trip)
    assert trip.status == TripStatus.UPCOMING

    trip_service.join_trip(trip.id, guests[1], db)
    db.refresh(trip)
    assert trip.status == TripStatus.FULL

    with pytest.raises(InvalidState):
        trip_service.join_trip(trip.id, guests[2], db)

    trip_service.remove_participant(trip.id, guests[1].id, host, db)
    db.refresh(trip)
    assert trip.status == TripStatus.UPCOMING
    assert trip_service.count_participants(trip.id, db) == 2


def test_existing_participation_conflicts(db):
    host = _user(db, "host")
    guest = _user(db, "guest")
    trip = trip_service.create_trip(_trip_data(), host, db)
    db.add(TripParticipant(trip_id=trip.id, user_id=guest.id))
    db.commit()

    with pytest.raises(Conflict):
        trip_service.join_trip(trip.id, guest, db)
    assert trip_service.count_participants(trip.id, db) == 2


def test_concluded_trip_ignores_count_changes(db):
    host = _user(db, "host")
    guest = _user(db, "guest")
    trip = trip_service.create_trip(_trip_data(max_participants=2), host, db)
    trip_service.join_trip(trip.id, guest, db)
    trip_service.conclude_trip(trip.id, host, db)

    with pytest.raises(InvalidState):
        trip_service.remove_participant(trip.id, guest.id, host, db)
    with pytest.raises(InvalidState):
        trip_service.cancel_trip(trip.id, host, db)
    db.refresh(trip)
    assert trip.status == TripStatus.CONCLUDED


def test_host_leave_is_forbidden(db):
    host = _user(db, "host")
    trip = trip_service.create_trip(_trip_data(), host, db)
    with pytest.raises(Forbidden):
        trip_service.leave_trip(trip.id, host, db)
    assert trip_service.count_participants(trip.id, db) == 1


def test_deleting_trip_cascades(db):
    host = _user(db, "host")
    guest = _user(db, "guest")
    trip = trip_service.create_trip(_trip_data(), host, db)
    trip_service.join_trip(trip.id, guest, db)
    trip_service.conclude_trip(trip.id, host, db)
    db.add(Review(trip_id=trip.id, author_id=guest.id, rating=5, comment="Loved it"))
    db.commit()

    db.delete(trip)
    db.commit()
    assert db.query(TripParticipant).count() == 0
    assert db.query(Review).count() == 0


def test_deleting_author_keeps_review(db):
    host = _user(db, "host")
    guest = _user(db, "guest")
    trip = trip_service.create_trip(_trip_data(), host, db)
    trip_service.join_trip(trip.id, guest, db)
    trip_service.conclude_trip(trip.id, host, db)
    db.add(Review(trip_id=trip.id, author_id=guest.id, rating=4, comment="Good"))
    db.commit()

    db.delete(guest)
    db.commit()
    db.expire_all()

    review = db.query(Review).one()
    assert review.author_id is None
    assert trip_service.count_participants(trip.id, db) == 1

    detail = trip_service.get_trip_detail(trip.id, db)
    assert detail.reviews[0].author is None
