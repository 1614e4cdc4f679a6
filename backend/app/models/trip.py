"""
Trip model for the trip-sharing marketplace.
"""
from sqlalchemy import (
    Column, String, Date, DateTime, Integer, ForeignKey,
    Enum as SQLEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base, BaseModel, ImageBlob
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    UPCOMING = "Upcoming"
    FULL = "Full"
    CANCELLED = "Cancelled"
    CONCLUDED = "Concluded"

    @property
    def is_terminal(self) -> bool:
        """Terminal states freeze count-driven status recomputation."""
        return self in (TripStatus.CANCELLED, TripStatus.CONCLUDED)


class Trip(BaseModel):
    """Trip hosted by a user and joined by other users."""
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_trips_date_order"),
        CheckConstraint("min_participants >= 1", name="ck_trips_min_participants"),
        CheckConstraint("max_participants >= min_participants", name="ck_trips_capacity"),
    )

    title = Column(String(128), nullable=False)
    description = Column(String(255), nullable=False)
    destination = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    min_participants = Column(Integer, nullable=False)
    max_participants = Column(Integer, nullable=False)
    cover_photo = Column(ImageBlob, nullable=True)
    host_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        SQLEnum(TripStatus, values_callable=lambda e: [s.value for s in e]),
        default=TripStatus.UPCOMING,
        nullable=False,
        index=True
    )

    # Relationships
    host = relationship("User", back_populates="hosted_trips")
    participants = relationship(
        "TripParticipant", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True
    )
    reviews = relationship(
        "Review", back_populates="trip", cascade="all, delete-orphan", passive_deletes=True
    )


class TripParticipant(Base):
    """Junction table for Trip and User many-to-many relationship."""
    __tablename__ = "trip_participants"
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_participants_trip_user"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime, server_default=func.now(), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="participants")
    user = relationship("User", back_populates="trips")
