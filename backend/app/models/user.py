"""
User model for authentication and user management.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from app.db.base import BaseModel, ImageBlob


class User(BaseModel):
    """User model; only its owner may change username, mantra or photo."""
    __tablename__ = "users"

    username = Column(String(50), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    mantra = Column(String(128), nullable=False, default="")
    bio_photo = Column(ImageBlob, nullable=True)

    # Relationships
    hosted_trips = relationship(
        "Trip", back_populates="host", cascade="all, delete-orphan", passive_deletes=True
    )
    trips = relationship(
        "TripParticipant", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    # Reviews outlive their author: ON DELETE SET NULL
    reviews = relationship("Review", back_populates="author", passive_deletes=True)
