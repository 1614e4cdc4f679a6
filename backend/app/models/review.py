"""
Review model for concluded trips.
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Review(BaseModel):
    """Immutable rating left by a participant once a trip has concluded."""
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        UniqueConstraint("trip_id", "author_id", name="uq_reviews_trip_author"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="reviews")
    author = relationship("User", back_populates="reviews")
