"""
Migration script to enforce one review per author per trip.
Run this against databases created before the reviews table carried the
(trip_id, author_id) unique constraint. Duplicate reviews are removed first,
keeping each author's earliest review.
"""
from typing import Optional
from sqlalchemy import inspect, text
from sqlalchemy.orm import Session
from app.db.session import SessionLocal

INDEX_NAME = "uq_reviews_trip_author"
COLUMNS = {"trip_id", "author_id"}


def has_review_uniqueness(db: Session) -> bool:
    """Check for a unique constraint or unique index over (trip_id, author_id)."""
    inspector = inspect(db.get_bind())
    for constraint in inspector.get_unique_constraints("reviews"):
        if set(constraint["column_names"]) == COLUMNS:
            return True
    for index in inspector.get_indexes("reviews"):
        if index.get("unique") and set(index["column_names"]) == COLUMNS:
            return True
    return False


def migrate(db: Optional[Session] = None):
    """De-duplicate reviews and add the unique index; safe to run twice."""
    owns_session = db is None
    db = db or SessionLocal()
    try:
        if has_review_uniqueness(db):
            print("reviews already unique per (trip_id, author_id), skipping")
            return

        # Derived table keeps MySQL from rejecting a subquery on the table being deleted from
        result = db.execute(text("""
            DELETE FROM reviews
            WHERE author_id IS NOT NULL
            AND id NOT IN (
                SELECT keep_id FROM (
                    SELECT MIN(id) AS keep_id
                    FROM reviews
                    WHERE author_id IS NOT NULL
                    GROUP BY trip_id, author_id
                ) AS keepers
            )
        """))
        print(f"Removed {result.rowcount} duplicate reviews")

        db.execute(text(f"CREATE UNIQUE INDEX {INDEX_NAME} ON reviews (trip_id, author_id)"))
        print(f"Created unique index {INDEX_NAME}")

        db.commit()
        print("Migration completed successfully!")
    except Exception as e:
        db.rollback()
        print(f"Migration failed: {e}")
        raise
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    migrate()
