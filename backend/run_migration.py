"""
Run pending schema migrations against the configured database.
"""
import sys
import os

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.db.migrations import add_review_uniqueness

MIGRATIONS = [
    add_review_uniqueness,
]


def run():
    """Apply every migration in order; each one is idempotent."""
    for migration in MIGRATIONS:
        print(f"Running {migration.__name__}...")
        migration.migrate()


if __name__ == "__main__":
    run()
