"""
User routes: profile aggregation, my trips and profile editing.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.schemas.profile import ProfileResponse
from app.schemas.trip import TripResponse
from app.schemas.user import UserSummary, UserUpdate
from app.models.user import User
from app.api.dependencies import get_current_user
from app.services import user_service
from app.services.presenters import user_summary

router = APIRouter(prefix="/users", tags=["users"])


# Declared before /{user_id} routes so "my-trips" is not parsed as an id
@router.get("/my-trips", response_model=List[TripResponse])
def get_my_trips(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all trips the current user hosts or has joined."""
    return user_service.get_my_trips(current_user, db)


@router.get("/{user_id}/profile", response_model=ProfileResponse)
def get_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get profile data: hosted trips, joined trips and reviews received."""
    return user_service.get_profile(user_id, current_user, db)


@router.put("/{user_id}", response_model=UserSummary)
def update_user(
    user_id: int,
    update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update your own profile."""
    user = user_service.update_user(user_id, update, current_user, db)
    return user_summary(user)
