"""
Authentication routes for register, login and current user.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.user import UserCreate, UserLogin, UserSummary, AuthResponse
from app.models.user import User
from app.api.dependencies import get_current_user
from app.services.presenters import user_summary
from app.services.user_service import register_user, authenticate_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and return a bearer token."""
    user, token = register_user(user_data, db)
    return AuthResponse(user=user_summary(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user, token = authenticate_user(credentials.username, credentials.password, db)
    return AuthResponse(user=user_summary(user), token=token)


@router.get("/me", response_model=UserSummary)
def me(current_user: User = Depends(get_current_user)):
    """Resolve the bearer token to the current user."""
    return user_summary(current_user)
