"""
Shared API dependencies: bearer-token authentication.
"""
import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.exceptions import Unauthorized, InvalidToken
from app.core.security import read_token
from app.db.session import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False so a missing header becomes our own 401
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to the calling user; nothing is cached between requests."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    identity = read_token(credentials.credentials)
    if identity is None:
        logger.debug("Rejected bearer token: failed verification")
        raise InvalidToken()

    user = db.query(User).filter(User.id == identity.user_id).first()
    if user is None:
        raise InvalidToken()

    return user
