"""
Credential handling: bcrypt password verifier and stateless bearer tokens.

Tokens are HS256 JWTs carrying the user id (``sub``) and username. Nothing
is stored server-side; every request is verified from the token alone.
"""
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional
import hashlib
import bcrypt
from jose import JWTError, jwt
from app.core.config import settings


class TokenIdentity(NamedTuple):
    """Caller identity recovered from a verified bearer token."""
    user_id: int
    username: str


def _bcrypt_input(password: str) -> bytes:
    # bcrypt ignores bytes past 72; a SHA256 digest keeps long passwords distinct
    return hashlib.sha256(password.encode("utf-8")).digest()


def hash_password(password: str) -> str:
    """Produce the stored password verifier."""
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a login attempt; a corrupt stored hash never matches."""
    try:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def issue_token(user_id: int, username: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a bearer token for register and login responses."""
    lifetime = expires_delta if expires_delta is not None else timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    claims = {
        "sub": str(user_id),
        "username": username,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_token(token: str) -> Optional[TokenIdentity]:
    """
    Verify signature and expiry and return the identity inside.

    Returns None for any malformed, expired or badly signed token, and for
    tokens whose ``sub`` is not a user id.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return TokenIdentity(user_id=user_id, username=claims.get("username", ""))
