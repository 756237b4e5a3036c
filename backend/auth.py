"""Authentication utilities — JWT tokens, password hashing and identity dependencies."""
import os
from datetime import datetime, timezone, timedelta
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from backend.database import get_db
from backend.models_db import User
from ideaengine.errors import ExpiredToken, InvalidToken

# JWT config
SECRET_KEY = os.getenv("JWT_SECRET", "ideaforge-dev-secret-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7

# bcrypt cost factor; only lowered in tests
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
# bcrypt ignores input past 72 bytes and newer releases reject it outright
_BCRYPT_MAX_BYTES = 72

# Security scheme
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    secret = plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(secret, hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT, returning its claims.

    Raises:
        ExpiredToken: signature is valid but the token is past its expiry.
        InvalidToken: anything else wrong with the token.
    """
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise ExpiredToken() from None
    except JWTError:
        raise InvalidToken("Invalid or expired token") from None
    if not claims.get("userId"):
        raise InvalidToken()
    return claims


def resolve_identity(token: str, db: Session) -> User:
    """Verify a token and re-read the identity it names.

    The stored row is authoritative: role changes and deleted accounts take
    effect on the next verification, whatever the token claims.
    """
    claims = decode_token(token)
    user = db.query(User).filter(User.id == claims["userId"]).first()
    if not user:
        raise InvalidToken()
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """FastAPI dependency — require valid JWT, return user."""
    if not credentials:
        raise InvalidToken("Access token required")
    return resolve_identity(credentials.credentials, db)


async def optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """FastAPI dependency — return user if token valid, None otherwise."""
    if not credentials:
        return None
    try:
        return resolve_identity(credentials.credentials, db)
    except (InvalidToken, ExpiredToken):
        return None
