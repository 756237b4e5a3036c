"""
User accounts: registration, login and administrative role changes.

Usage:
    user = register_user(db, "Ada", "ada@example.com", "secret1")
    user = authenticate(db, "ada@example.com", "secret1")
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.auth import hash_password, verify_password
from backend.models import Role
from backend.models_db import User
from ideaengine.errors import DuplicateIdentity, Forbidden, InvalidCredentials, NotFound, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Roles a caller may pick for themselves at registration
SELF_ASSIGNABLE_ROLES = {Role.EMPLOYEE.value, Role.MENTOR.value}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(db: Session, name: str, email: str, password: str, role: str = Role.EMPLOYEE.value) -> User:
    """Create a new account.

    Raises:
        ValidationError: missing fields or a password that is too short.
        Forbidden: the caller asked for a role that is granted administratively.
        DuplicateIdentity: the email is already registered.
    """
    name = (name or "").strip()
    email = normalize_email(email or "")
    if not name or not email or not password:
        raise ValidationError("All fields are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    role = Role(role).value
    if role not in SELF_ASSIGNABLE_ROLES:
        raise Forbidden(f"The {role} role can only be granted by an administrator")

    if find_by_email(db, email):
        raise DuplicateIdentity()

    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise DuplicateIdentity() from None
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for a valid email/password pair.

    Unknown emails and wrong passwords fail identically.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = find_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


def assign_role(db: Session, user_id: str, role: str) -> User:
    """Change a user's role. Takes effect the next time their token is verified."""
    role = Role(role).value
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    if user.role != role:
        logger.info("Changing role of user %s from %s to %s", user.id, user.role, role)
        user.role = role
        db.commit()
        db.refresh(user)
    return user
