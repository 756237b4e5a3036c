"""Auth routes — registration, login and token verification."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.auth import create_access_token, get_current_user
from backend.database import get_db
from backend.models import AuthResponse, LoginRequest, RegisterRequest, UserResponse, VerifyResponse
from backend.models_db import User
from backend.services.accounts import authenticate, register_user

router = APIRouter()


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, role=user.role)


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create a new user account."""
    user = register_user(db, body.name, body.email, body.password, body.role.value)
    return AuthResponse(
        message="User created successfully",
        token=create_access_token(user),
        user=_user_response(user),
    )


@router.post("/auth/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Login with email and password."""
    user = authenticate(db, body.email, body.password)
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user),
        user=_user_response(user),
    )


@router.post("/auth/verify", response_model=VerifyResponse)
async def verify(current_user: User = Depends(get_current_user)):
    """Resolve the bearer token to the current user."""
    return VerifyResponse(user=_user_response(current_user))
