"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from eyemate.core.database import get_db
from eyemate.core.security import create_access_token, create_refresh_token, verify_refresh_token
from eyemate.core.dependencies import get_current_user
from eyemate.models.user import User
from eyemate.schemas.user import (
    UserCreate, UserProfile, LoginResponse, RefreshRequest, TokenResponse
)
from eyemate.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a new patient
    """
    auth_service = AuthService(db)

    if auth_service.get_user_by_national_id(user_data.national_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="National ID already registered"
        )
    if user_data.email and auth_service.get_user_by_email(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    return auth_service.register_patient(user_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Log in with national ID (or email) and password
    """
    auth_service = AuthService(db)

    user = auth_service.authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect national ID or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    auth_service.update_last_login(user.id)

    return {
        "access_token": create_access_token(data={"sub": str(user.id), "role": user.role.value}),
        "refresh_token": create_refresh_token(user.id),
        "token_type": "bearer",
        "user": user
    }


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    db: Session = Depends(get_db)
):
    """
    Exchange a refresh token for a new access token
    """
    user_id = verify_refresh_token(body.refresh_token)
    user = AuthService(db).get_user_by_id(user_id) if user_id else None

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "access_token": create_access_token(data={"sub": str(user.id), "role": user.role.value}),
        "token_type": "bearer"
    }


@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user)
):
    return current_user
