"""
Shared FastAPI dependencies
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from functools import lru_cache
from typing import Optional

from eyemate.core.database import get_db
from eyemate.core.security import verify_token
from eyemate.models.patient import Patient
from eyemate.models.user import User
from eyemate.services.auth_service import AuthService
from eyemate.services.push_service import PushGateway, PushService, WebPushGateway

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="api/auth/login",
    auto_error=False
)


async def get_current_user(
        token: Optional[str] = Depends(oauth2_scheme),
        db: Session = Depends(get_db)
) -> User:
    """
    Resolve the user from the bearer token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Access token required",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = verify_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    user = AuthService(db).get_user_by_id(int(user_id))
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    return user


async def get_current_patient(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
) -> Patient:
    """
    Require a PATIENT account with a patient profile
    """
    if not current_user.is_patient:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Patient role required."
        )

    patient = db.query(Patient).filter(Patient.user_id == current_user.id).first()
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient profile not found"
        )

    return patient


class PaginationParams:
    def __init__(self, skip: int = 0, limit: int = 50):
        self.skip = max(0, skip)
        self.limit = min(max(1, limit), 200)  # at most 200 rows per page


def get_pagination_params(skip: int = 0, limit: int = 50) -> PaginationParams:
    return PaginationParams(skip=skip, limit=limit)


@lru_cache()
def get_push_gateway() -> PushGateway:
    """Process-wide push gateway"""
    return WebPushGateway()


def get_push_service(
        db: Session = Depends(get_db),
        gateway: PushGateway = Depends(get_push_gateway)
) -> PushService:
    return PushService(db, gateway)
