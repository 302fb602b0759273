"""
Authentication service
"""
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional
import logging

from eyemate.models.patient import Patient
from eyemate.models.user import User, UserRole
from eyemate.schemas.user import UserCreate
from eyemate.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """User lookup, registration and credential checks"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_national_id(self, national_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.national_id == national_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def register_patient(self, user_data: UserCreate) -> User:
        """Create the user account and its patient profile together"""
        db_user = User(
            national_id=user_data.national_id,
            email=user_data.email,
            name=user_data.name,
            hashed_password=get_password_hash(user_data.password),
            role=UserRole.PATIENT,
            phone=user_data.phone,
            address=user_data.address,
            date_of_birth=user_data.date_of_birth,
        )
        db_user.patient = Patient(
            glaucoma_type=user_data.glaucoma_type,
            primary_hospital=user_data.primary_hospital,
        )

        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)

        logger.info(f"Patient registered: user {db_user.id}")
        return db_user

    def authenticate_user(self, identifier: str, password: str) -> Optional[User]:
        """Check credentials; ``identifier`` is a national ID or an email"""
        user = self.get_user_by_national_id(identifier) or self.get_user_by_email(identifier)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def update_last_login(self, user_id: int):
        user = self.get_user_by_id(user_id)
        if user:
            user.last_login = datetime.now(timezone.utc)
            self.db.commit()
