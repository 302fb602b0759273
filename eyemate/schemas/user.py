"""
Pydantic schemas for users and authentication
"""
from pydantic import BaseModel, EmailStr, validator
from typing import Optional
from datetime import date, datetime
from eyemate.core.security import validate_national_id
from eyemate.models.user import UserRole


class UserCreate(BaseModel):
    """Patient self-registration"""
    national_id: str
    name: str
    password: str
    confirm_password: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    glaucoma_type: Optional[str] = None
    primary_hospital: Optional[str] = None

    @validator('national_id')
    def check_national_id(cls, v):
        v = v.replace("-", "").strip()
        if not validate_national_id(v):
            raise ValueError('Invalid national ID')
        return v

    @validator('confirm_password')
    def passwords_match(cls, v, values):
        if 'password' in values and v != values['password']:
            raise ValueError('Passwords do not match')
        return v

    @validator('password')
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters')
        return v


class UserProfile(BaseModel):
    id: int
    national_id: str
    name: str
    email: Optional[str] = None
    role: UserRole
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserProfile


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
