"""
Application settings for the EyeMate API
"""
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings"""

    # Project
    PROJECT_NAME: str = Field(default="EyeMate Glaucoma API", env="PROJECT_NAME")
    VERSION: str = "2.0.0"
    ENVIRONMENT: str = Field(default="production", env="ENVIRONMENT")
    DEBUG: bool = Field(default=False, env="DEBUG")

    # Server
    HOST: str = Field(default="0.0.0.0", env="HOST")
    PORT: int = Field(default=5001, env="PORT")

    # Security
    SECRET_KEY: str = Field(default="change-me", env="SECRET_KEY")
    ALGORITHM: str = Field(default="HS256", env="ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, env="ACCESS_TOKEN_EXPIRE_MINUTES")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, env="REFRESH_TOKEN_EXPIRE_DAYS")

    # Database (MySQL / TiDB)
    DATABASE_URL: Optional[str] = Field(default=None, env="DATABASE_URL")
    DB_HOST: str = Field(default="localhost", env="DB_HOST")
    DB_PORT: int = Field(default=4000, env="DB_PORT")
    DB_NAME: str = Field(default="EyeMateDB", env="DB_NAME")
    DB_USER: str = Field(default="root", env="DB_USER")
    DB_PASSWORD: str = Field(default="", env="DB_PASSWORD")
    DB_CHARSET: str = Field(default="utf8mb4", env="DB_CHARSET")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173"
        ],
        env="CORS_ORIGINS"
    )

    # Web push (VAPID)
    VAPID_PUBLIC_KEY: str = Field(default="", env="VAPID_PUBLIC_KEY")
    VAPID_PRIVATE_KEY: str = Field(default="", env="VAPID_PRIVATE_KEY")
    VAPID_CLAIMS_EMAIL: str = Field(default="mailto:admin@eyemate.com", env="VAPID_CLAIMS_EMAIL")
    PUSH_ICON: str = Field(default="/icons/eyemate-icon-192.png", env="PUSH_ICON")
    PUSH_BADGE: str = Field(default="/icons/eyemate-badge-72.png", env="PUSH_BADGE")

    # Scheduler
    SCHEDULER_ENABLED: bool = Field(default=True, env="SCHEDULER_ENABLED")
    TIMEZONE: str = Field(default="Asia/Bangkok", env="TIMEZONE")
    MISSED_MEDICATION_GRACE_MINUTES: int = Field(default=15, env="MISSED_MEDICATION_GRACE_MINUTES")
    OVERDUE_APPOINTMENT_WINDOW_HOURS: int = Field(default=24, env="OVERDUE_APPOINTMENT_WINDOW_HOURS")

    # Clinical thresholds
    HIGH_IOP_THRESHOLD: float = Field(default=21.0, env="HIGH_IOP_THRESHOLD")

    # Files
    UPLOAD_FOLDER: str = Field(default="uploads/medical-docs", env="UPLOAD_FOLDER")
    MAX_FILE_SIZE: int = Field(default=10*1024*1024, env="MAX_FILE_SIZE")
    ALLOWED_UPLOAD_TYPES: List[str] = Field(
        default=[
            "application/pdf",
            "image/jpeg",
            "image/png",
        ],
        env="ALLOWED_UPLOAD_TYPES"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")

    @property
    def database_url(self) -> str:
        """Build the SQLAlchemy connection URL"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            f"?charset={self.DB_CHARSET}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()
