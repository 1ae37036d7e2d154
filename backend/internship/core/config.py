from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Internship Undertaking Service"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = ""  # e.g. "/api/v1"; empty serves /submissions at the root

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./internship.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_START_TLS: bool = True
    EMAIL_FROM: str = "internships@psgtech.ac.in"
    EMAIL_FROM_NAME: str = "Internship Cell"

    # ==========================================
    # Notifications (outbox dispatch)
    # ==========================================
    NOTIFICATION_DISPATCH_ON_REQUEST: bool = True
    NOTIFICATION_DISPATCH_INTERVAL_SECONDS: int = 60  # 0 disables the periodic loop
    NOTIFICATION_BATCH_SIZE: int = 50
    NOTIFICATION_MAX_ATTEMPTS: int = 5
    NOTIFICATION_CLAIM_TIMEOUT_SECONDS: int = 300

    # ==========================================
    # Frontend
    # ==========================================
    FRONTEND_URL: str = "http://localhost:5173"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    PDF_RATE_LIMIT: str = "10/(1 minute)"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ==========================================
    # Submissions & Cohorts
    # ==========================================
    COHORT_PREFIX_LENGTH: int = 4  # students sharing the first N email characters form a class
    ADMIN_OVERVIEW_PUBLIC: bool = True  # False restricts the overview to admin principals

    # ==========================================
    # Undertaking Document
    # ==========================================
    INSTITUTION_NAME: str = "PSG COLLEGE OF TECHNOLOGY, COIMBATORE 641 004"
    INSTITUTION_SHORT_NAME: str = "PSG College of Technology"
    INSTITUTION_CITY: str = "Coimbatore – 641004"
    UNDERTAKING_TITLE: str = "Undertaking for Pursuing Internship in the 7th Semester (MSc)"
    DEFAULT_PROJECT_REMARKS: str = "20XWP1 - Project Work I"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG


# Create settings instance
settings = Settings()
