"""
Configuration management for the OTP auth service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Server Configuration
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"
    DB_TIMEOUT_SECONDS: int = 10

    # Session tokens
    JWT_SECRET_KEY: str = "your_secret"  # Override in any real deployment
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # One-time passcodes
    OTP_EXPIRE_MINUTES: int = 5

    # Mail sender
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_TIMEOUT_SECONDS: float = 10.0

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
