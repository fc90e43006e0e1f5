from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Buds Auth"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True
    LOG_DIR: str = "logs"

    # ── Credential storage ──────────────────────
    # Unset REDIS_URL means the in-memory backend is used
    REDIS_URL: Optional[str] = None
    FORCE_IN_MEMORY_STORE: bool = False
    # Fernet key for TOTP secrets at rest
    ENCRYPTION_KEY: Optional[str] = None

    # ── Email one-time codes ────────────────────
    OTP_TTL_SECONDS: int = 600  # 10 minutes
    OTP_MAX_ATTEMPTS: int = 5  # 0 disables lockout
    OTP_SEND_LIMIT_PER_MINUTE: int = 3

    # ── TOTP ────────────────────────────────────
    TOTP_ISSUER: str = "Buds"
    TOTP_STEP_SECONDS: int = 30
    TOTP_SKEW_STEPS: int = 1
    TOTP_REPLAY_PROTECTION: bool = True
    TOTP_ENROLLMENT_TTL_SECONDS: int = 600

    # ── Signup ──────────────────────────────────
    CAPTCHA_LENGTH: int = 6
    SIGNUP_MIN_AGE: int = 21

    # ── Email Configuration ─────────────────────
    MAIL_DEMO_MODE: bool = True
    MAIL_HOST: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_USERNAME: str = "your-email-id"
    MAIL_PASSWORD: str = "your-password"
    MAIL_ENCRYPTION: str = "tls"
    MAIL_FROM_ADDRESS: str = "example@localhost"
    MAIL_FROM_NAME: str = "Buds"

    EMAIL_RELAY_URL: str = ""
    EMAIL_RELAY_API_KEY: str = ""
    EMAIL_RELAY_TIMEOUT: int = 30

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
