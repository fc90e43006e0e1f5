from app.features.auth.utils.generators import (
    generate_captcha_text,
    generate_numeric_code,
    generate_totp_secret,
)
from app.features.auth.utils.totp import build_otpauth_uri, totp_at

__all__ = [
    "generate_captcha_text",
    "generate_numeric_code",
    "generate_totp_secret",
    "build_otpauth_uri",
    "totp_at",
]
