import base64
import secrets

from app.platform.exceptions import GenerationFailure

NUMERIC_CODE_MIN = 100000
NUMERIC_CODE_MAX = 999999
TOTP_SECRET_BYTES = 20
# No I, O, 0 or 1: they are easy to misread in the rendered challenge
CAPTCHA_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CAPTCHA_LENGTH = 6


def generate_numeric_code() -> str:
    """Generate a 6-digit code for email verification.

    Drawn from [100000, 999999] so every code is exactly six digits
    without zero padding.
    """
    try:
        value = NUMERIC_CODE_MIN + secrets.randbelow(NUMERIC_CODE_MAX - NUMERIC_CODE_MIN + 1)
    except OSError as e:
        raise GenerationFailure(f"Random source unavailable: {e}") from e
    return str(value)


def generate_totp_secret() -> str:
    """Generate a TOTP shared secret: 20 random bytes as unpadded Base32 (32 chars)."""
    try:
        raw = secrets.token_bytes(TOTP_SECRET_BYTES)
    except OSError as e:
        raise GenerationFailure(f"Random source unavailable: {e}") from e
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def decode_totp_secret(secret: str) -> bytes:
    return base64.b32decode(secret + "=" * (-len(secret) % 8), casefold=True)


def generate_captcha_text(length: int = CAPTCHA_LENGTH) -> str:
    try:
        return "".join(secrets.choice(CAPTCHA_ALPHABET) for _ in range(length))
    except OSError as e:
        raise GenerationFailure(f"Random source unavailable: {e}") from e
