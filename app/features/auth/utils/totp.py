"""TOTP helpers built on pyotp.

Codes are derived on demand from ``(secret, time_step)`` and never stored.
"""

import base64
from io import BytesIO
from urllib.parse import quote

import pyotp
import qrcode
from pyotp.utils import strings_equal

DEFAULT_STEP_SECONDS = 30
DEFAULT_DIGITS = 6


def current_time_step(now: float, step: int = DEFAULT_STEP_SECONDS) -> int:
    return int(now // step)


def hotp(secret: str, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """RFC 4226 HOTP value for ``counter``, zero padded to ``digits``."""
    return pyotp.HOTP(secret, digits=digits).at(counter)


def totp_at(secret: str, time_step: int, digits: int = DEFAULT_DIGITS) -> str:
    """TOTP code for an explicit time step (pure: same inputs, same code)."""
    return hotp(secret, time_step, digits=digits)


def codes_equal(expected: str, supplied: str) -> bool:
    return strings_equal(expected, supplied)


def build_otpauth_uri(secret: str, account_label: str, issuer: str = "Buds") -> str:
    """Enrollment URI for authenticator apps.

    ``otpauth://totp/{issuer}:{account_label}?secret={secret}&issuer={issuer}``;
    reserved characters in the label and issuer are percent-encoded, ``@`` is kept.
    """
    label = f"{quote(issuer, safe='')}:{quote(account_label, safe='@')}"
    return f"otpauth://totp/{label}?secret={secret}&issuer={quote(issuer, safe='')}"


def render_qr_png(uri: str) -> str:
    """Render ``uri`` as a base64 PNG data URI."""
    img = qrcode.make(uri)
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    qr_base64 = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{qr_base64}"
