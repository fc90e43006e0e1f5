from app.features.auth.schemas.signup import CaptchaVerifyRequest, SignupRequest
from app.features.auth.schemas.two_factor import (
    EnrollmentResponse,
    IssuedCodeResponse,
    SendCodeRequest,
    TotpCodeRequest,
    TotpSetupRequest,
    VerificationResponse,
    VerifyEmailCodeRequest,
)

__all__ = [
    "CaptchaVerifyRequest",
    "SignupRequest",
    "EnrollmentResponse",
    "IssuedCodeResponse",
    "SendCodeRequest",
    "TotpCodeRequest",
    "TotpSetupRequest",
    "VerificationResponse",
    "VerifyEmailCodeRequest",
]
