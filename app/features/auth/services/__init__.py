from app.features.auth.services.credential_store import CredentialStore
from app.features.auth.services.two_factor import TwoFactorService
from app.features.auth.services.verifier import (
    EmailCodeVerifier,
    TotpVerifier,
    VerificationResult,
    VerificationStatus,
)

__all__ = [
    "CredentialStore",
    "TwoFactorService",
    "EmailCodeVerifier",
    "TotpVerifier",
    "VerificationResult",
    "VerificationStatus",
]
