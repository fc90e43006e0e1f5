from dataclasses import dataclass
from typing import Awaitable, Optional, TypeVar

from app.features.auth.services.credential_store import CredentialStore
from app.features.auth.services.mail_sender import MailSender
from app.features.auth.services.verifier import (
    EmailCodeVerifier,
    TotpVerifier,
    VerificationResult,
    VerificationStatus,
    normalize_code,
)
from app.features.auth.utils.generators import generate_numeric_code, generate_totp_secret
from app.features.auth.utils.totp import build_otpauth_uri, render_qr_png
from app.platform.config import Settings
from app.platform.exceptions import GenerationFailure, StorageFailure
from app.platform.logger import get_logger
from app.platform.result import Err, ErrorKind, Result, err, ok

logger = get_logger(__name__)

T = TypeVar("T")

RETRY_MESSAGE = "Something went wrong, please try again"
ALREADY_ENABLED_MESSAGE = "Two-factor authentication is already enabled; disable it with a current code first"


@dataclass(frozen=True)
class IssuedCode:
    email: str
    expires_in: int


@dataclass(frozen=True)
class Enrollment:
    secret: str
    provisioning_uri: str
    qr_code: str
    expires_in: int


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def guard_storage(action: Awaitable[T], what: str) -> Result[T]:
    """Await ``action``, turning a ``StorageFailure`` into an ``Err``."""
    try:
        return ok(await action)
    except StorageFailure as e:
        logger.error(f"Storage failure while trying to {what}: {e}")
        return err(ErrorKind.STORAGE_FAILURE, RETRY_MESSAGE)


class TwoFactorService:
    """Email-code and authenticator flows on top of the store and verifiers.

    Generation, storage and delivery faults come back as ``Err``; a checked
    code comes back as ``Ok(VerificationResult)``, whatever its status.
    """

    def __init__(
        self,
        store: CredentialStore,
        mail_sender: MailSender,
        settings: Settings,
    ):
        self.store = store
        self.mail_sender = mail_sender
        self.settings = settings
        self.email_verifier = EmailCodeVerifier(store, max_attempts=settings.OTP_MAX_ATTEMPTS)
        self.totp_verifier = TotpVerifier(
            store,
            step=settings.TOTP_STEP_SECONDS,
            skew_steps=settings.TOTP_SKEW_STEPS,
            replay_protection=settings.TOTP_REPLAY_PROTECTION,
        )

    # ── email codes ────────────────────────────
    async def send_email_code(self, email: str) -> Result[IssuedCode]:
        email = normalize_email(email)
        ttl = self.settings.OTP_TTL_SECONDS
        try:
            code = generate_numeric_code()
        except GenerationFailure as e:
            logger.error(f"Could not generate verification code: {e}")
            return err(ErrorKind.GENERATION_FAILURE, RETRY_MESSAGE)

        stored = await guard_storage(self.store.put(email, code, ttl), "store a verification code")
        if not stored.ok:
            return stored

        try:
            delivered = await self.mail_sender.send(email, code, ttl)
        except Exception as e:
            logger.exception(f"Mail sender failed for {email}: {e}")
            delivered = False

        if not delivered:
            await guard_storage(self.store.delete(email), "discard an undelivered code")
            return err(ErrorKind.DELIVERY_FAILURE, "Failed to send verification email, please try again")

        logger.info(f"Verification code issued for {email}")
        return ok(IssuedCode(email=email, expires_in=ttl))

    async def verify_email_code(self, email: str, code: str) -> Result[VerificationResult]:
        return await guard_storage(
            self.email_verifier.verify(normalize_email(email), code),
            "verify an email code",
        )

    async def peek_email_code(self, email: str) -> Result[Optional[str]]:
        """Live code for ``email``; for local development only."""
        found = await guard_storage(self.store.get(normalize_email(email)), "read a verification code")
        if not found.ok:
            return found
        return ok(found.value.code if found.value else None)

    # ── authenticator app ──────────────────────
    async def _refuse_if_enabled(self, owner_key: str) -> Optional[Err]:
        """A live secret is only replaced after a code-checked ``disable_totp``."""
        enabled = await self.totp_enabled(owner_key)
        if not enabled.ok:
            return enabled
        if enabled.value:
            logger.warning(f"Refused to re-enroll {owner_key}: two-factor authentication is already enabled")
            return err(ErrorKind.ALREADY_ENABLED, ALREADY_ENABLED_MESSAGE)
        return None

    async def begin_totp_enrollment(self, owner_key: str, account_label: str) -> Result[Enrollment]:
        refused = await self._refuse_if_enabled(owner_key)
        if refused is not None:
            return refused

        ttl = self.settings.TOTP_ENROLLMENT_TTL_SECONDS
        try:
            secret = generate_totp_secret()
        except GenerationFailure as e:
            logger.error(f"Could not generate TOTP secret: {e}")
            return err(ErrorKind.GENERATION_FAILURE, RETRY_MESSAGE)

        stored = await guard_storage(
            self.store.put_pending_secret(owner_key, secret, ttl), "store a pending TOTP secret"
        )
        if not stored.ok:
            return stored

        uri = build_otpauth_uri(secret, account_label, issuer=self.settings.TOTP_ISSUER)
        logger.info(f"TOTP enrollment started for {owner_key}")
        return ok(Enrollment(
            secret=secret,
            provisioning_uri=uri,
            qr_code=render_qr_png(uri),
            expires_in=ttl,
        ))

    async def _confirm(self, owner_key: str, code: str) -> VerificationResult:
        if normalize_code(code) is None:
            return VerificationResult(VerificationStatus.INVALID_FORMAT)

        pending = await self.store.get_pending_secret(owner_key)
        if pending is None:
            return VerificationResult(VerificationStatus.NOT_FOUND_OR_EXPIRED)

        result = await self.totp_verifier.verify_with_secret(pending, code, owner_key=owner_key)
        if result.ok:
            await self.store.put_secret(owner_key, pending)
            await self.store.delete_pending_secret(owner_key)
            logger.info(f"Two-factor authentication enabled for {owner_key}")
        return result

    async def confirm_totp_enrollment(self, owner_key: str, code: str) -> Result[VerificationResult]:
        refused = await self._refuse_if_enabled(owner_key)
        if refused is not None:
            return refused
        return await guard_storage(self._confirm(owner_key, code), "confirm TOTP enrollment")

    async def verify_totp(self, owner_key: str, code: str) -> Result[VerificationResult]:
        return await guard_storage(self.totp_verifier.verify(owner_key, code), "verify a TOTP code")

    async def totp_enabled(self, owner_key: str) -> Result[bool]:
        found = await guard_storage(self.store.get_secret(owner_key), "read 2FA status")
        if not found.ok:
            return found
        return ok(found.value is not None)

    async def _disable(self, owner_key: str, code: str) -> VerificationResult:
        result = await self.totp_verifier.verify(owner_key, code)
        if result.ok:
            await self.store.delete_secret(owner_key)
            await self.store.delete_pending_secret(owner_key)
            logger.info(f"Two-factor authentication disabled for {owner_key}")
        return result

    async def disable_totp(self, owner_key: str, code: str) -> Result[VerificationResult]:
        """Revoke the live secret; ``code`` must come from that same secret."""
        return await guard_storage(self._disable(owner_key, code), "disable 2FA")
