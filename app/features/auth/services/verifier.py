import hmac
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.features.auth.services.credential_store import CredentialStore
from app.features.auth.utils.totp import (
    DEFAULT_DIGITS,
    DEFAULT_STEP_SECONDS,
    codes_equal,
    current_time_step,
    totp_at,
)
from app.platform.logger import get_logger
from app.platform.result import ErrorKind

logger = get_logger(__name__)

CODE_PATTERN = re.compile(r"[0-9]{6}")


class VerificationStatus(str, Enum):
    SUCCESS = "success"
    INVALID_FORMAT = "invalid_format"
    NOT_FOUND_OR_EXPIRED = "not_found_or_expired"
    MISMATCH = "mismatch"
    # TOTP code from a step that was already accepted; shown to users as a mismatch
    REPLAYED = "replayed"


_ERROR_KINDS = {
    VerificationStatus.INVALID_FORMAT: ErrorKind.INVALID_FORMAT,
    VerificationStatus.NOT_FOUND_OR_EXPIRED: ErrorKind.NOT_FOUND_OR_EXPIRED,
    VerificationStatus.MISMATCH: ErrorKind.MISMATCH,
    VerificationStatus.REPLAYED: ErrorKind.MISMATCH,
}


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    # Step that matched, for TOTP successes
    time_step: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is VerificationStatus.SUCCESS

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return _ERROR_KINDS.get(self.status)

    def __bool__(self) -> bool:
        return self.ok


def normalize_code(code: Optional[str]) -> Optional[str]:
    """Return the stripped code if it is exactly six ASCII digits, else None."""
    if not isinstance(code, str):
        return None
    code = code.strip()
    return code if CODE_PATTERN.fullmatch(code) else None


class EmailCodeVerifier:
    """Single-use verification of emailed codes.

    A match deletes the record. A mismatch leaves it for another try until
    it expires, or until ``max_attempts`` failures purge it (0 disables that).
    """

    def __init__(self, store: CredentialStore, max_attempts: int = 5):
        self.store = store
        self.max_attempts = max_attempts

    async def verify(self, subject_key: str, code: str) -> VerificationResult:
        supplied = normalize_code(code)
        if supplied is None:
            return VerificationResult(VerificationStatus.INVALID_FORMAT)

        record = await self.store.get(subject_key)
        if record is None:
            logger.info(f"No live verification code for {subject_key}")
            return VerificationResult(VerificationStatus.NOT_FOUND_OR_EXPIRED)

        if hmac.compare_digest(record.code.encode(), supplied.encode()):
            await self.store.delete(subject_key)
            logger.info(f"Verification code accepted for {subject_key}")
            return VerificationResult(VerificationStatus.SUCCESS)

        failures = await self.store.record_failed_attempt(record)
        if self.max_attempts > 0 and failures >= self.max_attempts:
            await self.store.delete(subject_key)
            logger.warning(
                f"Verification code for {subject_key} discarded after {self.max_attempts} failed attempts"
            )
        else:
            logger.info(f"Verification code mismatch for {subject_key}")
        return VerificationResult(VerificationStatus.MISMATCH)


class TotpVerifier:
    """Checks authenticator codes against the owner's stored secret.

    Accepts the current step and up to ``skew_steps`` earlier steps. With
    ``replay_protection`` the newest accepted step is remembered per owner
    and codes at or before it are refused.
    """

    def __init__(
        self,
        store: CredentialStore,
        step: int = DEFAULT_STEP_SECONDS,
        digits: int = DEFAULT_DIGITS,
        skew_steps: int = 1,
        replay_protection: bool = True,
    ):
        self.store = store
        self.step = step
        self.digits = digits
        self.skew_steps = max(0, skew_steps)
        self.replay_protection = replay_protection

    def candidate_steps(self, now: float) -> list[int]:
        current = current_time_step(now, self.step)
        return [current - offset for offset in range(self.skew_steps + 1)]

    def match_step(self, secret: str, code: str, now: float) -> Optional[int]:
        for time_step in self.candidate_steps(now):
            if codes_equal(totp_at(secret, time_step, digits=self.digits), code):
                return time_step
        return None

    async def verify_with_secret(
        self, secret: str, code: str, owner_key: Optional[str] = None
    ) -> VerificationResult:
        supplied = normalize_code(code)
        if supplied is None:
            return VerificationResult(VerificationStatus.INVALID_FORMAT)

        matched = self.match_step(secret, supplied, self.store.clock())
        if matched is None:
            return VerificationResult(VerificationStatus.MISMATCH)

        if owner_key is not None and self.replay_protection:
            last_step = await self.store.get_last_totp_step(owner_key)
            if last_step is not None and matched <= last_step:
                logger.warning(f"Replayed TOTP code for {owner_key} at step {matched}")
                return VerificationResult(VerificationStatus.REPLAYED, time_step=matched)
            await self.store.set_last_totp_step(owner_key, matched)

        return VerificationResult(VerificationStatus.SUCCESS, time_step=matched)

    async def verify(self, owner_key: str, code: str) -> VerificationResult:
        if normalize_code(code) is None:
            return VerificationResult(VerificationStatus.INVALID_FORMAT)

        secret = await self.store.get_secret(owner_key)
        if secret is None:
            return VerificationResult(VerificationStatus.NOT_FOUND_OR_EXPIRED)

        result = await self.verify_with_secret(secret, code, owner_key=owner_key)
        if result.ok:
            logger.info(f"TOTP code accepted for {owner_key}")
        return result
