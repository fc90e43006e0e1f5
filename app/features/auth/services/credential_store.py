import time
from typing import Callable, Optional

from pydantic import ValidationError
from redis.exceptions import RedisError

from app.features.auth.models.credentials import OneTimeCode
from app.features.auth.utils.encryption import SecretCipher
from app.platform.cache.base import KeyValueBackend
from app.platform.exceptions import StorageFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)

CODE_PREFIX = "verification_code"
ATTEMPTS_PREFIX = "verification_attempts"
SECRET_PREFIX = "2fa_secret"
PENDING_SECRET_PREFIX = "2fa_pending"
LAST_STEP_PREFIX = "2fa_last_step"

BACKEND_ERRORS = (RedisError, OSError)


class CredentialStore:
    """Keyed storage for one live email code per subject and one TOTP secret per owner.

    Codes expire lazily: a read past ``issued_at + ttl`` deletes the record
    and reports it absent. Secrets never expire on their own.

    Failed attempts are counted under a separate key; the code record is
    written only by ``put``, so a failure can never restore a consumed code.

    Every backend error surfaces as ``StorageFailure``.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        clock: Callable[[], float] = time.time,
        cipher: Optional[SecretCipher] = None,
    ):
        self.backend = backend
        self.clock = clock
        self.cipher = cipher

    # ── backend wrappers ───────────────────────
    async def _read(self, key: str) -> Optional[str]:
        try:
            return await self.backend.get(key)
        except BACKEND_ERRORS as e:
            raise StorageFailure(f"Failed to read {key.split(':')[0]}: {e}") from e

    async def _write(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        try:
            await self.backend.set(key, value, ttl=ttl)
        except BACKEND_ERRORS as e:
            raise StorageFailure(f"Failed to write {key.split(':')[0]}: {e}") from e

    async def _increment(self, key: str, ttl: Optional[float] = None) -> int:
        try:
            return await self.backend.incr(key, ttl=ttl)
        except BACKEND_ERRORS as e:
            raise StorageFailure(f"Failed to update {key.split(':')[0]}: {e}") from e

    async def _remove(self, key: str) -> None:
        try:
            await self.backend.delete(key)
        except BACKEND_ERRORS as e:
            raise StorageFailure(f"Failed to delete {key.split(':')[0]}: {e}") from e

    # ── email codes ────────────────────────────
    async def put(self, subject_key: str, code: str, ttl: float) -> OneTimeCode:
        record = OneTimeCode(
            subject_key=subject_key,
            code=code,
            issued_at=self.clock(),
            ttl=ttl,
        )
        await self._write(f"{CODE_PREFIX}:{subject_key}", record.model_dump_json(), ttl=ttl)
        await self._remove(f"{ATTEMPTS_PREFIX}:{subject_key}")
        return record

    async def get(self, subject_key: str) -> Optional[OneTimeCode]:
        key = f"{CODE_PREFIX}:{subject_key}"
        raw = await self._read(key)
        if raw is None:
            return None

        try:
            record = OneTimeCode.model_validate_json(raw)
        except ValidationError as e:
            raise StorageFailure(f"Corrupt verification record for {subject_key}") from e

        if record.is_expired(self.clock()):
            logger.info(f"Verification code expired for {subject_key}")
            await self._remove(key)
            await self._remove(f"{ATTEMPTS_PREFIX}:{subject_key}")
            return None
        return record

    async def delete(self, subject_key: str) -> None:
        await self._remove(f"{CODE_PREFIX}:{subject_key}")
        await self._remove(f"{ATTEMPTS_PREFIX}:{subject_key}")

    async def record_failed_attempt(self, record: OneTimeCode) -> int:
        """Count one more failure against ``record``; returns the running total.

        The counter expires with the code and never extends it.
        """
        return await self._increment(
            f"{ATTEMPTS_PREFIX}:{record.subject_key}",
            ttl=max(record.remaining(self.clock()), 0.001),
        )

    async def failed_attempts(self, subject_key: str) -> int:
        raw = await self._read(f"{ATTEMPTS_PREFIX}:{subject_key}")
        try:
            return int(raw) if raw is not None else 0
        except ValueError as e:
            raise StorageFailure(f"Corrupt attempt counter for {subject_key}") from e

    # ── TOTP secrets ───────────────────────────
    def _seal(self, secret: str) -> str:
        return self.cipher.encrypt(secret) if self.cipher else secret

    def _unseal(self, stored: str) -> str:
        return self.cipher.decrypt(stored) if self.cipher else stored

    async def put_secret(self, owner_key: str, secret: str) -> None:
        await self._write(f"{SECRET_PREFIX}:{owner_key}", self._seal(secret))

    async def get_secret(self, owner_key: str) -> Optional[str]:
        stored = await self._read(f"{SECRET_PREFIX}:{owner_key}")
        return self._unseal(stored) if stored is not None else None

    async def delete_secret(self, owner_key: str) -> None:
        await self._remove(f"{SECRET_PREFIX}:{owner_key}")
        await self._remove(f"{LAST_STEP_PREFIX}:{owner_key}")

    async def put_pending_secret(self, owner_key: str, secret: str, ttl: float) -> None:
        await self._write(f"{PENDING_SECRET_PREFIX}:{owner_key}", self._seal(secret), ttl=ttl)

    async def get_pending_secret(self, owner_key: str) -> Optional[str]:
        stored = await self._read(f"{PENDING_SECRET_PREFIX}:{owner_key}")
        return self._unseal(stored) if stored is not None else None

    async def delete_pending_secret(self, owner_key: str) -> None:
        await self._remove(f"{PENDING_SECRET_PREFIX}:{owner_key}")

    async def get_last_totp_step(self, owner_key: str) -> Optional[int]:
        raw = await self._read(f"{LAST_STEP_PREFIX}:{owner_key}")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError as e:
            raise StorageFailure(f"Corrupt TOTP step marker for {owner_key}") from e

    async def set_last_totp_step(self, owner_key: str, step: int) -> None:
        await self._write(f"{LAST_STEP_PREFIX}:{owner_key}", str(step))
