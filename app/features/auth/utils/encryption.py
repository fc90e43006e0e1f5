"""Fernet encryption for TOTP secrets at rest."""

from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from app.platform.exceptions import StorageFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)


class SecretCipher:
    def __init__(self, key: str | bytes):
        if isinstance(key, str):
            key = key.encode()
        self._fernet = Fernet(key)

    @classmethod
    def from_settings(cls, key: Optional[str]) -> Optional["SecretCipher"]:
        if not key:
            logger.warning("ENCRYPTION_KEY not set; TOTP secrets are stored unencrypted")
            return None
        return cls(key)

    def encrypt(self, plain_text: str) -> str:
        return self._fernet.encrypt(plain_text.encode()).decode()

    def decrypt(self, cipher_text: str) -> str:
        try:
            return self._fernet.decrypt(cipher_text.encode()).decode()
        except InvalidToken as e:
            raise StorageFailure("Stored secret could not be decrypted") from e
