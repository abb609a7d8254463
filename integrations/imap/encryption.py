"""Seed password encryption utilities"""
import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.config import get_settings


class CredentialEncryptor:
    """Encrypt/decrypt seed mailbox passwords using Fernet symmetric encryption"""

    def __init__(self, secret_key: str | None = None, salt: str | None = None):
        settings = get_settings()
        self._fernet = Fernet(
            self._derive_key(
                secret_key or settings.secret_key,
                salt or settings.encryption_salt,
            )
        )

    @staticmethod
    def _derive_key(secret_key: str, salt: str) -> bytes:
        """
        Derive the Fernet key from the app secret_key using PBKDF2.

        PBKDF2-HMAC-SHA256, 100,000 iterations, deployment-specific salt;
        Fernet requires the 32-byte result base64url-encoded.
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt.encode(),
            iterations=100_000,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret_key.encode()))

    def encrypt(self, password: str) -> str:
        """
        Encrypt a mailbox password.

        Args:
            password: Plaintext IMAP password or app password

        Returns:
            Encrypted string safe for database storage
        """
        return self._fernet.encrypt(password.encode()).decode()

    def decrypt(self, encrypted_str: str) -> str:
        """
        Decrypt a stored mailbox password.

        Raises:
            ValueError: If the token is invalid or was encrypted with another key
        """
        try:
            return self._fernet.decrypt(encrypted_str.encode()).decode()
        except InvalidToken as e:
            raise ValueError(
                "Failed to decrypt seed password - invalid or corrupted data"
            ) from e
