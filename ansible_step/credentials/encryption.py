"""
Credential encryption using Fernet (symmetric encryption)
"""

import logging
from pathlib import Path

from cryptography.fernet import Fernet

logger = logging.getLogger(__name__)


class CredentialEncryption:
    """
    Handles encryption/decryption of vault contents using Fernet

    The key file is created on first use with owner-only permissions.
    Loss of the key means loss of all stored credentials.
    """

    def __init__(self, key_path: Path):
        """
        Initialize encryption handler

        Args:
            key_path: Path to encryption key file
        """
        self.key_path = key_path
        self._fernet: Fernet | None = None

    def _ensure_key_exists(self) -> None:
        """Create encryption key if it doesn't exist"""
        if self.key_path.exists():
            return

        logger.info(f"Generating new encryption key: {self.key_path}")
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        self.key_path.write_bytes(Fernet.generate_key())
        self.key_path.chmod(0o600)

    @property
    def fernet(self) -> Fernet:
        """Get Fernet cipher instance (lazy-loaded)"""
        if self._fernet is None:
            self._ensure_key_exists()
            self._fernet = Fernet(self.key_path.read_bytes())
        return self._fernet

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt plaintext string

        Returns:
            Base64-encoded encrypted string
        """
        return self.fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, encrypted: str) -> str:
        """
        Decrypt encrypted string

        Raises:
            cryptography.fernet.InvalidToken: If decryption fails
        """
        return self.fernet.decrypt(encrypted.encode()).decode()
