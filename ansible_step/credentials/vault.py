"""
Credential vault for secure local storage
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from ansible_step.core.config import get_data_dir, get_settings
from ansible_step.credentials.encryption import CredentialEncryption
from ansible_step.credentials.models import Credential

logger = logging.getLogger(__name__)

MASKED_SECRET = "<encrypted>"


class CredentialVault:
    """
    Secure credential storage with Fernet encryption

    Credentials are stored in <vault_path>/credentials.json (encrypted).
    Secret fields (password, private key, passphrase) are encrypted individually
    and the whole JSON document is encrypted again on disk.
    Encryption key is stored in <vault_path>/encryption.key
    """

    def __init__(self, vault_path: Path | None = None):
        """
        Initialize credential vault

        Args:
            vault_path: Path to vault directory. If None, uses settings or get_data_dir()
        """
        if vault_path is None:
            vault_path = get_settings().vault_path or get_data_dir()

        self.vault_path = vault_path
        self.credentials_file = vault_path / "credentials.json"
        self.encryption_key_path = vault_path / "encryption.key"
        self.encryption = CredentialEncryption(self.encryption_key_path)

        self.vault_path.mkdir(parents=True, exist_ok=True)

        if not self.credentials_file.exists():
            self._save_credentials_file({})

    def _save_credentials_file(self, data: dict) -> None:
        """Save credentials to encrypted file"""
        json_str = json.dumps(data, indent=2)
        encrypted = self.encryption.encrypt(json_str)

        self.credentials_file.write_text(encrypted)
        self.credentials_file.chmod(0o600)  # Owner read/write only

        logger.debug(f"Credentials saved to {self.credentials_file}")

    def _load_credentials_file(self) -> dict:
        """Load credentials from encrypted file"""
        if not self.credentials_file.exists():
            return {}

        encrypted = self.credentials_file.read_text()

        try:
            json_str = self.encryption.decrypt(encrypted)
            return json.loads(json_str)
        except Exception as e:
            logger.error(f"Failed to decrypt credentials: {e}")
            raise ValueError("Failed to decrypt credentials. Key may be corrupted.") from e

    def save_credential(self, credential: Credential) -> None:
        """
        Save or update a credential

        Args:
            credential: Credential to save
        """
        credentials_data = self._load_credentials_file()

        record = credential.to_dict()
        for secret in credential.secret_fields:
            if record[secret] is not None:
                record[secret] = self.encryption.encrypt(record[secret])

        if not record["created_at"]:
            record["created_at"] = datetime.now(UTC).isoformat()
        record["updated_at"] = datetime.now(UTC).isoformat()

        credentials_data[credential.name] = record

        self._save_credentials_file(credentials_data)
        logger.info(f"Credential '{credential.name}' ({credential.kind.value}) saved successfully")

    def get_credential(self, name: str) -> Credential | None:
        """
        Retrieve a credential by name

        Args:
            name: Credential name

        Returns:
            Credential object with decrypted secrets, or None if not found
        """
        credentials_data = self._load_credentials_file()

        if name not in credentials_data:
            logger.warning(f"Credential '{name}' not found")
            return None

        record = dict(credentials_data[name])
        credential = Credential.from_dict(record)
        for secret in credential.secret_fields:
            if record.get(secret) is not None:
                setattr(credential, secret, self.encryption.decrypt(record[secret]))
        return credential

    def list_credentials(self) -> list[Credential]:
        """
        List all stored credentials (without secrets)

        Returns:
            Credential objects with secret fields replaced by a placeholder
        """
        credentials = []
        for record in self._load_credentials_file().values():
            credential = Credential.from_dict(record)
            for secret in credential.secret_fields:
                if record.get(secret) is not None:
                    setattr(credential, secret, MASKED_SECRET)
            credentials.append(credential)

        return sorted(credentials, key=lambda c: c.name)

    def delete_credential(self, name: str) -> bool:
        """
        Delete a credential

        Returns:
            True if deleted, False if not found
        """
        credentials_data = self._load_credentials_file()

        if name not in credentials_data:
            logger.warning(f"Credential '{name}' not found for deletion")
            return False

        del credentials_data[name]
        self._save_credentials_file(credentials_data)

        logger.info(f"Credential '{name}' deleted")
        return True

    def credential_exists(self, name: str) -> bool:
        """Check if a credential exists"""
        return name in self._load_credentials_file()

    def initialize(self) -> None:
        """
        Initialize credential vault

        Creates vault directory and files if they don't exist.
        Safe to call multiple times (idempotent).
        """
        self.vault_path.mkdir(parents=True, exist_ok=True)

        if not self.encryption_key_path.exists():
            _ = self.encryption.fernet
            logger.info(f"Created new encryption key: {self.encryption_key_path}")

        if not self.credentials_file.exists():
            self._save_credentials_file({})
            logger.info(f"Created new credentials file: {self.credentials_file}")

        logger.info("Credential vault initialized")

    def test_encryption(self) -> bool:
        """
        Test encryption/decryption functionality

        Returns:
            True if encryption works correctly, False otherwise
        """
        test_string = "test_encryption_12345"

        try:
            decrypted = self.encryption.decrypt(self.encryption.encrypt(test_string))
        except Exception as e:
            logger.error(f"Encryption test failed: {e}")
            return False

        if decrypted != test_string:
            logger.error("Encryption test failed: decrypted value doesn't match original")
            return False

        logger.debug("Encryption test passed")
        return True


# Global vault instance (singleton)
_credential_vault: CredentialVault | None = None


def get_credential_vault(vault_path: Path | None = None) -> CredentialVault:
    """
    Get the global credential vault instance (singleton pattern)

    Args:
        vault_path: Path to vault directory (only used on first call)

    Returns:
        CredentialVault instance
    """
    global _credential_vault
    if _credential_vault is None:
        _credential_vault = CredentialVault(vault_path)
    return _credential_vault
