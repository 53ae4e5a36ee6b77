"""
Secure credential storage with Fernet encryption
"""

from ansible_step.credentials.models import (
    Credential,
    CredentialKind,
    SSHPrivateKeyCredential,
    UsernamePasswordCredential,
)
from ansible_step.credentials.vault import CredentialVault, get_credential_vault

__all__ = [
    "CredentialVault",
    "get_credential_vault",
    "Credential",
    "CredentialKind",
    "SSHPrivateKeyCredential",
    "UsernamePasswordCredential",
]
