"""
Credential data models

Two kinds of secrets can back a playbook invocation: an SSH private key or a
username/password pair. Both carry the remote username.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import ClassVar


class CredentialKind(str, Enum):
    """Kind of stored credential"""

    SSH_PRIVATE_KEY = "ssh_private_key"
    USERNAME_PASSWORD = "username_password"


@dataclass
class Credential:
    """
    Base class for stored credentials

    Attributes:
        name: Unique identifier for the credential (the step's credentials id)
        username: Remote username
        description: Optional description
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    kind: ClassVar[CredentialKind]
    secret_fields: ClassVar[tuple[str, ...]] = ()

    name: str
    username: str
    description: str | None = field(default=None, kw_only=True)
    created_at: datetime | None = field(default=None, kw_only=True)
    updated_at: datetime | None = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        """Set timestamps if not provided"""
        now = datetime.now(UTC)
        if self.created_at is None:
            self.created_at = now
        if self.updated_at is None:
            self.updated_at = now

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        data = {
            "kind": self.kind.value,
            "name": self.name,
            "username": self.username,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        for secret in self.secret_fields:
            data[secret] = getattr(self, secret)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Credential":
        """Create the matching credential subclass from a dictionary"""
        kind = CredentialKind(data.get("kind", CredentialKind.USERNAME_PASSWORD.value))
        credential_cls = _CREDENTIAL_CLASSES[kind]

        created_at = None
        updated_at = None
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])
        if data.get("updated_at"):
            updated_at = datetime.fromisoformat(data["updated_at"])

        secrets = {secret: data.get(secret) for secret in credential_cls.secret_fields}
        return credential_cls(
            name=data["name"],
            username=data["username"],
            description=data.get("description"),
            created_at=created_at,
            updated_at=updated_at,
            **secrets,
        )


@dataclass
class UsernamePasswordCredential(Credential):
    """Username and password, passed to ssh through sshpass"""

    kind: ClassVar[CredentialKind] = CredentialKind.USERNAME_PASSWORD
    secret_fields: ClassVar[tuple[str, ...]] = ("password",)

    password: str = ""

    def __repr__(self) -> str:
        return f"UsernamePasswordCredential(name={self.name!r}, username={self.username!r})"


@dataclass
class SSHPrivateKeyCredential(Credential):
    """
    SSH private key in PEM/OpenSSH format

    Attributes:
        private_key: Key material
        passphrase: Optional key passphrase
    """

    kind: ClassVar[CredentialKind] = CredentialKind.SSH_PRIVATE_KEY
    secret_fields: ClassVar[tuple[str, ...]] = ("private_key", "passphrase")

    private_key: str = ""
    passphrase: str | None = None

    def __repr__(self) -> str:
        return f"SSHPrivateKeyCredential(name={self.name!r}, username={self.username!r})"


_CREDENTIAL_CLASSES: dict[CredentialKind, type[Credential]] = {
    CredentialKind.USERNAME_PASSWORD: UsernamePasswordCredential,
    CredentialKind.SSH_PRIVATE_KEY: SSHPrivateKeyCredential,
}
