"""
Core interfaces and protocols

Defines the collaborators the invocation orchestrator depends on, so hosts
can inject their own credential store or process runner.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ansible_step.credentials.models import Credential
    from ansible_step.playbook.models import ExecutionContext, InvocationDescriptor


class ICredentialStore(Protocol):
    """Protocol for credential store implementations"""

    def get_credential(self, name: str) -> "Credential | None":
        """
        Get a credential by name

        Returns:
            SSH private key or username/password credential, or None if not found
        """
        ...


class IPlaybookRunner(Protocol):
    """Protocol for playbook runner implementations"""

    def perform(self, descriptor: "InvocationDescriptor", context: "ExecutionContext") -> int:
        """
        Run the described invocation to completion

        The runner owns process creation, argument formatting, output streaming
        and masking of hidden extra variables.

        Returns:
            Process exit code
        """
        ...
