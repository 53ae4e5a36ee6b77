"""
Playbook invocation exceptions

Every failure aborts the single invocation and carries enough context
(key, credential id, exit code) to diagnose without re-running.
"""

from typing import Any

from ansible_step.core.exceptions import ToolkitError


class InvocationError(ToolkitError):
    """
    Base exception for playbook invocation errors

    Attributes:
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        component: str = "Invocation",
        recovery_hint: str = "",
        context: dict[str, Any] | None = None,
    ):
        self.context = context or {}
        super().__init__(message, component=component, recovery_hint=recovery_hint)


class MalformedVariableError(InvocationError):
    """
    Extra variable entry has an unsupported shape or a missing field

    Attributes:
        key: Extra variable key that failed conversion
    """

    def __init__(self, key: Any, reason: str):
        self.key = key
        super().__init__(
            f"Malformed extra variable '{key}': {reason}",
            component="ExtraVars",
            recovery_hint="Use a scalar value or a record with both 'value' and 'hidden' fields",
            context={"key": key, "reason": reason},
        )


class CredentialNotFoundError(InvocationError):
    """
    Credentials id was given but the credential store has no match

    Attributes:
        credentials_id: The id that could not be resolved
    """

    def __init__(self, credentials_id: str):
        self.credentials_id = credentials_id
        super().__init__(
            f"Credential not found: {credentials_id}",
            component="Credentials",
            recovery_hint="Add the credential to the vault or fix credentialsId",
            context={"credentials_id": credentials_id},
        )


class ExternalProcessFailure(InvocationError):
    """
    ansible-playbook exited with a non-zero status

    Attributes:
        exit_code: Exit code of the external process
    """

    def __init__(self, exit_code: int, message: str = ""):
        self.exit_code = exit_code
        super().__init__(
            message or f"Ansible playbook execution failed with exit code {exit_code}",
            component="Runner",
            context={"exit_code": exit_code},
        )


class StepLoadError(InvocationError):
    """
    Error loading a step definition from YAML

    Attributes:
        file_path: Path to the step file, if loaded from disk
    """

    def __init__(self, message: str, file_path: str = ""):
        self.file_path = file_path

        location = f" from '{file_path}'" if file_path else ""
        super().__init__(
            f"Failed to load step{location}: {message}",
            component="Loader",
            recovery_hint="Check YAML syntax and step parameter names",
            context={"file_path": file_path},
        )
