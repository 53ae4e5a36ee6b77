"""
Base exception hierarchy

Provides a consistent exception structure across the package
with clear error messages and recovery hints.
"""


class ToolkitError(Exception):
    """
    Base exception for all ansible-step errors

    Attributes:
        message: Error message
        component: Component that raised the error
        recovery_hint: Optional hint for recovery
    """

    def __init__(self, message: str, component: str = "", recovery_hint: str = ""):
        self.message = message
        self.component = component
        self.recovery_hint = recovery_hint
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.component:
            msg = f"[{self.component}] {msg}"
        if self.recovery_hint:
            msg += f"\nRecovery: {self.recovery_hint}"
        return msg


class ConfigurationError(ToolkitError):
    """
    Invalid static configuration (empty playbook, forks < 1, unknown installation)

    Attributes:
        field: Name of the offending configuration field
    """

    def __init__(self, message: str, field: str = "", recovery_hint: str = ""):
        self.field = field
        super().__init__(
            message,
            component="Configuration",
            recovery_hint=recovery_hint or "Check the step configuration and settings",
        )
