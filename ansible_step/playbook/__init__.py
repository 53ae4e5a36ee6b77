"""
Playbook step invocation

This module provides:
- Step configuration and YAML loading
- Extra variable normalization with secrecy flags
- Invocation orchestration with credential resolution
- The default ansible-playbook runner
"""

from ansible_step.playbook.exceptions import (
    CredentialNotFoundError,
    ExternalProcessFailure,
    InvocationError,
    MalformedVariableError,
    StepLoadError,
)
from ansible_step.playbook.execution import PlaybookStepExecution
from ansible_step.playbook.extra_vars import normalize_extra_vars
from ansible_step.playbook.installations import ToolInstallations
from ansible_step.playbook.loader import StepLoader
from ansible_step.playbook.models import (
    ExecutionContext,
    ExtraVariable,
    Inventory,
    InventoryContent,
    InventoryPath,
    InvocationDescriptor,
    StepConfiguration,
)
from ansible_step.playbook.runner import AnsiblePlaybookRunner

__all__ = [
    "StepConfiguration",
    "ExtraVariable",
    "Inventory",
    "InventoryPath",
    "InventoryContent",
    "InvocationDescriptor",
    "ExecutionContext",
    "StepLoader",
    "ToolInstallations",
    "PlaybookStepExecution",
    "AnsiblePlaybookRunner",
    "normalize_extra_vars",
    "InvocationError",
    "MalformedVariableError",
    "CredentialNotFoundError",
    "ExternalProcessFailure",
    "StepLoadError",
]
