"""
Ansible Step

Turns a declarative playbook step into a single ansible-playbook invocation.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from ansible_step.playbook.execution import PlaybookStepExecution
from ansible_step.playbook.models import (
    ExecutionContext,
    ExtraVariable,
    InvocationDescriptor,
    StepConfiguration,
)

__all__ = [
    "PlaybookStepExecution",
    "StepConfiguration",
    "ExtraVariable",
    "InvocationDescriptor",
    "ExecutionContext",
]
