"""
Playbook step models and data structures

Defines the step configuration, the normalized extra variables, inventory
references and the invocation descriptor handed to the runner.
"""

import os
import re
import sys
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, TextIO

from ansible_step.core.exceptions import ConfigurationError
from ansible_step.credentials.models import Credential

DEFAULT_BECOME_USER = "root"
DEFAULT_FORKS = 5

ENV_REFERENCE = re.compile(r"\$(\w+)|\$\{([\w.]+)\}")


def fix_empty_and_trim(value: str | None) -> str | None:
    """Trim a string, returning None when nothing is left"""
    if value is None:
        return None
    value = value.strip()
    return value or None


def expand_env(value: str, env: Mapping[str, str]) -> str:
    """
    Expand $VAR and ${VAR} references from env

    References to unset variables are left as written. A `$` that does not
    start a reference is kept literally; there is no `$$` escape.
    """

    def replace(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        return env.get(name, match.group(0))

    return ENV_REFERENCE.sub(replace, value)


@dataclass(frozen=True)
class StepConfiguration:
    """
    User-supplied parameters of one playbook step

    Optional strings are normalized to None when empty after trimming.
    Immutable after construction.

    Attributes:
        playbook: Path of the playbook to run (required)
        inventory: Inventory file path; None lets ansible use its default
        installation_name: Named Ansible installation; None uses PATH
        credentials_id: Credential vault entry used to connect to hosts
        privilege_escalation: Run tasks with --become
        privilege_escalation_user: User to become
        host_limit: --limit pattern
        tags_filter: --tags filter
        skip_tags_filter: --skip-tags filter
        start_at_task: --start-at-task name
        extra_variables_raw: Mapping of scalars or {value, hidden} records
        additional_arguments: Extra command line arguments, appended verbatim
        colorized_output: Force colored ansible output
        parallelism: Number of forks (must be >= 1)
    """

    playbook: str
    inventory: str | None = None
    installation_name: str | None = None
    credentials_id: str | None = None
    privilege_escalation: bool = False
    privilege_escalation_user: str = DEFAULT_BECOME_USER
    host_limit: str | None = None
    tags_filter: str | None = None
    skip_tags_filter: str | None = None
    start_at_task: str | None = None
    extra_variables_raw: Mapping[str, Any] | None = None
    additional_arguments: str | None = None
    colorized_output: bool = False
    parallelism: int = DEFAULT_FORKS

    def __post_init__(self) -> None:
        playbook = fix_empty_and_trim(self.playbook) if isinstance(self.playbook, str) else None
        if playbook is None:
            raise ConfigurationError("Playbook must be a non-empty string", field="playbook")
        object.__setattr__(self, "playbook", playbook)

        for name in (
            "inventory",
            "installation_name",
            "credentials_id",
            "host_limit",
            "tags_filter",
            "skip_tags_filter",
            "start_at_task",
            "additional_arguments",
        ):
            object.__setattr__(self, name, fix_empty_and_trim(getattr(self, name)))

        become_user = fix_empty_and_trim(self.privilege_escalation_user)
        object.__setattr__(self, "privilege_escalation_user", become_user or DEFAULT_BECOME_USER)

        if self.extra_variables_raw is not None:
            object.__setattr__(
                self, "extra_variables_raw", MappingProxyType(dict(self.extra_variables_raw))
            )

    def validate(self) -> None:
        """
        Validate static configuration

        Raises:
            ConfigurationError: If a field holds an unusable value
        """
        if isinstance(self.parallelism, bool) or not isinstance(self.parallelism, int):
            raise ConfigurationError(
                f"Forks must be an integer, got {self.parallelism!r}", field="parallelism"
            )
        if self.parallelism < 1:
            raise ConfigurationError(
                f"Forks must be at least 1, got {self.parallelism}", field="parallelism"
            )


@dataclass(frozen=True)
class ExtraVariable:
    """
    A single extra variable passed with -e

    Hidden values never appear in logs or echoed command lines.
    """

    key: str
    value: str
    hidden: bool = False

    def __repr__(self) -> str:
        value = "********" if self.hidden else repr(self.value)
        return f"ExtraVariable(key={self.key!r}, value={value}, hidden={self.hidden})"


class Inventory(ABC):
    """
    Reference to the hosts targeted by an invocation

    Subclasses turn themselves into the value of the -i argument for the
    lifetime of one process run.
    """

    @abstractmethod
    def materialize(self, workspace: Path, env: Mapping[str, str]) -> AbstractContextManager[str]:
        """
        Context manager yielding the inventory argument

        Args:
            workspace: Directory the process runs in
            env: Environment of the invocation
        """


@dataclass(frozen=True)
class InventoryPath(Inventory):
    """Inventory stored in a file, relative to the workspace or absolute"""

    path: str

    @contextmanager
    def materialize(self, workspace: Path, env: Mapping[str, str]) -> Iterator[str]:
        yield expand_env(self.path, env)


@dataclass(frozen=True)
class InventoryContent(Inventory):
    """
    Inline inventory, written to a temporary file for the run

    Attributes:
        content: Inventory text
        dynamic: Mark the file executable so ansible runs it as a script
    """

    content: str
    dynamic: bool = False

    @contextmanager
    def materialize(self, workspace: Path, env: Mapping[str, str]) -> Iterator[str]:
        fd, name = tempfile.mkstemp(prefix="inventory", suffix=".ini", dir=workspace)
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self.content)
            path.chmod(0o700 if self.dynamic else 0o600)
            yield str(path)
        finally:
            path.unlink(missing_ok=True)


@dataclass(frozen=True)
class InvocationDescriptor:
    """
    Fully resolved parameters of one ansible-playbook run

    Built and consumed within a single orchestration call.
    """

    playbook: str
    inventory: Inventory | None
    executable: str
    credential: Credential | None = None
    become: bool = False
    become_user: str = DEFAULT_BECOME_USER
    limit: str | None = None
    tags: str | None = None
    skipped_tags: str | None = None
    start_at_task: str | None = None
    forks: int = DEFAULT_FORKS
    extra_vars: tuple[ExtraVariable, ...] | None = None
    additional_parameters: str | None = None
    colorized_output: bool = False
    host_key_checking: bool = False
    unbuffered_output: bool = True


@dataclass
class ExecutionContext:
    """
    Host-supplied execution context

    Attributes:
        workspace: Working directory of the run
        env: Environment variables for the process
        output: Sink receiving the streamed process output
        node: Label of the agent executing the step
    """

    workspace: Path
    env: dict[str, str] = field(default_factory=dict)
    output: TextIO = field(default_factory=lambda: sys.stdout)
    node: str = "local"
