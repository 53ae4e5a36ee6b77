"""
Default ansible-playbook runner

Formats the command line, writes the short-lived secret and inventory files,
spawns the process in the workspace and streams its output to the sink.
Hidden extra variable values are masked in everything written to the sink.
"""

import json
import logging
import os
import shlex
import subprocess
import tempfile
from collections.abc import Iterable, Iterator, Mapping
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import TextIO

from ansible_step.core.config import get_settings
from ansible_step.credentials.models import SSHPrivateKeyCredential, UsernamePasswordCredential
from ansible_step.playbook.exceptions import ExternalProcessFailure
from ansible_step.playbook.models import ExecutionContext, InvocationDescriptor, expand_env

logger = logging.getLogger(__name__)

MASK = "********"
SSHPASS_EXECUTABLE = "sshpass"
COMMAND_NOT_FOUND = 127


def mask_text(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of each secret with the mask"""
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


@contextmanager
def secret_file(workspace: Path, content: str, prefix: str) -> Iterator[Path]:
    """
    Write content to an owner-only temporary file in the workspace

    The file is removed when the context exits, whatever the outcome.
    """
    fd, name = tempfile.mkstemp(prefix=prefix, dir=workspace)
    path = Path(name)
    try:
        os.chmod(path, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        yield path
    finally:
        path.unlink(missing_ok=True)


class AnsiblePlaybookRunner:
    """
    Run ansible-playbook as a child process

    Example:
        runner = AnsiblePlaybookRunner()
        exit_code = runner.perform(descriptor, context)
    """

    def __init__(self, kill_timeout: float | None = None):
        """
        Args:
            kill_timeout: Seconds to wait after terminate() before kill()
        """
        if kill_timeout is None:
            kill_timeout = get_settings().kill_timeout_seconds
        self.kill_timeout = kill_timeout

    def perform(self, descriptor: InvocationDescriptor, context: ExecutionContext) -> int:
        """
        Run the invocation to completion

        Args:
            descriptor: Resolved invocation parameters
            context: Workspace, environment, output sink and node label

        Returns:
            Exit code of ansible-playbook

        Raises:
            ExternalProcessFailure: If the executable cannot be started
        """
        workspace = Path(context.workspace)
        secrets = self.hidden_values(descriptor, context.env)

        with ExitStack() as stack:
            inventory = None
            if descriptor.inventory is not None:
                inventory = stack.enter_context(
                    descriptor.inventory.materialize(workspace, context.env)
                )

            prefix: list[str] = []
            key_file = None
            credential = descriptor.credential
            if isinstance(credential, SSHPrivateKeyCredential):
                key_file = stack.enter_context(
                    secret_file(workspace, credential.private_key, "ssh")
                )
                if credential.passphrase:
                    passphrase_file = stack.enter_context(
                        secret_file(workspace, credential.passphrase, "phrase")
                    )
                    prefix = [SSHPASS_EXECUTABLE, "-P", "passphrase", "-f", str(passphrase_file)]
            elif isinstance(credential, UsernamePasswordCredential):
                password_file = stack.enter_context(
                    secret_file(workspace, credential.password, "pass")
                )
                prefix = [SSHPASS_EXECUTABLE, "-f", str(password_file)]

            command = prefix + self.build_arguments(descriptor, inventory, key_file, context.env)
            echoed = prefix + self.build_arguments(
                descriptor, inventory, key_file, context.env, masked=True
            )
            env = self.build_environment(descriptor, context)

            context.output.write(f"$ {shlex.join(echoed)}\n")
            context.output.flush()
            return self._run(command, env, workspace, context.output, secrets)

    def build_arguments(
        self,
        descriptor: InvocationDescriptor,
        inventory: str | None = None,
        key_file: Path | None = None,
        env: Mapping[str, str] | None = None,
        masked: bool = False,
    ) -> list[str]:
        """
        Build the ansible-playbook argument list

        Playbook, host and task filters, extra variable values and additional
        parameters are expanded against env. Each extra variable is passed as
        a one-key JSON object so ansible reads the value exactly, whatever
        whitespace, quotes or `=` it contains.

        Args:
            descriptor: Resolved invocation parameters
            inventory: Materialized inventory argument
            key_file: Private key file written for an SSH key credential
            env: Environment used for $VAR expansion
            masked: Replace hidden extra variable values with the mask

        Returns:
            Executable followed by its arguments
        """
        env = env or {}
        args = [descriptor.executable, expand_env(descriptor.playbook, env)]

        if inventory is not None:
            args += ["-i", inventory]
        if descriptor.limit:
            args += ["-l", expand_env(descriptor.limit, env)]
        if descriptor.tags:
            args += ["-t", expand_env(descriptor.tags, env)]
        if descriptor.skipped_tags:
            args += ["--skip-tags", expand_env(descriptor.skipped_tags, env)]
        if descriptor.start_at_task:
            args += ["--start-at-task", expand_env(descriptor.start_at_task, env)]
        args += ["-f", str(descriptor.forks)]
        if descriptor.become:
            args += ["-b", "--become-user", descriptor.become_user]

        credential = descriptor.credential
        if isinstance(credential, SSHPrivateKeyCredential) and key_file is not None:
            args += ["--private-key", str(key_file), "-u", credential.username]
        elif isinstance(credential, UsernamePasswordCredential):
            args += ["-u", credential.username, "-k"]

        for var in descriptor.extra_vars or ():
            value = MASK if masked and var.hidden else expand_env(var.value, env)
            args += ["-e", json.dumps({var.key: value}, ensure_ascii=False)]

        if descriptor.additional_parameters:
            args += shlex.split(expand_env(descriptor.additional_parameters, env))

        return args

    def build_environment(
        self, descriptor: InvocationDescriptor, context: ExecutionContext
    ) -> dict[str, str]:
        """Process environment: inherited, then context, then policy flags"""
        env = dict(os.environ)
        env.update(context.env)
        if not descriptor.host_key_checking:
            env["ANSIBLE_HOST_KEY_CHECKING"] = "False"
        if descriptor.unbuffered_output:
            env["PYTHONUNBUFFERED"] = "1"
        if descriptor.colorized_output:
            env["ANSIBLE_FORCE_COLOR"] = "true"
        return env

    @staticmethod
    def hidden_values(
        descriptor: InvocationDescriptor, env: Mapping[str, str] | None = None
    ) -> list[str]:
        """Expanded values that must never reach the output sink, longest first"""
        values = {
            expand_env(var.value, env or {})
            for var in descriptor.extra_vars or ()
            if var.hidden
        }
        return sorted((value for value in values if value), key=len, reverse=True)

    def _run(
        self,
        command: list[str],
        env: dict[str, str],
        workspace: Path,
        output: TextIO,
        secrets: list[str],
    ) -> int:
        """Spawn the process, stream its output, wait for the exit code"""
        try:
            process = subprocess.Popen(
                command,
                cwd=workspace,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {command[0]}")
            raise ExternalProcessFailure(
                COMMAND_NOT_FOUND, f"Cannot run '{command[0]}': {e.strerror}"
            ) from e

        logger.debug(f"Started process {process.pid}")
        try:
            for line in process.stdout:
                output.write(mask_text(line, secrets))
            exit_code = process.wait()
        except BaseException:
            logger.warning(f"Interrupted, terminating process {process.pid}")
            self._terminate(process)
            raise
        finally:
            process.stdout.close()

        output.flush()
        logger.debug(f"Process {process.pid} exited with code {exit_code}")
        return exit_code

    def _terminate(self, process: subprocess.Popen) -> None:
        process.terminate()
        try:
            process.wait(timeout=self.kill_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {process.pid} did not exit, killing it")
            process.kill()
            process.wait()
