"""
Playbook step execution

Turns a StepConfiguration into one InvocationDescriptor and hands it to the
runner. Single-shot and fail-fast: validation, installation, inventory,
credential, extra variables, then delegation. No retries, no output
interpretation.
"""

import logging

from ansible_step.core.interfaces import ICredentialStore, IPlaybookRunner
from ansible_step.credentials.models import Credential
from ansible_step.playbook.exceptions import CredentialNotFoundError, ExternalProcessFailure
from ansible_step.playbook.extra_vars import normalize_extra_vars
from ansible_step.playbook.installations import ToolInstallations
from ansible_step.playbook.models import (
    ExecutionContext,
    Inventory,
    InventoryPath,
    InvocationDescriptor,
    StepConfiguration,
)

logger = logging.getLogger(__name__)


class PlaybookStepExecution:
    """
    Invocation orchestrator for the ansiblePlaybook step

    Collaborators are injected; the instance holds no per-call state, so one
    execution object can serve concurrent calls.

    Example:
        execution = PlaybookStepExecution(
            credential_store=get_credential_vault(),
            runner=AnsiblePlaybookRunner(),
        )
        execution.execute(StepConfiguration(playbook="site.yml"), context)
    """

    def __init__(
        self,
        credential_store: ICredentialStore,
        runner: IPlaybookRunner,
        installations: ToolInstallations | None = None,
    ):
        """
        Args:
            credential_store: Resolves credentials ids
            runner: Spawns ansible-playbook and waits for it
            installations: Named installations (defaults to settings)
        """
        self.credential_store = credential_store
        self.runner = runner
        self.installations = installations if installations is not None else ToolInstallations()

    def execute(self, config: StepConfiguration, context: ExecutionContext) -> None:
        """
        Run the step to completion

        Args:
            config: Step configuration
            context: Host execution context (workspace, env, output sink, node)

        Raises:
            ConfigurationError: Invalid configuration or unknown installation
            CredentialNotFoundError: credentials_id has no match in the store
            MalformedVariableError: An extra variable entry is malformed
            ExternalProcessFailure: ansible-playbook exited non-zero
        """
        config.validate()

        descriptor = self.build_descriptor(config)

        logger.info(
            f"Running playbook '{descriptor.playbook}' on node '{context.node}' "
            f"(workspace: {context.workspace})"
        )
        exit_code = self.runner.perform(descriptor, context)
        if exit_code != 0:
            logger.error(f"Playbook '{descriptor.playbook}' failed with exit code {exit_code}")
            raise ExternalProcessFailure(exit_code)

        logger.info(f"Playbook '{descriptor.playbook}' completed successfully")

    def build_descriptor(self, config: StepConfiguration) -> InvocationDescriptor:
        """
        Resolve configuration into an invocation descriptor

        Args:
            config: Validated step configuration

        Returns:
            InvocationDescriptor with fixed policy flags applied
        """
        executable = self.installations.executable(config.installation_name)
        inventory = self.resolve_inventory(config)
        credential = self.resolve_credential(config.credentials_id)
        extra_vars = normalize_extra_vars(config.extra_variables_raw)

        return InvocationDescriptor(
            playbook=config.playbook,
            inventory=inventory,
            executable=executable,
            credential=credential,
            become=config.privilege_escalation,
            become_user=config.privilege_escalation_user,
            limit=config.host_limit,
            tags=config.tags_filter,
            skipped_tags=config.skip_tags_filter,
            start_at_task=config.start_at_task,
            forks=config.parallelism,
            extra_vars=tuple(extra_vars) if extra_vars is not None else None,
            additional_parameters=config.additional_arguments,
            colorized_output=config.colorized_output,
            host_key_checking=False,
            unbuffered_output=True,
        )

    def resolve_inventory(self, config: StepConfiguration) -> Inventory | None:
        """Inventory reference, or None to let ansible use its default"""
        if config.inventory is None:
            return None
        return InventoryPath(config.inventory)

    def resolve_credential(self, credentials_id: str | None) -> Credential | None:
        """
        Look up the credential only when an id is configured

        Raises:
            CredentialNotFoundError: If the store has no such credential
        """
        if credentials_id is None:
            return None

        credential = self.credential_store.get_credential(credentials_id)
        if credential is None:
            raise CredentialNotFoundError(credentials_id)

        logger.debug(f"Resolved credential '{credentials_id}' ({credential.kind.value})")
        return credential
