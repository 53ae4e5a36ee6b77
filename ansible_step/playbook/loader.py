"""
Step loader - YAML parsing into StepConfiguration

Accepts the ansiblePlaybook step parameter names:

    playbook: site.yml
    inventory: inventories/prod.ini
    credentialsId: deploy-key
    sudo: true
    forks: 10
    extraVars:
      release: "1.4.2"
      db_password:
        value: hunter2
        hidden: true

Snake-case StepConfiguration field names are accepted as well.
"""

from pathlib import Path
from typing import Any

import yaml

from ansible_step.core.exceptions import ConfigurationError
from ansible_step.playbook.exceptions import StepLoadError
from ansible_step.playbook.models import StepConfiguration

# Step parameter name -> StepConfiguration field
STEP_PARAMETERS: dict[str, str] = {
    "playbook": "playbook",
    "inventory": "inventory",
    "installation": "installation_name",
    "credentialsId": "credentials_id",
    "sudo": "privilege_escalation",
    "sudoUser": "privilege_escalation_user",
    "limit": "host_limit",
    "tags": "tags_filter",
    "skippedTags": "skip_tags_filter",
    "startAtTask": "start_at_task",
    "extraVars": "extra_variables_raw",
    "extras": "additional_arguments",
    "colorized": "colorized_output",
    "forks": "parallelism",
}

STRING_FIELDS = {
    "playbook",
    "inventory",
    "installation_name",
    "credentials_id",
    "privilege_escalation_user",
    "host_limit",
    "tags_filter",
    "skip_tags_filter",
    "start_at_task",
    "additional_arguments",
}
BOOLEAN_FIELDS = {"privilege_escalation", "colorized_output"}


class StepLoader:
    """
    Load step configurations from YAML

    Example:
        config = StepLoader.load_from_file(Path("deploy.step.yaml"))
    """

    @staticmethod
    def load_from_file(file_path: Path) -> StepConfiguration:
        """
        Load step configuration from YAML file

        Raises:
            StepLoadError: If the file cannot be read or parsed
            ConfigurationError: If the playbook is missing or empty
        """
        if not file_path.exists():
            raise StepLoadError("file not found", file_path=str(file_path))

        try:
            with open(file_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise StepLoadError(f"invalid YAML syntax: {e}", file_path=str(file_path)) from e
        except OSError as e:
            raise StepLoadError(f"error reading file: {e}", file_path=str(file_path)) from e

        return StepLoader.parse(data, str(file_path))

    @staticmethod
    def load_from_string(yaml_content: str) -> StepConfiguration:
        """
        Load step configuration from YAML string

        Raises:
            StepLoadError: If YAML cannot be parsed
            ConfigurationError: If the playbook is missing or empty
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise StepLoadError(f"invalid YAML syntax: {e}") from e

        return StepLoader.parse(data)

    @staticmethod
    def parse(data: Any, source: str = "") -> StepConfiguration:
        """
        Map a parsed step definition onto StepConfiguration

        Args:
            data: Parsed YAML document
            source: File path for error messages
        """
        if not isinstance(data, dict):
            raise StepLoadError("step definition must be a mapping", file_path=source)

        known_fields = set(STEP_PARAMETERS.values())
        seen: set[str] = set()
        kwargs: dict[str, Any] = {}
        for name, value in data.items():
            field_name = STEP_PARAMETERS.get(name, name)
            if field_name not in known_fields:
                raise StepLoadError(f"unknown step parameter '{name}'", file_path=source)
            if field_name in seen:
                raise StepLoadError(f"step parameter '{name}' given twice", file_path=source)
            seen.add(field_name)
            # null keeps the field default
            if value is not None:
                kwargs[field_name] = StepLoader._check_type(name, field_name, value, source)

        if "playbook" not in kwargs:
            raise ConfigurationError("Step must have a 'playbook' parameter", field="playbook")

        return StepConfiguration(**kwargs)

    @staticmethod
    def _check_type(name: str, field_name: str, value: Any, source: str) -> Any:
        """Reject values YAML produced with the wrong type"""
        if field_name in STRING_FIELDS:
            expected, ok = "a string", isinstance(value, str)
        elif field_name in BOOLEAN_FIELDS:
            expected, ok = "a boolean", isinstance(value, bool)
        elif field_name == "parallelism":
            expected, ok = "an integer", isinstance(value, int) and not isinstance(value, bool)
        else:
            expected, ok = "a mapping", isinstance(value, dict)

        if not ok:
            raise StepLoadError(
                f"parameter '{name}' must be {expected}, got {type(value).__name__}",
                file_path=source,
            )
        return value
