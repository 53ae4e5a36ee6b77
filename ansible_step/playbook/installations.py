"""
Named Ansible installations

An installation maps a name to the directory holding the ansible executables,
so steps can pick a specific Ansible version.
"""

import logging
from collections.abc import Mapping
from pathlib import Path

from ansible_step.core.config import get_settings
from ansible_step.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PLAYBOOK_EXECUTABLE = "ansible-playbook"


class ToolInstallations:
    """
    Lookup of installation name -> executable path

    Example:
        installations = ToolInstallations({"ansible-9": Path("/opt/ansible-9/bin")})
        installations.executable("ansible-9")  # "/opt/ansible-9/bin/ansible-playbook"
        installations.executable(None)         # "ansible-playbook" (resolved from PATH)
    """

    def __init__(self, homes: Mapping[str, Path] | None = None):
        if homes is None:
            homes = get_settings().installations
        self.homes = {name: Path(home) for name, home in homes.items()}

    def names(self) -> list[str]:
        """Registered installation names"""
        return sorted(self.homes)

    def executable(self, name: str | None, tool: str = PLAYBOOK_EXECUTABLE) -> str:
        """
        Resolve the executable for an installation

        Args:
            name: Installation name, or None for the default tool on PATH
            tool: Executable name inside the installation directory

        Returns:
            Executable path or bare command name

        Raises:
            ConfigurationError: If the name is not registered
        """
        if name is None:
            return tool

        home = self.homes.get(name)
        if home is None:
            known = ", ".join(self.names()) or "none configured"
            raise ConfigurationError(
                f"Unknown Ansible installation '{name}' (known: {known})",
                field="installation_name",
                recovery_hint="Register the installation in the INSTALLATIONS setting",
            )

        executable = home / tool
        logger.debug(f"Using installation '{name}': {executable}")
        return str(executable)
