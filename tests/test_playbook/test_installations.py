"""
Tests for named Ansible installations
"""

from pathlib import Path

import pytest

from ansible_step.core.exceptions import ConfigurationError
from ansible_step.playbook.installations import ToolInstallations


class TestToolInstallations:
    """Test installation lookup"""

    def test_default_uses_path(self):
        """Test that no installation name means the bare command"""
        assert ToolInstallations({}).executable(None) == "ansible-playbook"

    def test_named_installation(self):
        """Test that a registered name resolves inside its home"""
        installations = ToolInstallations({"ansible-9": "/opt/ansible-9/bin"})

        assert installations.executable("ansible-9") == str(
            Path("/opt/ansible-9/bin") / "ansible-playbook"
        )

    def test_other_tool(self):
        """Test resolving another executable from the same installation"""
        installations = ToolInstallations({"ansible-9": Path("/opt/ansible-9/bin")})

        assert installations.executable("ansible-9", tool="ansible-galaxy").endswith(
            "ansible-galaxy"
        )

    def test_unknown_installation(self):
        """Test that an unknown name lists the known ones"""
        installations = ToolInstallations({"b": Path("/b"), "a": Path("/a")})

        with pytest.raises(ConfigurationError) as exc_info:
            installations.executable("c")

        assert "a, b" in str(exc_info.value)

    def test_defaults_from_settings(self, monkeypatch):
        """Test that installations are read from settings by default"""
        from ansible_step.core import config

        monkeypatch.setattr(
            config, "_settings", config.Settings(installations={"local": Path("/usr/local/bin")})
        )

        assert ToolInstallations().names() == ["local"]
