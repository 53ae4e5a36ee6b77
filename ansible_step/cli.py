"""
Command-line interface for ansible-step
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ansible_step import __version__
from ansible_step.core.config import get_settings
from ansible_step.core.exceptions import ToolkitError
from ansible_step.playbook.exceptions import ExternalProcessFailure

console = Console()

USAGE_ERROR_EXIT = 2


def _setup_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=settings.log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """ansible-step - run a declarative ansible-playbook step"""
    _setup_logging()


@main.command()
@click.argument("step_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory the playbook runs in (default: current directory)",
)
@click.option("--node", default="local", help="Label of the executing node")
def run(step_file: Path, workspace: Path | None, node: str) -> None:
    """Run the playbook step described in STEP_FILE"""
    from ansible_step.credentials.vault import get_credential_vault
    from ansible_step.playbook.execution import PlaybookStepExecution
    from ansible_step.playbook.loader import StepLoader
    from ansible_step.playbook.models import ExecutionContext
    from ansible_step.playbook.runner import AnsiblePlaybookRunner

    context = ExecutionContext(
        workspace=(workspace or Path.cwd()).resolve(),
        env=dict(os.environ),
        output=sys.stdout,
        node=node,
    )

    try:
        config = StepLoader.load_from_file(step_file)
        execution = PlaybookStepExecution(
            credential_store=get_credential_vault(),
            runner=AnsiblePlaybookRunner(),
        )
        execution.execute(config, context)
    except ExternalProcessFailure as e:
        console.print(f"[bold red]✗[/bold red] {escape(str(e))}")
        sys.exit(e.exit_code)
    except ToolkitError as e:
        console.print(f"[bold red]✗[/bold red] {escape(str(e))}")
        sys.exit(USAGE_ERROR_EXIT)

    console.print("[bold green]✓ Playbook completed[/bold green]")


@main.command()
def init() -> None:
    """Initialize the credential vault"""
    from ansible_step.credentials.vault import get_credential_vault

    vault = get_credential_vault()
    vault.initialize()

    console.print(f"✓ Credential vault ready: [green]{vault.vault_path}[/green]")
    console.print(f"✓ Encryption key: [green]{vault.encryption_key_path}[/green]")
    console.print(
        "\n[yellow]Keep your encryption key safe! Loss of key = loss of credentials[/yellow]"
    )


@main.group()
def credentials() -> None:
    """Manage credentials used to connect to hosts"""


@credentials.command("add-password")
@click.argument("name")
@click.option("--username", "-u", required=True, help="Remote username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--description", default=None, help="Optional description")
def add_password(name: str, username: str, password: str, description: str | None) -> None:
    """Store a username/password credential as NAME"""
    from ansible_step.credentials.models import UsernamePasswordCredential
    from ansible_step.credentials.vault import get_credential_vault

    get_credential_vault().save_credential(
        UsernamePasswordCredential(
            name=name, username=username, password=password, description=description
        )
    )
    console.print(f"✓ Credential [cyan]{name}[/cyan] saved")


@credentials.command("add-key")
@click.argument("name")
@click.option("--username", "-u", required=True, help="Remote username")
@click.option(
    "--key-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Private key file to import",
)
@click.option("--passphrase", default=None, help="Key passphrase, if the key is protected")
@click.option("--description", default=None, help="Optional description")
def add_key(
    name: str, username: str, key_file: Path, passphrase: str | None, description: str | None
) -> None:
    """Store an SSH private key credential as NAME"""
    from ansible_step.credentials.models import SSHPrivateKeyCredential
    from ansible_step.credentials.vault import get_credential_vault

    get_credential_vault().save_credential(
        SSHPrivateKeyCredential(
            name=name,
            username=username,
            private_key=key_file.read_text(encoding="utf-8"),
            passphrase=passphrase,
            description=description,
        )
    )
    console.print(f"✓ Credential [cyan]{name}[/cyan] saved")


@credentials.command("list")
def list_credentials() -> None:
    """List stored credentials (secrets are never shown)"""
    from ansible_step.credentials.vault import get_credential_vault

    stored = get_credential_vault().list_credentials()
    if not stored:
        console.print("[yellow]No credentials stored[/yellow]")
        return

    table = Table(title="Credentials")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Username")
    table.add_column("Description")
    for credential in stored:
        table.add_row(
            credential.name,
            credential.kind.value,
            credential.username,
            credential.description or "",
        )
    console.print(table)


@credentials.command("delete")
@click.argument("name")
def delete_credential(name: str) -> None:
    """Delete the credential NAME"""
    from ansible_step.credentials.vault import get_credential_vault

    if not get_credential_vault().delete_credential(name):
        console.print(f"[red]Credential not found: {name}[/red]")
        sys.exit(1)
    console.print(f"✓ Credential [cyan]{name}[/cyan] deleted")


if __name__ == "__main__":
    main()
