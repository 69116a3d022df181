#!/usr/bin/env python3
"""
contactme CLI
"""
import json
import platform
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from contactme.config import SettingsLoader
from contactme.core.sanitizers import sanitize_contact_form
from contactme.core.validators import validate_contact_form
from contactme.version import __version__, get_git_commit

console = Console()


def show_version_info():
    """Display detailed version information"""
    console.print(f"\n[bold cyan]contactme Version Information[/bold cyan]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="dim")
    table.add_column("Value", style="green")

    table.add_row("Version", __version__)

    commit = get_git_commit()
    if commit:
        table.add_row("Git commit", commit)

    table.add_row("Python", platform.python_version())

    console.print(table)
    console.print()


def version_callback(ctx, param, value):
    """Callback for --version option"""
    if not value or ctx.resilient_parsing:
        return
    show_version_info()
    ctx.exit()


@click.group()
@click.option(
    '--version', '-v',
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help='Show detailed version information'
)
def main():
    """contactme - contact form submission API"""
    pass


@main.command()
def version():
    """Show version information"""
    show_version_info()


@main.command()
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(file_okay=False, dir_okay=True),
    default=".",
    help="Project directory to initialize",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration",
)
def init(project_dir: str, force: bool):
    """Write a default configuration file"""
    project_path = Path(project_dir).resolve()
    loader = SettingsLoader(project_path)

    try:
        config_file = loader.write_default(force=force)
    except FileExistsError:
        console.print(
            f"[yellow]Project already initialized at {loader.config_dir}[/yellow]\n"
            "Use --force to overwrite"
        )
        sys.exit(1)

    gitignore = project_path / ".gitignore"
    gitignore_content = "\n# contactme\n.contactme/contacts/\n.contactme/*.db\n.contactme/logs/\n"
    if gitignore.exists():
        existing = gitignore.read_text()
        if ".contactme" not in existing:
            gitignore.write_text(existing + gitignore_content)
    else:
        gitignore.write_text(gitignore_content)

    console.print(f"[bold green]✓[/bold green] Initialized at {loader.config_dir}")
    console.print(f"\nNext steps:")
    console.print(f"  1. Edit [cyan]{config_file}[/cyan] to customize settings")
    console.print(f"  2. Run [bold]contactme serve[/bold] to start the API")


@main.command()
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    default=".",
    help="Project directory (default: current directory)",
)
def config(project_dir: str):
    """Show current configuration"""
    settings = SettingsLoader(Path(project_dir).resolve()).load()
    if settings.config_file is None:
        console.print("[dim]No configuration file found, showing defaults[/dim]")
    console.print("[bold]Current Configuration:[/bold]")
    console.print_json(settings.model_dump_json(indent=2, exclude={"config_file"}))


@main.command()
@click.option("--host", default=None, help="Bind address (default: from config)")
@click.option("--port", type=int, default=None, help="Port (default: from config)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    default=".",
    help="Project directory holding .contactme/config.yaml",
)
def serve(host: Optional[str], port: Optional[int], reload: bool, project_dir: str):
    """Start the contact API server"""
    import os
    import uvicorn

    project_path = Path(project_dir).resolve()
    os.chdir(project_path)
    settings = SettingsLoader(project_path).load()

    host = host or settings.server.host
    port = port or settings.server.port
    console.print(f"[bold green]Starting contactme API[/bold green] on http://{host}:{port}")
    console.print(f"[dim]Storage: {settings.storage.backend} ({settings.storage.path})[/dim]")

    uvicorn.run(
        "contactme.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.logging.level.lower(),
    )


@main.command()
@click.argument("submission_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json-output", "json_output", is_flag=True, help="Print the result as JSON")
def check(submission_file: str, json_output: bool):
    """Sanitize and validate a JSON contact submission without storing it"""
    try:
        data = json.loads(Path(submission_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ Invalid JSON:[/red] {e}")
        sys.exit(2)

    submission = sanitize_contact_form(data)
    validation = validate_contact_form(submission)

    if json_output:
        click.echo(json.dumps(
            {"sanitized": submission.to_dict(), "validation": validation.to_dict()},
            indent=2,
        ))
    else:
        table = Table(title="Sanitized submission")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for key, value in submission.to_dict().items():
            table.add_row(key, value)
        console.print(table)

        if validation.is_valid:
            console.print("[bold green]✓ Valid[/bold green]")
        else:
            console.print("[bold red]✗ Invalid[/bold red]")
            for message in validation.errors:
                console.print(f"  • {message}")

        spam = validation.spam_check
        style = "yellow" if spam.is_spam else "dim"
        console.print(f"[{style}]Spam score: {spam.score} - {spam.message}[/{style}]")

    if not validation.is_valid:
        sys.exit(1)


if __name__ == "__main__":
    main()
