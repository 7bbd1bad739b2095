#!/usr/bin/env python3
"""
Signing resolver command-line interface using Typer.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_SETTINGS_FILE, load_settings
from .exceptions import SigningResolverError
from .models import SECRET_MASK, ResolvedBuildConfig, SigningIdentity
from .properties import load_properties
from .resolver import BuildConfigResolver, resolve_signing

app = typer.Typer(
    name="signing-resolver",
    help="Resolve Android build and signing configuration",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def setup_logger(debug: bool):
    """Configures the logger based on debug flag."""
    level = "DEBUG" if debug else "INFO"
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )


def _fail(error: SigningResolverError) -> None:
    logger.error(f"{error.__class__.__name__}: {error}")
    err_console.print(f"[red]✘[/red] {error}")
    raise typer.Exit(code=1)


def _echo_json(data: Dict[str, Any]) -> None:
    typer.echo(json.dumps(data, indent=2))


def _signing_table(identity: SigningIdentity, show_secrets: bool) -> Table:
    table = Table(title=f"Signing identity: {identity.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in identity.to_dict(show_secrets).items():
        if key == "name":
            continue
        table.add_row(key, "[dim]absent[/dim]" if value is None else str(value))
    return table


def _render_config(resolved: ResolvedBuildConfig, show_secrets: bool) -> None:
    data = resolved.to_dict(show_secrets)
    table = Table(title="Android build configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key in (
        "namespace",
        "application_id",
        "compile_sdk",
        "min_sdk",
        "target_sdk",
        "ndk_version",
        "java_version",
        "version_code",
        "version_name",
        "local_properties",
        "key_properties",
    ):
        table.add_row(key, str(data[key]))
    console.print(table)

    release = resolved.release
    console.print(_signing_table(release.signing, show_secrets))
    if release.uses_debug_signing:
        console.print(
            "[yellow]WARNING[/yellow]: release variant is signed with the debug keystore."
        )
    else:
        console.print("[green]✔[/green] release variant is signed with the release keystore.")


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    config: Path = typer.Option(DEFAULT_SETTINGS_FILE, "--config", help="Path to settings file."),
):
    """Inspect the signing configuration of a Flutter Android build."""
    setup_logger(debug)
    ctx.meta["config_path"] = config


@app.command()
def resolve(
    ctx: typer.Context,
    project_root: Optional[Path] = typer.Option(None, "--project-root", help="Flutter project root."),
    strict: bool = typer.Option(False, "--strict", help="Fail when no release keystore is available."),
    as_json: bool = typer.Option(False, "--json", help="Print the configuration as JSON."),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Do not mask passwords."),
):
    """Resolve the complete build configuration."""
    try:
        settings = load_settings(ctx.meta["config_path"]).with_overrides(
            project_root=project_root,
            strict=True if strict else None,
        )
        resolved = BuildConfigResolver.from_settings(settings).resolve()
    except SigningResolverError as e:
        _fail(e)

    if as_json:
        _echo_json(resolved.to_dict(show_secrets))
    else:
        _render_config(resolved, show_secrets)


@app.command()
def signing(
    key_properties: Path = typer.Argument(..., help="Path to the signing properties file."),
    as_json: bool = typer.Option(False, "--json", help="Print the identity as JSON."),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Do not mask passwords."),
):
    """Resolve a single signing properties file."""
    try:
        identity = resolve_signing(key_properties)
    except SigningResolverError as e:
        _fail(e)

    if as_json:
        _echo_json({**identity.to_dict(show_secrets), "usable": identity.has_store_file})
        return

    console.print(_signing_table(identity, show_secrets))
    if identity.has_store_file:
        console.print(f"[green]✔[/green] Keystore found: {identity.store_file}")
    else:
        console.print("[yellow]WARNING[/yellow]: no usable keystore, release builds fall back to debug signing.")


@app.command()
def properties(
    file_path: Path = typer.Argument(..., help="Path to a .properties file."),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Do not mask passwords."),
):
    """Show the parsed contents of a property file."""
    try:
        source = load_properties(file_path)
    except SigningResolverError as e:
        _fail(e)

    if not source.exists:
        console.print(f"[yellow]WARNING[/yellow]: {file_path} does not exist.")
        return

    table = Table(title=str(file_path))
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in source.items():
        if "password" in key.lower() and not show_secrets:
            value = SECRET_MASK
        table.add_row(key, value)
    console.print(table)


if __name__ == "__main__":
    app()
