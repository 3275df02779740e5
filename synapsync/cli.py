"""Click-based CLI for SynapSync - canonical store sync for AI assistant cognitives."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from synapsync import __version__
from synapsync.config import (
    COGNITIVE_TYPES,
    SUPPORTED_PROVIDERS,
    CognitiveType,
    find_config,
    load_config,
    validate_config_file,
)
from synapsync.errors import SynapSyncError
from synapsync.output import Console, create_console
from synapsync.sync import Doctor, SyncEngine

# Exceptions that mean "the project cannot be used as configured"
PROJECT_ERRORS = (SynapSyncError, ValidationError, yaml.YAMLError)


def _load_engine(console: Console) -> SyncEngine:
    """Build an engine for the current project or exit with an error."""
    try:
        return SyncEngine.from_project()
    except PROJECT_ERRORS as e:
        console.print_error(str(e))
        sys.exit(1)


def _project_console(engine: SyncEngine, verbose: bool = False) -> Console:
    """Console honoring the project's cli settings."""
    if engine.config is None:
        return create_console(verbose=verbose)
    cli_config = engine.config.cli
    return create_console(verbose=verbose or cli_config.verbose, colored=cli_config.color)


def _select_providers(engine: SyncEngine, provider: Optional[str]) -> list[str]:
    """Explicit provider, or every enabled one."""
    return [provider] if provider else engine.get_enabled_providers()


@click.group()
@click.version_option(version=__version__, prog_name="synapsync")
def cli() -> None:
    """SynapSync - keep AI assistant cognitives in sync.

    Cognitives live once in the canonical store and are mirrored into
    every enabled provider as symlinks (or copies).

    \b
    Store:    .synapsync/<type>s/<category>/<name>/
    Claude:   .claude/skills/, .claude/agents/, ...
    Cursor:   .cursor/skills/, .cursor/agents/, ...
    """
    pass


@cli.command()
@click.option("--dry-run", "-n", is_flag=True, help="Preview changes without applying")
@click.option(
    "--type",
    "-t",
    "types",
    multiple=True,
    type=click.Choice(COGNITIVE_TYPES),
    help="Only sync this cognitive type (repeatable)",
)
@click.option("--category", "-c", "categories", multiple=True, help="Only sync this category (repeatable)")
@click.option("--provider", "-p", type=click.Choice(SUPPORTED_PROVIDERS), help="Only sync to this provider")
@click.option("--copy", is_flag=True, help="Copy files instead of creating symlinks")
@click.option("--force", "-f", is_flag=True, help="Recreate existing mirrors")
@click.option("--manifest-only", is_flag=True, help="Only reconcile the manifest, skip providers")
@click.option("--rehash", is_flag=True, help="Treat manifest entries without a fingerprint as modified")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
def sync(
    dry_run: bool,
    types: tuple[str, ...],
    categories: tuple[str, ...],
    provider: Optional[str],
    copy: bool,
    force: bool,
    manifest_only: bool,
    rehash: bool,
    verbose: bool,
) -> None:
    """Synchronize the manifest and providers with the canonical store.

    New, changed and deleted cognitives are reconciled into the manifest,
    then every enabled provider is mirrored from the full store. Mirrors
    of deleted cognitives are removed.
    """
    engine = _load_engine(create_console(verbose=verbose))
    console = _project_console(engine, verbose)

    if console.verbose:
        console.print_info(f"Store:    {engine.store_dir}")
        console.print_info(f"Project:  {engine.project_root}")

    result = engine.sync(
        dry_run=dry_run,
        types=[CognitiveType(t) for t in types] or None,
        categories=list(categories) or None,
        provider=provider,
        copy=copy,
        force=force,
        manifest_only=manifest_only,
        rehash_missing=rehash,
        on_progress=console.progress,
    )

    console.print_sync_result(result)

    if dry_run:
        console.print_info("Dry-run mode - no changes applied")

    if not result.success:
        sys.exit(1)


@cli.command()
def status() -> None:
    """Show store, manifest and provider status without making changes."""
    engine = _load_engine(create_console())
    console = _project_console(engine)

    try:
        project_status = engine.get_status()
    except PROJECT_ERRORS as e:
        console.print_error(str(e))
        sys.exit(1)

    providers = [engine.get_provider_status(name) for name in engine.get_enabled_providers()]
    console.print_status(project_status, providers)


@cli.command()
@click.argument("provider", required=False, type=click.Choice(SUPPORTED_PROVIDERS))
@click.option("--verbose", "-v", is_flag=True, help="List valid mirrors too")
def verify(provider: Optional[str], verbose: bool) -> None:
    """Check provider mirrors for broken or orphaned entries.

    Verifies every enabled provider unless PROVIDER is given. Exits with
    status 1 if any mirror needs cleaning.
    """
    engine = _load_engine(create_console(verbose=verbose))
    console = _project_console(engine, verbose)

    providers = _select_providers(engine, provider)
    if not providers:
        console.print_warning("No providers enabled")
        return

    has_issues = False
    for name in providers:
        verification = engine.projector.verify_provider(name)
        console.print_provider_verification(name, verification)
        has_issues = has_issues or verification.has_issues

    if has_issues:
        console.print("[dim]→ Run: synapsync clean[/dim]")
        sys.exit(1)


@cli.command()
@click.argument("provider", required=False, type=click.Choice(SUPPORTED_PROVIDERS))
@click.option("--dry-run", "-n", is_flag=True, help="List mirrors without removing them")
def clean(provider: Optional[str], dry_run: bool) -> None:
    """Remove broken and orphaned provider mirrors.

    Exits with status 1 if any mirror could not be removed.
    """
    engine = _load_engine(create_console())
    console = _project_console(engine)

    providers = _select_providers(engine, provider)
    if not providers:
        console.print_warning("No providers enabled")
        return

    failed = False
    for name in providers:
        removed = engine.projector.clean_provider(name, dry_run=dry_run)
        console.print_clean_result(name, removed, dry_run=dry_run)
        for error in engine.projector.clean_errors:
            console.print_error(f"{error.path}: {error.message}")
        failed = failed or bool(engine.projector.clean_errors)

    if failed:
        sys.exit(1)


@cli.command("list")
@click.option(
    "--type",
    "-t",
    "types",
    multiple=True,
    type=click.Choice(COGNITIVE_TYPES),
    help="Only list this cognitive type (repeatable)",
)
@click.option("--category", "-c", "categories", multiple=True, help="Only list this category (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output manifest entries as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Show install times")
def list_cognitives(types: tuple[str, ...], categories: tuple[str, ...], as_json: bool, verbose: bool) -> None:
    """List cognitives installed in the manifest."""
    engine = _load_engine(create_console())
    console = _project_console(engine, verbose)

    try:
        entries = engine.manifest.find_entries(
            types=[CognitiveType(t) for t in types] or None,
            categories=list(categories) or None,
        )
        installed = engine.manifest.get_entry_count()
    except PROJECT_ERRORS as e:
        console.print_error(str(e))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([entry.to_dict() for entry in entries], indent=2, ensure_ascii=False))
        return

    console.print_cognitive_list(entries, installed=installed)


@cli.command()
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Uninstall without showing the confirmation preview")
@click.option("--keep-files", is_flag=True, help="Remove from the manifest but keep store files and mirrors")
def uninstall(name: str, force: bool, keep_files: bool) -> None:
    """Uninstall cognitive NAME from the store, manifest and providers.

    Without --force only shows what would be removed.
    """
    engine = _load_engine(create_console())
    console = _project_console(engine)

    try:
        entry = engine.manifest.get_entry(name)
    except PROJECT_ERRORS as e:
        console.print_error(str(e))
        sys.exit(1)

    if entry is None:
        console.print_error(f"Cognitive '{name}' is not installed")
        console.print("[dim]→ Run: synapsync list[/dim]")
        sys.exit(1)

    if not force:
        console.print_uninstall_preview(entry)
        return

    try:
        result = engine.uninstall(name, keep_files=keep_files)
    except PROJECT_ERRORS as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_uninstall_result(result)
    if not result.success:
        sys.exit(1)


@cli.command()
@click.option("--fix", is_flag=True, help="Repair the issues that can be fixed automatically")
@click.option("--check", "checks", multiple=True, help="Only run this check id (repeatable)")
def doctor(fix: bool, checks: tuple[str, ...]) -> None:
    """Diagnose the project: store, config, manifest and provider mirrors.

    Exits with status 1 if issues remain.
    """
    console = create_console()
    doc = Doctor.from_project()
    if doc.config is not None:
        console = create_console(colored=doc.config.cli.color)

    selected = list(checks) or None

    if fix:
        console.print_fix_result(doc.fix(selected))
        console.print()

    diagnosis = doc.diagnose(selected)
    console.print_diagnostics(diagnosis)
    if not diagnosis.healthy:
        sys.exit(1)


@cli.group()
def config() -> None:
    """Project configuration commands.

    \b
    Config file: synapsync.config.yaml (nearest in current or parent directory)
    Overrides:   SYNAPSYNC_CONFIG (config file), SYNAPSYNC_DIR (store directory)
    """
    pass


@config.command("show")
def config_show() -> None:
    """Show the active project configuration."""
    console = create_console()

    config_path = find_config()
    if config_path is None:
        console.print_error("No synapsync.config.yaml found in current or parent directories")
        sys.exit(1)

    try:
        project_config = load_config(config_path)
    except PROJECT_ERRORS as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_config_summary(str(config_path), project_config)


@config.command("validate")
@click.argument("file", required=False, type=click.Path(path_type=Path))
def config_validate(file: Optional[Path]) -> None:
    """Validate a configuration file (default: the active one)."""
    console = create_console()

    config_path = file or find_config()
    if config_path is None:
        console.print_error("No synapsync.config.yaml found in current or parent directories")
        sys.exit(1)

    is_valid, errors = validate_config_file(config_path)

    if not is_valid:
        console.print_error(f"Invalid configuration: {config_path}")
        for error in errors:
            console.print(f"  [red]•[/red] {error}")
        sys.exit(1)

    console.print_success(f"Configuration is valid: {config_path}")


if __name__ == "__main__":
    cli()
