# SynapSync Console Output
# Rich-based console output for sync, status and provider reports

from typing import Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from synapsync.config.schema import ProjectConfig
from synapsync.sync.actions import SyncOperation
from synapsync.sync.doctor import CheckStatus, DiagnosticResult, FixResult
from synapsync.sync.engine import ProjectStatus, ProviderStatus, SyncProgress, SyncResult, UninstallResult
from synapsync.sync.manifest import ManifestEntry
from synapsync.sync.projector import ProviderSyncResult, ProviderVerification


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(force_terminal=colored, no_color=not colored)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def progress(self, update: SyncProgress) -> None:
        """Progress callback for SyncEngine.sync(); silent unless verbose."""
        if not self.verbose:
            return
        self._console.print(f"[dim]\\[{update.phase.value}][/dim] {update.message}")

    def print_sync_result(self, result: SyncResult) -> None:
        """
        Print sync result summary.

        Args:
            result: Sync result to display.
        """
        self._console.print()

        if result.has_changes:
            self._print_actions(result)
        else:
            self._console.print("[green]✓[/green] [bold]manifest[/bold] - no changes")

        for provider_result in result.provider_results:
            self._print_provider_result(provider_result, dry_run=result.dry_run)

        if result.errors:
            self._console.print()
            for error in result.errors:
                where = f"{error.cognitive}: " if error.cognitive else ""
                self._console.print(f"    [red]✗[/red] [dim]{error.code.value}[/dim] {where}{error.message}")

        self._console.print()

        status_text = "Dry run completed" if result.dry_run else "Sync completed"
        summary = (
            f"Cognitives: {result.total} in manifest\n"
            f"Changes: {result.added} added, {result.updated} updated, "
            f"{result.removed} removed, {result.unchanged} unchanged\n"
            f"Providers: {len(result.provider_results)}, errors: {len(result.errors)}\n"
            f"Duration: {result.duration:.2f}s"
        )

        if result.success:
            self._console.print(
                Panel(f"[green]{status_text}[/green]\n{summary}", title="Summary", border_style="green")
            )
        else:
            self._console.print(
                Panel(f"[red]{status_text} with errors[/red]\n{summary}", title="Summary", border_style="red")
            )

    def _print_actions(self, result: SyncResult) -> None:
        """Print manifest changes."""
        verb = "would apply" if result.dry_run else "applied"
        self._console.print(f"[bold]manifest[/bold] - {len(result.actions)} changes {verb}")

        icons = {
            SyncOperation.ADD: "[green]+[/green]",
            SyncOperation.UPDATE: "[yellow]~[/yellow]",
            SyncOperation.REMOVE: "[red]×[/red]",
        }
        for action in result.actions:
            line = f"    {icons[action.operation]} {action.name}"
            if self.verbose:
                line += f" [dim]({action.reason})[/dim]"
            self._console.print(line)

    def _print_provider_result(self, result: ProviderSyncResult, *, dry_run: bool = False) -> None:
        """Print result for a single provider."""
        created_verb = "would create" if dry_run else "created"
        removed_verb = "would remove" if dry_run else "removed"
        created = sum(1 for link in result.created if link.success)

        marker = "[green]✓[/green]" if result.success else "[red]✗[/red]"
        self._console.print(
            f"{marker} [bold]{result.provider}[/bold] ({result.method.value}) - "
            f"{created} {created_verb}, {len(result.removed)} {removed_verb}, {len(result.skipped)} unchanged"
        )

        if self.verbose:
            for link in result.created:
                if link.success:
                    self._console.print(f"    [green]+[/green] {link.target}")
            for name in result.removed:
                self._console.print(f"    [red]×[/red] {name}")

        for error in result.errors:
            self._console.print(f"    [red]✗[/red] {error.path}: {error.message}")

    def print_status(self, status: ProjectStatus, providers: Optional[list[ProviderStatus]] = None) -> None:
        """
        Print store vs manifest agreement and provider health.

        Args:
            status: Result of SyncEngine.get_status().
            providers: Optional per-provider mirror counts.
        """
        marker = "[green]●[/green]" if status.in_sync else "[yellow]●[/yellow]"
        state = "in sync" if status.in_sync else "out of sync"
        self._console.print(f"\n{marker} [bold]store[/bold] {state}")
        self._console.print(f"  {status.filesystem} in store, {status.manifest} in manifest")

        if not status.in_sync:
            parts = []
            if status.new:
                parts.append(f"[green]{status.new} new[/green]")
            if status.modified:
                parts.append(f"[yellow]{status.modified} modified[/yellow]")
            if status.removed:
                parts.append(f"[red]{status.removed} removed[/red]")
            self._console.print(f"  {', '.join(parts)}")
            self._console.print("  [dim]→ Run: synapsync sync[/dim]")

        if not providers:
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Provider")
        table.add_column("Valid", justify="right")
        table.add_column("Broken", justify="right")
        table.add_column("Orphaned", justify="right")

        for provider in providers:
            table.add_row(
                provider.provider,
                f"[green]{provider.valid}[/green]",
                f"[red]{provider.broken}[/red]" if provider.broken else "0",
                f"[yellow]{provider.orphaned}[/yellow]" if provider.orphaned else "0",
            )

        self._console.print()
        self._console.print(table)

    def print_provider_verification(self, provider: str, verification: ProviderVerification) -> None:
        """Print valid, broken and orphaned mirrors of a provider."""
        marker = "[red]✗[/red]" if verification.has_issues else "[green]✓[/green]"
        self._console.print(
            f"{marker} [bold]{provider}[/bold] - {len(verification.valid)} valid, "
            f"{len(verification.broken)} broken, {len(verification.orphaned)} orphaned"
        )

        if self.verbose:
            for mirror in verification.valid:
                self._console.print(f"    [green]✓[/green] {mirror.key}")
        for mirror in verification.broken:
            self._console.print(f"    [red]✗[/red] {mirror.key} [dim](broken: {mirror.target})[/dim]")
        for mirror in verification.orphaned:
            self._console.print(f"    [yellow]![/yellow] {mirror.key} [dim](outside store: {mirror.target})[/dim]")

    def print_clean_result(self, provider: str, removed: list[str], *, dry_run: bool = False) -> None:
        """Print mirrors removed by a clean."""
        if not removed:
            self._console.print(f"[green]✓[/green] [bold]{provider}[/bold] - nothing to clean")
            return

        verb = "would remove" if dry_run else "removed"
        self._console.print(f"[bold]{provider}[/bold] - {len(removed)} {verb}")
        for name in removed:
            self._console.print(f"    [red]×[/red] {name}")

    def print_cognitive_list(self, entries: list[ManifestEntry], *, installed: int) -> None:
        """
        Print installed cognitives grouped by type.

        Args:
            entries: Entries to show, already filtered and sorted.
            installed: Total number of entries in the manifest.
        """
        if not entries:
            if installed == 0:
                self._console.print("[dim]No cognitives installed yet.[/dim]")
                self._console.print("[dim]→ Add one to the store, then run: synapsync sync[/dim]")
            else:
                self._console.print("[dim]No cognitives match the specified filters.[/dim]")
            return

        groups: dict[str, list[ManifestEntry]] = {}
        for entry in entries:
            groups.setdefault(entry.cognitive_type.plural, []).append(entry)

        for plural, items in groups.items():
            table = Table(title=f"{plural.capitalize()} ({len(items)})", show_header=True, header_style="bold")
            table.add_column("Name")
            table.add_column("Version")
            table.add_column("Category")
            table.add_column("Source")
            if self.verbose:
                table.add_column("Installed")
            for entry in items:
                row = [entry.name, entry.version, entry.category, entry.source]
                if self.verbose:
                    row.append(entry.installed_at)
                table.add_row(*row)
            self._console.print(table)

        plural_suffix = "" if len(entries) == 1 else "s"
        self._console.print(f"[dim]Total: {len(entries)} cognitive{plural_suffix}[/dim]")

    def print_uninstall_preview(self, entry: ManifestEntry) -> None:
        """Show what uninstall would remove and how to confirm."""
        self._console.print(f"[yellow]![/yellow] About to uninstall [bold]{entry.name}[/bold]")
        self._console.print(f"    [dim]Type:[/dim] {entry.cognitive_type.value}")
        self._console.print(f"    [dim]Category:[/dim] {entry.category}")
        self._console.print(f"    [dim]Version:[/dim] {entry.version}")
        self._console.print(f"[dim]→ To confirm, run: synapsync uninstall {entry.name} --force[/dim]")

    def print_uninstall_result(self, result: UninstallResult) -> None:
        if result.removed_files is not None:
            self._console.print(f"    [red]×[/red] {result.removed_files}")
        for provider, paths in result.removed_mirrors.items():
            for path in paths:
                self._console.print(f"    [red]×[/red] {path} [dim]({provider})[/dim]")
        for error in result.errors:
            where = f"{error.cognitive}: " if error.cognitive else ""
            self._console.print(f"    [red]✗[/red] {where}{error.message}")

        if result.success:
            self._console.print(f"[green]✓[/green] Uninstalled [bold]{result.name}[/bold]")
        else:
            self._console.print(f"[red]✗[/red] Uninstall of [bold]{result.name}[/bold] incomplete")

    def print_diagnostics(self, result: DiagnosticResult) -> None:
        """Print every check with its status, then a summary line."""
        icons = {
            CheckStatus.PASS: "[green]✓[/green]",
            CheckStatus.WARN: "[yellow]![/yellow]",
            CheckStatus.FAIL: "[red]✗[/red]",
            CheckStatus.SKIP: "[dim]-[/dim]",
        }

        for check in result.checks:
            self._console.print(f"{icons[check.status]} [bold]{check.name}[/bold] - {check.message}")
            for detail in check.details:
                self._console.print(f"    [dim]{detail}[/dim]")

        self._console.print()
        summary = (
            f"{result.passed} passed, {result.warnings} warnings, "
            f"{result.failed} failed, {result.skipped} skipped"
        )
        if result.healthy:
            self._console.print(f"[green]Project is healthy[/green] ({summary})")
        else:
            self._console.print(f"[yellow]Issues found[/yellow] ({summary})")
            if any(check.needs_fix for check in result.checks):
                self._console.print("[dim]→ Run: synapsync doctor --fix[/dim]")

    def print_fix_result(self, result: FixResult) -> None:
        if not result.fixed and not result.failed:
            self._console.print("[green]✓[/green] Nothing to fix")
            return
        for check_id in result.fixed:
            self._console.print(f"    [green]✓[/green] fixed {check_id}")
        for check_id, error in result.failed.items():
            self._console.print(f"    [red]✗[/red] {check_id}: {error}")

    def print_config_summary(self, config_path: str, config: ProjectConfig) -> None:
        """Print configuration summary."""
        providers = ", ".join(config.get_enabled_providers()) or "none"
        self._console.print(
            Panel(
                f"Config: {config_path}\n"
                f"Project: {config.name}\n"
                f"Store: {config.storage.dir}\n"
                f"Method: {config.sync.method.value}\n"
                f"Providers: {providers}",
                title="SynapSync Configuration",
                border_style="blue",
            )
        )


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
