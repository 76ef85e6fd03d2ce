# src/kubemanifest/cli/formatter.py
from typing import List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from kubemanifest.core.errors import ManifestLoadError
from kubemanifest.core.models import Manifest
from kubemanifest.rules.inclusion import ExclusionReason

# Initialize the Rich console for high-quality terminal output
console = Console()


class ManifestFormatter:
    """
    ManifestFormatter: the visual side of the CLI.
    Renders manifest tables, load errors and canonical JSON.
    """

    def __init__(self, target: Optional[Console] = None):
        self.console = target or console

    def print_manifest_table(self, rows: List[Tuple[Manifest, Optional[ExclusionReason]]]):
        """
        Builds the summary table; each row is (manifest, exclusion reason or None).
        """
        table = Table(title="KubeManifest Scan Report", show_header=True, header_style="bold magenta")
        table.add_column("Source", style="dim")
        table.add_column("Group")
        table.add_column("Kind", style="cyan")
        table.add_column("Namespace")
        table.add_column("Name", style="white")
        table.add_column("Decision")

        for manifest, reason in rows:
            decision = "[green]included[/green]" if reason is None else f"[yellow]excluded: {reason}[/yellow]"
            identity = manifest.identity
            table.add_row(
                manifest.original_filename or "-",
                identity.group or "core",
                identity.kind,
                identity.namespace or "-",
                identity.name,
                decision,
            )

        self.console.print(table)

    def show_load_errors(self, error: ManifestLoadError):
        """Lists every collected error, in encounter order."""
        lines = "\n".join(f"[red]•[/red] {e}" for e in error.errors)
        self.console.print(Panel(
            lines,
            title=f"[bold red]{len(error.errors)} load error(s)[/bold red]",
            border_style="red",
        ))

    def display_canonical(self, manifest: Manifest):
        syntax = Syntax(manifest.raw.decode("utf-8"), "json", theme="monokai", word_wrap=True)
        self.console.print(Panel(syntax, title=f"[bold cyan]{manifest.identity}[/bold cyan]", border_style="cyan"))
