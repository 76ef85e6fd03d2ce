#!/usr/bin/env python3
"""
KUBEMANIFEST CLI
----------------
Thin wrapper around the library: builds the list of input files, loads
them, evaluates the inclusion policy and renders the outcome.

Author: KubeManifest Team
Date: 2026-10-18
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.panel import Panel

from kubemanifest.cli.formatter import ManifestFormatter, console
from kubemanifest.core.errors import ManifestError
from kubemanifest.core.loader import manifests_from_files
from kubemanifest.core.models import CapabilityStatus
from kubemanifest.parsing.pipeline import parse_manifests
from kubemanifest.rules.inclusion import InclusionPolicy

logger = logging.getLogger("kubemanifest.cli")


class KubeManifestCLI:
    """
    CLI wrapper that translates user commands into loader and policy calls.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubemanifest",
            description="KubeManifest - Kubernetes manifest parsing, de-duplication and inclusion policy",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ManifestFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version="kubemanifest v0.1.0")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        scan_parser = subparsers.add_parser("scan", help="Load manifests and evaluate the inclusion policy")
        scan_parser.add_argument("paths", nargs="+", help="YAML files or directories, in load order")
        scan_parser.add_argument("--ext", default=".yaml", help="File extension filter for directories (default: .yaml)")
        scan_parser.add_argument("--exclude", dest="exclude_identifier", default=None,
                                 help="Exclusion identifier (exclude.release.openshift.io/<id>)")
        scan_parser.add_argument("--profile", default=None,
                                 help="Cluster profile (include.release.openshift.io/<profile>)")
        scan_parser.add_argument("--tech-preview", choices=["true", "false"], default=None,
                                 help="Evaluate the TechPreviewNoUpgrade feature gate")
        scan_parser.add_argument("--known-capability", action="append", default=[], metavar="CAP",
                                 help="Capability the cluster knows about (repeatable)")
        scan_parser.add_argument("--enabled-capability", action="append", default=[], metavar="CAP",
                                 help="Capability enabled on the cluster (repeatable)")
        scan_parser.add_argument("--check-capabilities", action="store_true",
                                 help="Evaluate capabilities even when no capability flags are given")
        scan_parser.add_argument("--partial", action="store_true",
                                 help="List the de-duplicated manifests even when errors were found")

        dump_parser = subparsers.add_parser("dump", help="Print the canonical JSON of every document in a file")
        dump_parser.add_argument("path", help="Path to a YAML file")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            "[bold cyan]KubeManifest v0.1.0[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _expand_paths(self, paths: List[str], ext: str) -> List[Path]:
        """Directories expand to their matching files (sorted, symlinks skipped)."""
        files = []
        for raw in paths:
            path = Path(raw)
            if path.is_dir():
                files.extend(sorted(
                    f for f in path.rglob(f"*{ext}")
                    if f.is_file() and not f.is_symlink()
                ))
            else:
                files.append(path)
        return files

    def _build_policy(self, args: argparse.Namespace) -> InclusionPolicy:
        capabilities = None
        if args.known_capability or args.enabled_capability or args.check_capabilities:
            capabilities = CapabilityStatus.of(args.known_capability, args.enabled_capability)
        tech_preview = None if args.tech_preview is None else args.tech_preview == "true"
        return InclusionPolicy(
            exclude_identifier=args.exclude_identifier,
            include_tech_preview=tech_preview,
            profile=args.profile,
            capabilities=capabilities,
        )

    def _run_scan(self, args: argparse.Namespace) -> int:
        files = self._expand_paths(args.paths, args.ext)
        if not files:
            console.print("[bold yellow]No manifest files found.[/bold yellow]")
            return 0

        result = manifests_from_files(files, partial=True)
        if result.error is not None:
            self.formatter.show_load_errors(result.error)
            if not args.partial:
                return 1

        policy = self._build_policy(args)
        rows = [(m, policy.evaluate(m)) for m in result.manifests]
        self.formatter.print_manifest_table(rows)

        included = sum(1 for _, reason in rows if reason is None)
        console.print(f"[bold white]{included}[/bold white] of {len(rows)} manifest(s) included")
        return 0 if result.error is None else 1

    def _run_dump(self, args: argparse.Namespace) -> int:
        path = Path(args.path)
        try:
            manifests = parse_manifests(path.read_bytes(), source=str(path))
        except (OSError, ManifestError) as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            return 1
        for manifest in manifests:
            self.formatter.display_canonical(manifest)
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

        if args.command == "scan":
            self.print_header("Manifest Scan")
            return self._run_scan(args)
        if args.command == "dump":
            return self._run_dump(args)

        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeManifestCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
