"""
Command-line interface for Argos sensitive file discovery.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from Argos.catalog import Catalog, default_catalog, load_catalog
from Argos.core.config import EngineConfig
from Argos.core.errors import ConfigError, MalformedCatalogError
from Argos.core.result import ScanResult, Severity
from Argos.core.scanner import scan_path
from Argos.detectors.entropy_detector import looks_like_secret, shannon_entropy

app = typer.Typer(
    name="argos",
    help="Argos - discover credential stores, key files and other sensitive files",
    add_completion=False,
)
console = Console()
error_console = Console(stderr=True)

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130

SEVERITY_COLORS = {
    Severity.CRITICAL: "red bold",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=verbose)],
        force=True,
    )


def _load_catalog(rules: Optional[Path]) -> Catalog:
    if rules is None:
        return default_catalog()
    return load_catalog(rules)


def _print_table(result: ScanResult) -> None:
    table = Table(
        title=f"Found {len(result.findings)} sensitive files",
        show_header=True,
    )
    table.add_column("Severity", style="bold")
    table.add_column("Confidence", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Path")
    table.add_column("Evidence")

    for finding in result.findings:
        style = SEVERITY_COLORS.get(finding.severity, "white")
        evidence = ", ".join(f"{p.kind.value}:{p.label}" for p in finding.partials)
        table.add_row(
            f"[{style}]{finding.severity.value.upper()}[/{style}]",
            f"{finding.confidence:.1f}",
            finding.category,
            finding.path,
            evidence,
        )
    console.print(table)


@app.command()
def scan(
    path: Path = typer.Argument(..., help="File or directory to scan"),
    recursive: bool = typer.Option(
        True, "--recursive/--no-recursive", "-r",
        help="Scan directories recursively"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
    min_confidence: Optional[int] = typer.Option(
        None, "--min-confidence",
        help="Minimum confidence (0-100) for a file to be reported"
    ),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Worker threads"),
    max_size: Optional[int] = typer.Option(
        None, "--max-size",
        help="Max bytes of content to scan per file, in MB"
    ),
    window: Optional[int] = typer.Option(None, "--window", help="Entropy window size in bytes"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold",
        help="Entropy threshold (0-8, default: 4.0)"
    ),
    location_root: Optional[str] = typer.Option(
        None, "--location-root",
        help="Mount point of the scanned volume, for known-location matching"
    ),
    rules: Optional[Path] = typer.Option(
        None, "--rules",
        help="JSON rule pack merged over the built-in catalog"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config",
        help="JSON file with engine options"
    ),
    ignore: Optional[str] = typer.Option(
        None, "--ignore",
        help="Comma-separated patterns to ignore"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Scan a file or directory for sensitive files.

    Examples:

        # Sweep a user profile
        argos scan C:\\Users\\alice

        # Scan a mounted evidence image
        argos scan /mnt/evidence --location-root /mnt/evidence

        # Output as JSON, report only strong findings
        argos scan ./share --json --min-confidence 60

        # Add custom rules
        argos scan ./share --rules corp_rules.json
    """
    _setup_logging(verbose)

    if not path.exists():
        error_console.print(f"[red]✗[/red] Path not found: {path}")
        raise typer.Exit(code=EXIT_ERROR)

    try:
        base = EngineConfig.from_json(config_file) if config_file else EngineConfig()
        config = base.merged(
            min_report_confidence=min_confidence,
            worker_count=workers,
            max_content_scan_bytes=max_size * 1024 * 1024 if max_size is not None else None,
            entropy_window_size=window,
            entropy_threshold=threshold,
            location_root=location_root,
        )
        catalog = _load_catalog(rules)
    except (ConfigError, MalformedCatalogError) as e:
        error_console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=EXIT_ERROR)

    ignore_patterns = [p for p in ignore.split(",") if p] if ignore else None
    result = scan_path(
        path,
        config=config,
        catalog=catalog,
        recursive=recursive,
        ignore_patterns=ignore_patterns,
    )

    for error in result.errors:
        error_console.print(f"[yellow]⚠[/yellow]  {error}")

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    elif not result.found_sensitive:
        console.print("[green]✓[/green] No sensitive files detected")
    else:
        _print_table(result)
        console.print(
            f"[yellow]⚠[/yellow]  {result.count(Severity.CRITICAL)} critical, "
            f"{result.count(Severity.HIGH)} high severity findings"
        )

    if not json_output:
        console.print(
            f"Scanned {result.scanned_files} files in {result.duration_ms:.0f}ms"
        )
        if result.skipped:
            console.print(f"[yellow]⚠[/yellow]  {len(result.skipped)} skipped on I/O errors:")
            for skipped_path, reason in result.skipped:
                console.print(f"    {skipped_path}: {reason}")

    if result.cancelled:
        error_console.print("[yellow]⚠[/yellow]  Scan cancelled; results are partial")
        raise typer.Exit(code=EXIT_CANCELLED)
    raise typer.Exit(code=EXIT_FINDINGS if result.found_sensitive else EXIT_CLEAN)


@app.command("rules")
def list_rules(
    rules: Optional[Path] = typer.Option(
        None, "--rules",
        help="JSON rule pack merged over the built-in catalog"
    ),
) -> None:
    """List the detection rules in the active catalog."""
    try:
        catalog = _load_catalog(rules)
    except MalformedCatalogError as e:
        error_console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=EXIT_ERROR)

    table = Table(title=f"{len(catalog)} rules", show_header=True)
    table.add_column("Detector", style="bold")
    table.add_column("Rule", style="cyan")
    table.add_column("Category")
    table.add_column("Weight", justify="right")

    for rule in catalog.extensions:
        table.add_row("extension", f".{rule.extension}", rule.category, str(rule.weight))
    for rule in catalog.signatures:
        table.add_row("signature", rule.label, rule.category, str(rule.weight))
    for rule in catalog.locations:
        table.add_row("location", f"{rule.application}: {rule.glob}", rule.category, str(rule.weight))
    for pattern in catalog.patterns:
        table.add_row("content", pattern.label, pattern.category, str(pattern.weight))
    console.print(table)


@app.command()
def entropy(
    text: str = typer.Argument(..., help="String to measure"),
    threshold: float = typer.Option(4.0, "--threshold", help="Entropy threshold"),
) -> None:
    """Compute the Shannon entropy of a string and check if it resembles a secret."""
    score = shannon_entropy(text)
    found = looks_like_secret(text, threshold=threshold)
    console.print(f"Entropy: {score:.3f} | Looks like a secret: {found}")


@app.command()
def version() -> None:
    """Display version information."""
    from Argos import __version__
    console.print(f"Argos version {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
