from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .analyzer import process_features
from .config import AppConfig
from .errors import FeatureFingerprintError
from .parsing.discovery import discover_feature_files
from .report import ChangeStatus, compare_reports, load_report, write_report


app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()

STATUS_STYLE = {
    ChangeStatus.ADDED: "green",
    ChangeStatus.REMOVED: "red",
    ChangeStatus.CHANGED: "yellow",
    ChangeStatus.UNCHANGED: "dim",
}


def _load_config() -> AppConfig:
    load_dotenv(override=False)
    try:
        return AppConfig()
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            console.print(f"[red]Invalid configuration[/red] {field}: {escape(err['msg'])}")
        raise typer.Exit(code=1)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(path: Path):
    try:
        return load_report(path)
    except (OSError, FeatureFingerprintError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every processed file"),
):
    """Fingerprint feature files so content changes can be detected between runs."""
    cfg = _load_config()
    _setup_logging("DEBUG" if verbose else cfg.log_level)


@app.command()
def analyze(
    root: Optional[str] = typer.Argument(None, help="Project root (defaults to the configured root)"),
    features_dir: Optional[str] = typer.Option(None, help="Directory under the root holding feature files"),
    glob: Optional[str] = typer.Option(None, help="Glob selecting feature files"),
    out: Optional[str] = typer.Option(None, help="Path of the JSON report to write"),
    ignore: List[str] = typer.Option([], help="Extra gitignore-style patterns to skip"),
):
    """Parse all feature files under the root and write the fingerprint report."""
    cfg = _load_config()
    if root:
        cfg.project_root = Path(root)
    if features_dir:
        cfg.features_dir = features_dir
    if glob:
        cfg.feature_glob = glob
    cfg.ignore_globs = [*cfg.ignore_globs, *ignore]

    project_root = cfg.project_root.resolve()
    if not project_root.exists():
        raise typer.BadParameter(f"Path not found: {project_root}")

    search_root = project_root / cfg.features_dir
    files = discover_feature_files(search_root, cfg.feature_glob, cfg.ignore_globs)
    console.print(f"Found [bold]{len(files)}[/bold] feature files in {search_root}")

    try:
        features = process_features(files, project_root=project_root)
    except FeatureFingerprintError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    except OSError as e:
        if e.filename:
            console.print(f"[red]Error:[/red] could not read '{e.filename}': {e.strerror}")
        else:
            console.print(f"[red]Error:[/red] could not read feature files: {e}")
        raise typer.Exit(code=1)

    destination = Path(out) if out else project_root / cfg.report_path
    write_report(features, destination)
    console.print(f"[green]Wrote[/green] {destination}")


@app.command()
def show(
    report: str = typer.Argument(..., help="Report JSON written by 'analyze'"),
):
    """Print the features and fingerprints stored in a report."""
    features = _load(Path(report))

    table = Table(title="Features")
    table.add_column("Path")
    table.add_column("Feature")
    table.add_column("Scenarios", justify="right")
    table.add_column("Background")
    table.add_column("Fingerprint")
    for f in features:
        table.add_row(
            f.path,
            f.description,
            str(len(f.scenarios)),
            "yes" if f.background else "no",
            f.fingerprint,
        )
    console.print(table)


@app.command()
def diff(
    old: str = typer.Argument(..., help="Earlier report JSON"),
    new: str = typer.Argument(..., help="Later report JSON"),
    show_unchanged: bool = typer.Option(False, help="Also list unchanged features"),
    exit_code: bool = typer.Option(False, help="Exit with status 1 when anything changed"),
):
    """Compare two reports and list features whose effective content changed."""
    result = compare_reports(_load(Path(old)), _load(Path(new)))

    table = Table(title="Feature changes")
    table.add_column("Status")
    table.add_column("Path")
    table.add_column("Details")
    for change in result.changes:
        if change.status == ChangeStatus.UNCHANGED and not show_unchanged:
            continue
        details = []
        if change.added_scenarios:
            details.append("+ " + ", ".join(change.added_scenarios))
        if change.removed_scenarios:
            details.append("- " + ", ".join(change.removed_scenarios))
        if change.background_changed:
            details.append("background changed")
        style = STATUS_STYLE[change.status]
        table.add_row(f"[{style}]{change.status.value}[/{style}]", change.path, "\n".join(details))
    console.print(table)
    summary = ", ".join(
        f"{len(result.by_status(status))} {status.value}"
        for status in (ChangeStatus.CHANGED, ChangeStatus.ADDED, ChangeStatus.REMOVED)
    )
    console.print(f"Compared {len(result.changes)} features: {summary}")

    if not result.has_changes:
        console.print("[green]No effective changes[/green]")
    elif exit_code:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
