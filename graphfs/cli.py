"""Command-line entry point.

\b
  graphfs scan ROOT     Inventory source files and LinkedDoc blocks
  graphfs build ROOT    Build the module dependency graph
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from graphfs import __version__
from graphfs.cli_logging import configure_cli_logging
from graphfs.graph import BuildOptions, GraphBuilder, ValidationFailedError
from graphfs.scanner import (
    FocusFilter,
    Sampler,
    SamplingStrategy,
    ScanAbortedError,
    Scanner,
    ScanOptions,
)
from graphfs.scanner.ignore import relative_posix

logger = logging.getLogger(__name__)

console = Console()


def _scan_options(
    exclude: tuple[str, ...],
    max_file_size: int | None,
    workers: int | None,
    sequential: bool,
    strict: bool,
    max_errors: int,
) -> ScanOptions:
    overrides: dict = {
        "exclude_patterns": list(exclude),
        "strict": strict,
        "max_errors": max_errors,
    }
    if max_file_size is not None:
        overrides["max_file_size"] = max_file_size
    if workers is not None:
        overrides["workers"] = workers
    if sequential:
        overrides["concurrent"] = False
    return ScanOptions(**overrides)


def _format_size(size: int) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show the graphfs version and exit.")
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """GraphFS - knowledge graphs from LinkedDoc metadata.

    \b
      graphfs scan ROOT           List source files and LinkedDoc blocks
      graphfs build ROOT          Build and summarise the dependency graph
    """
    if version:
        click.echo(__version__)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Options shared by scan and build
_scan_option_decorators = [
    click.option(
        "--exclude", "-e", multiple=True, help="Extra ignore pattern (repeatable)"
    ),
    click.option(
        "--max-file-size", type=click.IntRange(min=0), help="Largest file in bytes"
    ),
    click.option("--workers", "-w", type=click.IntRange(min=0), help="Worker threads"),
    click.option("--sequential", is_flag=True, help="Scan on a single thread"),
    click.option("--strict", is_flag=True, help="Abort on the first error"),
    click.option(
        "--max-errors",
        type=click.IntRange(min=0),
        default=0,
        help="Abort after this many errors (0 = unlimited)",
    ),
    click.option("--verbose", "-v", is_flag=True, help="Log at INFO level"),
]


def scan_options(func):
    for decorator in reversed(_scan_option_decorators):
        func = decorator(func)
    return func


@main.command("scan")
@click.argument("root", type=click.Path(file_okay=False, path_type=Path))
@scan_options
@click.option("--focus", "-f", multiple=True, help="Keep files matching glob")
@click.option("--sample", type=click.IntRange(min=1), help="Sample N files")
@click.option(
    "--sample-strategy",
    type=click.Choice([s.value for s in SamplingStrategy]),
    default=SamplingStrategy.RANDOM.value,
    show_default=True,
)
@click.option("--seed", type=int, default=None, help="Seed for random sampling")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan_command(
    root: Path,
    exclude: tuple[str, ...],
    max_file_size: int | None,
    workers: int | None,
    sequential: bool,
    strict: bool,
    max_errors: int,
    verbose: bool,
    focus: tuple[str, ...],
    sample: int | None,
    sample_strategy: str,
    seed: int | None,
    as_json: bool,
) -> None:
    """Scan ROOT and list source files.

    Examples:
        graphfs scan . --exclude testdata
        graphfs scan src --focus "api/**/*.go" --json
        graphfs scan . --sample 50 --sample-strategy stratified
    """
    configure_cli_logging(verbose=verbose)
    options = _scan_options(
        exclude, max_file_size, workers, sequential, strict, max_errors
    )

    try:
        result = Scanner().scan(root, options)
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except ScanAbortedError as e:
        if e.result is not None:
            click.echo(e.result.errors.report(), err=True)
        raise click.ClickException(str(e)) from e

    root = root.resolve()
    records = {r.path: r for r in result.files}
    paths = [r.path for r in result.files]

    if focus:
        paths = FocusFilter(list(focus), base_path=root).match(paths)
    if sample:
        paths = Sampler(sample_strategy, size=sample, seed=seed).sample(paths)
    selected = sorted((records[p] for p in paths), key=lambda r: r.path)

    if as_json:
        output = {
            "root": str(root),
            "files": [
                {
                    "path": relative_posix(Path(r.path), root),
                    "language": r.language,
                    "size": r.size,
                    "mod_time": r.mod_time.isoformat(),
                    "has_linked_doc": r.has_linked_doc,
                }
                for r in selected
            ],
            "files_scanned": result.files_scanned,
            "files_failed": result.files_failed,
            "errors": [str(e) for e in result.errors.errors()],
        }
        click.echo(json.dumps(output, indent=2))
        return

    table = Table(title=f"Scan: {root}")
    table.add_column("Path", style="cyan")
    table.add_column("Language", style="green")
    table.add_column("Size", justify="right")
    table.add_column("LinkedDoc", justify="center")
    for record in selected:
        table.add_row(
            relative_posix(Path(record.path), root),
            record.language,
            _format_size(record.size),
            "✓" if record.has_linked_doc else "",
        )

    if table.row_count == 0:
        console.print("[dim]No source files found.[/dim]")
    else:
        console.print(table)
    console.print(
        f"{len(selected)} of {result.total_files} files, "
        f"{sum(1 for r in selected if r.has_linked_doc)} with LinkedDoc "
        f"({result.duration:.2f}s)"
    )
    if result.errors.has_errors():
        console.print(result.errors.report(), style="yellow", markup=False)


@main.command("build")
@click.argument("root", type=click.Path(file_okay=False, path_type=Path))
@scan_options
@click.option("--validate", is_flag=True, help="Fail on validation errors")
@click.option("--progress", is_flag=True, help="Report build progress")
def build_command(
    root: Path,
    exclude: tuple[str, ...],
    max_file_size: int | None,
    workers: int | None,
    sequential: bool,
    strict: bool,
    max_errors: int,
    verbose: bool,
    validate: bool,
    progress: bool,
) -> None:
    """Build the dependency graph of ROOT and print its statistics.

    Exits with status 1 when --validate finds errors.
    """
    configure_cli_logging(verbose=verbose)
    options = BuildOptions(
        scan_options=_scan_options(
            exclude, max_file_size, workers, sequential, strict, max_errors
        ),
        validate_graph=validate,
        report_progress=progress,
    )

    try:
        graph = GraphBuilder(console=console).build(root, options)
    except (FileNotFoundError, ScanAbortedError, ValidationFailedError) as e:
        raise click.ClickException(str(e)) from e

    stats = graph.statistics
    table = Table(title=f"Graph: {graph.root}", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Modules", str(stats.total_modules))
    table.add_row("Triples", str(stats.total_triples))
    table.add_row("Relationships", str(stats.total_relationships))
    for language, count in sorted(stats.modules_by_language.items()):
        table.add_row(f"Language: {language}", str(count))
    for layer, count in sorted(stats.modules_by_layer.items()):
        table.add_row(f"Layer: {layer}", str(count))
    table.add_row("Unresolved dependencies", str(len(graph.unresolved)))
    table.add_row("Parse errors", str(graph.errors.count()))
    table.add_row("Build time", f"{stats.build_duration:.2f}s")
    console.print(table)


if __name__ == "__main__":
    main()
