"""Typer-based CLI for validating documentation and building site artifacts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from . import __version__, config
from .config_manager import load_docs_config, load_settings
from .indexer import IndexBuilder
from .ingest import IngestionPipeline
from .libraries import extract_library_descriptions, save_library_descriptions
from .parser import (
    DocumentationJsParser,
    JsonFileParser,
    discover_module_files,
    module_directories,
)
from .reporter import EXIT_ENVIRONMENT, EnvironmentFailure, FindingReporter
from .storage import DocStore, save_json

console = Console(stderr=True)

app = typer.Typer(
    help="📚 docindex — validate parsed documentation and build the doc site search index.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"docindex v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """docindex: catch documentation rot across a multi-library corpus."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: EnvironmentFailure) -> None:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=EXIT_ENVIRONMENT)


@app.command("scan")
def scan(
    path: Path = typer.Argument(Path("."), help="Library (or packages root) to scan."),
    pattern: str = typer.Option(config.DEFAULT_PATTERN, "--pattern", "-p", help="Filename glob for source files."),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero if any finding is reported."),
    ignore_external: bool = typer.Option(
        True,
        "--ignore-external/--check-external",
        help="Skip references into libraries that were not scanned.",
    ),
    save: bool = typer.Option(False, "--save/--no-save", help="Persist pruned doc JSON per module."),
    output: Path = typer.Option(config.MODULES_DIR, "--output", "-o", help="Directory for persisted doc JSON."),
    json_file: Optional[str] = typer.Option(
        None,
        "--json-file",
        help="Read pre-extracted records from this file in each directory instead of running the parser.",
    ),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-j", min=1, help="Directories parsed at once."),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show a progress bar."),
):
    """🔍 Validate the documentation of every ``@module`` directory under PATH.

    Example:
      docindex scan packages/ui --strict
      docindex scan . --check-external --save
    """
    settings = load_settings()
    root = path.resolve()
    if not root.is_dir():
        console.print(f"[red]Path not found: {path}[/red]")
        raise typer.Exit(code=EXIT_ENVIRONMENT)

    directories = module_directories(discover_module_files(root, pattern))
    if not directories:
        console.print(f"[red]No @module files matching {pattern} in {root}[/red]")
        raise typer.Exit(code=EXIT_ENVIRONMENT)

    reporter = FindingReporter(strict=strict)
    doc_parser = JsonFileParser(json_file) if json_file else DocumentationJsParser(settings["parser_command"])
    store = DocStore(output, reporter, allowed_error_tags=settings["allowed_error_tags"]) if save else None
    pipeline = IngestionPipeline(
        doc_parser,
        reporter,
        store=store,
        concurrency=concurrency or settings["concurrency"],
        link_exceptions=settings["link_exceptions"],
        raw_prefix=settings["raw_prefix"],
        show_progress=progress,
    )

    try:
        pipeline.scan_sync(directories, ignore_external=ignore_external)
    except EnvironmentFailure as exc:
        _fail(exc)

    typer.echo(f"Scanned {len(directories)} directories: {reporter.summary()}")
    raise typer.Exit(code=reporter.exit_code)


@app.command("index")
def index(
    modules_dir: Path = typer.Option(config.MODULES_DIR, "--modules-dir", help="Persisted doc JSON directory."),
    pages_dir: Path = typer.Option(config.PAGES_DIR, "--pages-dir", help="Markdown pages directory."),
    output: Path = typer.Option(config.SEARCH_INDEX_FILE, "--output", "-o", help="Search index file."),
):
    """🗂️  Build the client-side search index from module docs and pages."""
    reporter = FindingReporter()
    builder = IndexBuilder(modules_dir, pages_dir, reporter)
    try:
        search_index = builder.build_sync()
        save_json(output, search_index.to_json())
    except EnvironmentFailure as exc:
        _fail(exc)

    typer.echo(f"Indexed {search_index.document_count} documents into {output}")
    raise typer.Exit(code=reporter.exit_code)


@app.command("describe")
def describe(
    path: Path = typer.Argument(Path("."), help="Library repository root."),
    output: Path = typer.Option(config.LIBRARY_DESCRIPTION_FILE, "--output", "-o", help="Description file."),
    strict: bool = typer.Option(False, "--strict", help="Report libraries without a package.json."),
):
    """📝 Write the library description file (versions, dependencies, summaries)."""
    reporter = FindingReporter(strict=strict)
    try:
        descriptions = extract_library_descriptions(load_docs_config(path.resolve()), strict=strict, reporter=reporter)
        save_library_descriptions(descriptions, output)
    except EnvironmentFailure as exc:
        _fail(exc)

    typer.echo(f"Described {len(descriptions)} libraries in {output}")
    raise typer.Exit(code=reporter.exit_code)


if __name__ == "__main__":
    app()
