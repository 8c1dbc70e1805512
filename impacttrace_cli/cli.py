"""Typer-based CLI for ImpactTrace commit impact analysis."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .classifier import TestImpactClassifier
from .cli_setup import set_llm, show_llm, unset_llm
from .config_manager import load_analysis_settings
from .engine import ImpactEngine
from .errors import RepositoryError
from .git_reader import GitChangeReader
from .llm import LocalLLM
from .locator import DependencyLocator
from .report import render_json, render_report
from .symbols import SymbolExtractor

app = typer.Typer(
    help="🔍 ImpactTrace — find the end-to-end tests impacted by a commit.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Progress goes to stderr so stdout carries only the report.
console = Console(stderr=True)

app.command("set-llm")(set_llm)
app.command("unset-llm")(unset_llm)
app.command("show-llm")(show_llm)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"ImpactTrace CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """ImpactTrace CLI: classify the tests a commit adds, removes, or modifies."""
    pass


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command("analyze")
def analyze(
    repo: Path = typer.Option(..., "--repo", "-r", exists=True, file_okay=False, help="Path to local repo."),
    commit: str = typer.Option(..., "--commit", "-c", help="Commit SHA to analyze."),
    fmt: str = typer.Option("text", "--format", "-f", help="Report format: text or json."),
    at_commit: bool = typer.Option(
        False,
        "--at-commit",
        help="Read post-commit file content from the commit instead of the working tree.",
    ),
    llm_provider: Optional[str] = typer.Option(None, "--provider", help="LLM provider override."),
    llm_model: Optional[str] = typer.Option(None, "--model", help="LLM model override."),
    llm_api_key: Optional[str] = typer.Option(None, "--api-key", help="API key override."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Report the tests impacted by a single commit."""
    fmt = fmt.lower()
    if fmt not in {"text", "json"}:
        raise typer.BadParameter("Format must be one of: text, json")

    _configure_logging(verbose)

    try:
        reader = GitChangeReader(repo)
    except RepositoryError as exc:
        typer.echo(f"❌ {exc}", err=True)
        raise typer.Exit(code=1)

    sha = reader.resolve_commit(commit)
    if sha is None:
        typer.echo(f"❌ Commit '{commit}' not found in {reader.repo_path}", err=True)
        raise typer.Exit(code=1)

    llm = LocalLLM(model=llm_model, provider=llm_provider, api_key=llm_api_key)
    settings = load_analysis_settings(read_from_commit=at_commit)
    engine = ImpactEngine(
        reader,
        SymbolExtractor(llm),
        DependencyLocator(reader.repo_path, settings.source_extensions, settings.skip_dirs),
        TestImpactClassifier(llm),
        settings,
        on_event=None if quiet else (lambda msg: console.print(f"[dim]•[/dim] {escape(msg)}", highlight=False)),
    )

    if not quiet:
        console.print(f"\n🔍 Analyzing commit [bold]{escape(commit)}[/bold] using [cyan]{escape(llm.describe())}[/cyan]...\n")

    analysis = engine.analyze(commit)

    if fmt == "json":
        typer.echo(render_json(analysis.descriptors, commit=sha))
        return

    if analysis.has_impact and not quiet:
        console.print("\n📋 Final Impact Report:\n")
    for line in render_report(analysis.descriptors):
        typer.echo(line)


if __name__ == "__main__":
    app()
