#!/usr/bin/env python3
"""
docspell CLI

Finds spelling and grammar issues in documentation embedded in source files
(Python docstrings and comments) and in Markdown files, and lets you pick
the fixes to apply.

Checkers:
- spelling: SymSpell dictionary lookup
- languagetool: LanguageTool grammar and style rules

Usage:
    docspell check src/ README.md
    docspell check --changed --base-ref main
    docspell interactive src/
    docspell interactive --dry-run src/
    docspell init
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from docspell.action import Action
from docspell.checkers import CHECKERS, check as run_checkers
from docspell.config import Config
from docspell.documentation import Documentation
from docspell.errors import DocspellError, MappingCorruptionError, SuggestionsFound
from docspell.git_utils import get_changed_files
from docspell.logging_config import setup_logging
from docspell.suggestions import SuggestionSet
from docspell.ui import Icons, print_check_summary
from docspell.version import (
    EXIT_CANCELLED,
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_FINDINGS,
    EXIT_SUCCESS,
    __app_name__,
    __description__,
    __version__,
)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="docspell",
    help=f"{__app_name__} - {__description__}",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

PathsArg = Annotated[
    Optional[list[Path]],
    typer.Argument(help="Files or directories to check (default: current directory)"),
]
CheckerOpt = Annotated[
    Optional[list[str]],
    typer.Option("--checker", "-c", help="Checker to run, repeatable (spelling, languagetool)"),
]
CommentsOpt = Annotated[
    bool, typer.Option("--comments", help="Also check '#' comment blocks in Python files")
]
ChangedOpt = Annotated[
    bool, typer.Option("--changed", help="Only check files changed against --base-ref")
]
BaseRefOpt = Annotated[
    Optional[str], typer.Option("--base-ref", "-b", help="Base branch for --changed")
]
ConfigOpt = Annotated[
    Optional[Path], typer.Option("--config", help="Path to a docspell YAML config file")
]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Show detailed output")]
QuietOpt = Annotated[bool, typer.Option("--quiet", "-q", help="Suppress all output except errors")]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(
            f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]"
        )
        raise typer.Exit()


def _load_config(
    config_file: Path | None,
    checkers: list[str] | None,
    comments: bool,
    verbose: bool,
    quiet: bool,
) -> Config:
    cfg = Config().load(config_file)
    if checkers:
        cfg.set("checkers", list(checkers))
    if comments:
        cfg.set("include_comments", True)
    verbose = verbose or bool(cfg.get("verbose"))
    quiet = quiet or bool(cfg.get("quiet"))
    cfg.set("verbose", verbose)
    cfg.set("quiet", quiet)
    setup_logging(cfg.get("log_level"), verbose=verbose, quiet=quiet)
    return cfg


def _collect(
    cfg: Config,
    paths: list[Path] | None,
    changed: bool,
    base_ref: str | None,
) -> Documentation:
    extensions = cfg.get("extensions")
    if changed:
        targets = get_changed_files(base_ref or cfg.get("base_ref") or "main", extensions)
    else:
        targets = list(paths or [Path(".")])
    return Documentation.from_paths(
        targets,
        extensions=extensions,
        include_comments=bool(cfg.get("include_comments")),
    )


def _gather(
    cfg: Config,
    paths: list[Path] | None,
    changed: bool,
    base_ref: str | None,
    show_progress: bool,
) -> SuggestionSet:
    if not show_progress:
        return run_checkers(_collect(cfg, paths, changed, base_ref), cfg)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        task = progress.add_task("Collecting documentation...", total=None)
        documentation = _collect(cfg, paths, changed, base_ref)
        progress.update(
            task,
            description=(
                f"Running {', '.join(cfg.get('checkers') or []) or 'no checkers'} on "
                f"{documentation.literal_count()} literals in {len(documentation)} files..."
            ),
        )
        return run_checkers(documentation, cfg)


def _stdin_is_terminal() -> bool:
    return sys.stdin.isatty()


def _fail(message: str, verbose: bool, code: int = EXIT_ERROR) -> None:
    err_console.print(f"[red]Error:[/red] {message}")
    if verbose:
        import traceback

        traceback.print_exc()
    sys.exit(code)


@app.command()
def check(
    paths: PathsArg = None,
    checker: CheckerOpt = None,
    comments: CommentsOpt = False,
    changed: ChangedOpt = False,
    base_ref: BaseRefOpt = None,
    config_file: ConfigOpt = None,
    json_output: Annotated[
        bool, typer.Option("--json", help="Output suggestions as JSON to stdout")
    ] = False,
    verbose: VerboseOpt = False,
    quiet: QuietOpt = False,
) -> None:
    """
    Report all suggestions and fail if there are any.

    [bold]Examples:[/bold]

        docspell check src/

        docspell check --checker spelling --checker languagetool README.md

        docspell check --changed --json
    """
    try:
        cfg = _load_config(config_file, checker, comments, verbose, quiet)
        quiet = bool(cfg.get("quiet"))
        suggestions = _gather(cfg, paths, changed, base_ref, not quiet and not json_output)

        if json_output:
            payload = {"count": suggestions.count(), "suggestions": suggestions.to_dict()}
            print(json.dumps(payload, indent=2))
            sys.exit(EXIT_FINDINGS if suggestions.count() else EXIT_SUCCESS)

        try:
            Action.CHECK.run(suggestions, cfg, console=err_console)
        except SuggestionsFound as exc:
            if not quiet:
                err_console.print()
                print_check_summary(err_console, suggestions)
            err_console.print(f"\n[red]{Icons.CROSS} {exc}[/red]")
            sys.exit(EXIT_FINDINGS)

        if not quiet:
            console.print(f"[green]{Icons.CHECK} No issues found![/green]")
        sys.exit(EXIT_SUCCESS)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Check cancelled by user[/yellow]")
        sys.exit(EXIT_CANCELLED)
    except MappingCorruptionError:
        raise
    except (DocspellError, OSError) as e:
        _fail(str(e), verbose)


@app.command()
def fix(
    paths: PathsArg = None,
    checker: CheckerOpt = None,
    comments: CommentsOpt = False,
    config_file: ConfigOpt = None,
    verbose: VerboseOpt = False,
    quiet: QuietOpt = False,
) -> None:
    """
    Apply fixes without asking. [red]Not implemented yet.[/red]
    """
    try:
        cfg = _load_config(config_file, checker, comments, verbose, quiet)
        suggestions = _gather(cfg, paths, False, None, False)
        Action.FIX.run(suggestions, cfg)
    except NotImplementedError as e:
        _fail(str(e), verbose)


@app.command()
def interactive(
    paths: PathsArg = None,
    checker: CheckerOpt = None,
    comments: CommentsOpt = False,
    changed: ChangedOpt = False,
    base_ref: BaseRefOpt = None,
    config_file: ConfigOpt = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Print the resulting diff instead of writing files")
    ] = False,
    verbose: VerboseOpt = False,
    quiet: QuietOpt = False,
) -> None:
    """
    Pick replacements for every suggestion, then rewrite the files.

    Keys: [bold]y[/bold]/Enter apply, [bold]n[/bold] skip, [bold]e[/bold] type your own,
    [bold]d[/bold] skip the rest of the file, [bold]q[/bold] quit, [bold]?[/bold] help.
    """
    try:
        cfg = _load_config(config_file, checker, comments, verbose, quiet)
        if not _stdin_is_terminal():
            _fail("Interactive mode needs a terminal on stdin", verbose, EXIT_CONFIG_ERROR)

        suggestions = _gather(cfg, paths, changed, base_ref, not cfg.get("quiet"))
        if not suggestions:
            console.print(f"[green]{Icons.CHECK} No issues found![/green]")
            sys.exit(EXIT_SUCCESS)

        summary = Action.INTERACTIVE.run(suggestions, cfg, dry_run=dry_run)
        if summary is None:
            _fail("Interactive selection produced no write summary", verbose)
            return

        if dry_run:
            print(summary.combined_diff, end="")
        elif not cfg.get("quiet"):
            for result in summary.written:
                console.print(
                    f"[green]{Icons.CHECK}[/green] Wrote {result.path} "
                    f"({result.bandaids} corrections)"
                )
        for result in summary.failed:
            err_console.print(f"[red]{Icons.CROSS}[/red] {result.error}")
        sys.exit(EXIT_SUCCESS if summary.ok else EXIT_ERROR)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Cancelled by user, nothing was written[/yellow]")
        sys.exit(EXIT_CANCELLED)
    except MappingCorruptionError:
        raise
    except (DocspellError, OSError) as e:
        _fail(str(e), verbose)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing configuration"),
    ] = False,
) -> None:
    """
    Initialize docspell configuration in the current directory.
    """
    config_path = Path.cwd() / ".docspell.yaml"

    if config_path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {config_path}\n"
            "Use --force to overwrite."
        )
        raise typer.Exit(EXIT_CONFIG_ERROR)

    config_content = """\
# docspell configuration

# Checkers to run, in order: spelling, languagetool
checkers:
  - spelling

# File types to collect documentation from
extensions: [".py", ".md", ".markdown"]

# Also check '#' comment blocks in Python files
include_comments: false

# Base branch for --changed
base_ref: main

# DEBUG, INFO, WARNING, ERROR
log_level: null

spelling:
  max_edit_distance: 2
  max_suggestions: 5
  min_word_length: 2
  # files with one accepted word per line
  extra_dictionaries: []
  ignore: []

languagetool:
  language: en-US
  # e.g. http://localhost:8081 to use a running server instead of a local one
  remote_server: null
  disabled_rules: []
  max_suggestions: 5
"""

    config_path.write_text(config_content, encoding="utf-8")
    console.print(f"[green]{Icons.CHECK}[/green] Created configuration file: {config_path}")


@app.command(name="config")
def show_config(config_file: ConfigOpt = None) -> None:
    """Show current configuration."""
    cfg = Config().load(config_file)

    table = Table(title="Current Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    for key, value in cfg.to_dict().items():
        table.add_row(key, json.dumps(value) if isinstance(value, (dict, list)) else str(value))

    console.print(table)
    console.print(f"[dim]Source: {cfg.config_path or 'defaults'}[/dim]")


@app.command()
def doctor() -> None:
    """Check which checker backends can be used."""
    all_ok = True
    console.print("[bold]Checking checker backends...[/bold]\n")
    for name, checker_cls in sorted(CHECKERS.items()):
        ok, note = checker_cls.available()
        if ok:
            console.print(f"[green]{Icons.CHECK}[/green] {name}: {note}")
        else:
            console.print(f"[red]{Icons.CROSS}[/red] {name}: {note}")
            all_ok = False
    sys.exit(EXIT_SUCCESS if all_ok else EXIT_ERROR)


@app.command(name="version")
def show_version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]{__app_name__}[/bold blue]\n\n"
            f"Version: [green]{__version__}[/green]\n"
            f"Python: {sys.version.split()[0]}\n\n"
            f"{__description__}",
            title="Version Info",
            border_style="blue",
        )
    )


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """
    docspell - spelling and grammar checks for documentation in source files.

    Quick start:

        docspell check .
    """


if __name__ == "__main__":
    app()
