"""
Rich console output for docspell: suggestions, summaries and the candidate
list of the interactive prompt.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.table import Table
from rich.text import Text

from docspell.suggestions import Suggestion, SuggestionSet


class Icons:
    CHECK = "✓"
    CROSS = "✗"
    WARNING = "⚠"
    PICK = "»"


def create_console(stderr: bool = False, color: bool = True) -> Console:
    """Create a configured Rich console."""
    return Console(
        stderr=stderr,
        force_terminal=None,
        color_system="auto" if color else None,
        no_color=not color,
        highlight=False,
    )


class SourceCache:
    """Lines of the files suggestions point into, read once per file."""

    def __init__(self) -> None:
        self._lines: dict[Path, list[str]] = {}

    def line(self, path: Path, line: int) -> str:
        if path not in self._lines:
            try:
                self._lines[path] = path.read_text(encoding="utf-8").split("\n")
            except (OSError, UnicodeDecodeError):
                self._lines[path] = []
        lines = self._lines[path]
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""


def highlight_line(content: str, suggestion: Suggestion) -> Text:
    text = Text(content)
    text.stylize("bold red underline", suggestion.span.start, suggestion.span.end)
    return text


def render_suggestion(
    console: Console,
    suggestion: Suggestion,
    source: SourceCache,
    show_replacements: bool = True,
) -> None:
    """Print the location, the affected line and the span marker."""
    span = suggestion.span
    header = Text()
    header.append(f"{suggestion.path}:{span.line}:{span.start + 1}", style="cyan")
    if suggestion.detector:
        header.append(f" [{suggestion.detector}]", style="dim")
    if suggestion.description:
        header.append(f" {suggestion.description}")
    console.print(header)

    content = source.line(suggestion.path, span.line).expandtabs(1)
    gutter = f"{span.line:>5} | "
    line = Text(gutter, style="blue")
    line.append_text(highlight_line(content, suggestion))
    console.print(line)
    marker = " " * (len(gutter) + span.start) + "^" * max(1, span.end - span.start)
    console.print(Text(marker, style="bold red"))

    if show_replacements and suggestion.replacements:
        candidates = ", ".join(suggestion.replacements)
        console.print(Text(f"{' ' * len(gutter)}- {candidates}", style="green"))


def print_check_summary(console: Console, suggestions: SuggestionSet) -> None:
    table = Table(title="Check Summary", show_header=True, header_style="bold cyan")
    table.add_column("File", style="dim")
    table.add_column("Detector")
    table.add_column("Count", justify="right")

    for path, items in suggestions:
        per_detector = Counter(item.detector or "unknown" for item in items)
        for detector, count in sorted(per_detector.items()):
            table.add_row(str(path), detector, str(count))

    table.add_row("", "", "")
    table.add_row("[bold]Total[/bold]", "", f"[bold]{suggestions.count()}[/bold]")
    console.print(table)


def question(nth: int, of_n: int) -> Text:
    return Text(
        f"({nth + 1}/{of_n}) Apply this suggestion [y,n,q,d,j,e,?]?",
        style="bold blue",
    )


class CandidateList:
    """The vertical list of replacements, redrawn in place on every key press."""

    def __init__(self, console: Console):
        self.console = console
        self._drawn = 0

    def reset(self) -> None:
        self._drawn = 0

    def lines(self, replacements: list[str], pick_idx: int, custom: str) -> list[Text]:
        rendered: list[Text] = []
        for idx, replacement in enumerate(replacements):
            line = Text()
            if idx == pick_idx:
                line.append(f"  {Icons.PICK} ", style="bold green")
                line.append(replacement, style="bold green")
            else:
                line.append("    ")
                line.append(replacement, style="blue")
            rendered.append(line)

        custom_line = Text()
        if pick_idx == len(replacements):
            custom_line.append(f"  {Icons.PICK} ", style="bold green")
        else:
            custom_line.append("    ")
        custom_line.append(custom or "...", style="yellow")
        rendered.append(custom_line)
        return rendered

    def render(self, replacements: list[str], pick_idx: int, custom: str) -> None:
        if self._drawn:
            self.console.control(Control.move_to_column(0, -self._drawn))
        erase = Control((ControlType.ERASE_IN_LINE, 2))
        lines = self.lines(replacements, pick_idx, custom)
        for line in lines:
            self.console.control(erase)
            self.console.print(line)
        self._drawn = len(lines)
