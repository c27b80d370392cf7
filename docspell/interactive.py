"""Interactive picking of replacements, contained in a suggestion.

The result of that pick is a band aid.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from rich.console import Console

from docspell.suggestions import BandAid, Span, Suggestion, SuggestionSet
from docspell.terminal import Event, Key, KeyEvent, ResizeEvent, ScopedRaw, TerminalEvents
from docspell.ui import CandidateList, SourceCache, create_console, question, render_suggestion

LOGGER = logging.getLogger(__name__)

HELP = r"""y, Enter   - apply the highlighted replacement
n          - do not apply the suggested correction
q, Esc     - quit; do not apply this or any of the remaining suggestions
Ctrl-C     - same as q
d          - do not apply this suggestion and skip the rest of the file
j          - go back to the previous suggestion (not supported yet)
e          - type a custom replacement, Enter applies it as typed
Up, Down   - move the highlight between the replacements
?          - print help
"""


class Outcome(Enum):
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    QUIT = "quit"
    SKIP_REST_OF_FILE = "skip_rest_of_file"
    SHOW_HELP = "show_help"
    GO_BACK = "go_back"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class Pick:
    """What the user decided for one suggestion."""

    outcome: Outcome
    bandaid: BandAid | None = None

    @classmethod
    def confirmed(cls, bandaid: BandAid) -> Pick:
        return cls(Outcome.CONFIRMED, bandaid)


@dataclass
class SelectionState:
    """Statefulness for the selection process of one suggestion."""

    suggestion: Suggestion
    custom_replacement: str = ""
    pick_idx: int = 0
    # all items provided by the checkers plus the user provided one
    n_items: int = field(init=False)

    def __post_init__(self) -> None:
        self.n_items = len(self.suggestion.replacements) + 1

    def select_next(self) -> None:
        self.pick_idx = (self.pick_idx + 1) % self.n_items

    def select_previous(self) -> None:
        self.pick_idx = (self.pick_idx + self.n_items - 1) % self.n_items

    def select_custom(self) -> None:
        self.pick_idx = self.n_items - 1

    def is_custom_entry(self) -> bool:
        """The last slot is the user input."""
        return self.pick_idx + 1 == self.n_items

    def to_bandaid(self) -> BandAid:
        if self.is_custom_entry():
            return BandAid(self.suggestion.span, self.custom_replacement)
        return BandAid.from_suggestion(self.suggestion, self.pick_idx)


def _is_quit(event: KeyEvent) -> bool:
    return event.key == Key.ESC or (event.ctrl and event.char == "c")


def handle_selecting(state: SelectionState, event: KeyEvent) -> Pick:
    if _is_quit(event):
        return Pick(Outcome.QUIT)
    if event.key == Key.UP:
        state.select_previous()
    elif event.key == Key.DOWN:
        state.select_next()
    elif event.key == Key.ENTER or event.is_char("y"):
        return Pick.confirmed(state.to_bandaid())
    elif event.is_char("n"):
        return Pick(Outcome.DECLINED)
    elif event.is_char("q"):
        return Pick(Outcome.QUIT)
    elif event.is_char("d"):
        return Pick(Outcome.SKIP_REST_OF_FILE)
    elif event.is_char("j"):
        return Pick(Outcome.GO_BACK)
    elif event.is_char("e"):
        # jump to the user input entry
        state.select_custom()
    elif event.is_char("?"):
        return Pick(Outcome.SHOW_HELP)
    else:
        LOGGER.debug("Unexpected input %s", event)
    return Pick(Outcome.DEFERRED)


def handle_custom_entry(state: SelectionState, event: KeyEvent) -> Pick:
    """Provide a replacement that was not provided by the backend."""
    if _is_quit(event):
        return Pick(Outcome.QUIT)
    if event.key == Key.UP:
        state.select_previous()
    elif event.key == Key.DOWN:
        state.select_next()
    elif event.key == Key.ENTER:
        return Pick.confirmed(BandAid(state.suggestion.span, state.custom_replacement))
    elif event.key == Key.BACKSPACE:
        state.custom_replacement = state.custom_replacement[:-1]
    elif event.key == Key.CHAR and not event.ctrl and event.char.isprintable():
        state.custom_replacement += event.char
    return Pick(Outcome.DEFERRED)


class UserPicked:
    """The selection of used suggestion replacements."""

    def __init__(self) -> None:
        self.bandaids: dict[Path, list[BandAid]] = {}
        self._taken = False

    def count(self) -> int:
        """Count the number of band aids across all files."""
        return sum(len(items) for items in self.bandaids.values())

    def add_bandaid(self, path: Path, fix: BandAid) -> None:
        self.bandaids.setdefault(path, []).append(fix)

    def add_bandaids(self, path: Path, fixes: Iterable[BandAid]) -> None:
        self.bandaids.setdefault(path, []).extend(fixes)

    def conflicts(self, path: Path, span: Span) -> bool:
        """Whether ``span`` overlaps a band aid already picked for ``path``."""
        return any(
            fix.span.line == span.line and fix.span.columns.overlaps(span.columns)
            for fix in self.bandaids.get(path, [])
        )

    def take(self) -> dict[Path, list[BandAid]]:
        """Hand out the band aids; writing them twice would garble the files."""
        if self._taken:
            raise RuntimeError("Band aids were already handed out for writing")
        self._taken = True
        bandaids, self.bandaids = self.bandaids, {}
        return bandaids


class Selector:
    """Walks the user through suggestions, one key press at a time."""

    def __init__(
        self,
        console: Console | None = None,
        events: Callable[[], Event] | None = None,
        raw_mode: Callable[[], AbstractContextManager[Any]] | None = None,
    ):
        self.console = console or create_console()
        self._terminal: TerminalEvents | None = None
        if events is None:
            self._terminal = TerminalEvents()
            events = self._terminal.read
        self.events = events
        self.raw_mode = raw_mode or ScopedRaw
        self.view = CandidateList(self.console)
        self.source = SourceCache()

    def user_input(self, state: SelectionState, running_idx: tuple[int, int]) -> Pick:
        """Wait for user input and process it into a ``Pick``."""
        self.view.reset()
        self.console.print(question(*running_idx))
        while True:
            self.view.render(
                state.suggestion.replacements, state.pick_idx, state.custom_replacement
            )
            with self.raw_mode():
                event = self.events()

            if isinstance(event, ResizeEvent):
                LOGGER.debug("Terminal resized to %sx%s, redrawing", event.columns, event.rows)
                continue

            if state.is_custom_entry():
                pick = handle_custom_entry(state, event)
            else:
                pick = handle_selecting(state, event)
            if pick.outcome is not Outcome.DEFERRED:
                return pick

    def select(self, suggestions: SuggestionSet) -> UserPicked:
        picked = UserPicked()
        LOGGER.debug("Select the ones to actually use")
        try:
            for path, items in suggestions:
                count = len(items)
                self.console.print(f"Path is {path} and has {count}")
                for idx, suggestion in enumerate(items):
                    if not suggestion.replacements:
                        LOGGER.debug("Suggestion did not contain a replacement, skip")
                        continue
                    if picked.conflicts(path, suggestion.span):
                        self.console.print(
                            f"[yellow]Skipping {suggestion.span}, it overlaps a replacement "
                            "already picked for this file[/yellow]"
                        )
                        continue
                    render_suggestion(
                        self.console, suggestion, self.source, show_replacements=False
                    )
                    state = SelectionState(suggestion)
                    pick = self.user_input(state, (idx, count))
                    while pick.outcome in (Outcome.SHOW_HELP, Outcome.GO_BACK):
                        if pick.outcome is Outcome.SHOW_HELP:
                            self.console.print(HELP)
                        else:
                            self.console.print(
                                "[yellow]Going back to a previous suggestion is not "
                                "currently supported[/yellow]"
                            )
                        pick = self.user_input(state, (idx, count))

                    if pick.outcome is Outcome.QUIT:
                        return picked
                    if pick.outcome is Outcome.SKIP_REST_OF_FILE:
                        break
                    if pick.outcome is Outcome.CONFIRMED and pick.bandaid is not None:
                        picked.add_bandaid(path, pick.bandaid)
        finally:
            if self._terminal is not None:
                self._terminal.close()
        return picked


def select_interactive(
    suggestions: SuggestionSet,
    config: Any = None,
    events: Callable[[], Event] | None = None,
    console: Console | None = None,
    raw_mode: Callable[[], AbstractContextManager[Any]] | None = None,
) -> UserPicked:
    if console is None:
        color = True if config is None else bool(config.get("color", True))
        console = create_console(color=color)
    return Selector(console=console, events=events, raw_mode=raw_mode).select(suggestions)
