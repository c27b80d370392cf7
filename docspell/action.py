"""What to do with the suggestions once all checkers are done."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from rich.console import Console

from docspell.errors import CorrectionError, SuggestionsFound
from docspell.interactive import UserPicked, select_interactive
from docspell.suggestions import BandAid, SuggestionSet
from docspell.ui import SourceCache, create_console, render_suggestion
from patcher.diff import bundle_diffs, make_unified_diff
from patcher.patcher import correct_file, render_corrected, validate_bandaids
from patcher.types import CorrectionResult, CorrectionSummary

LOGGER = logging.getLogger(__name__)

SelectFn = Callable[[SuggestionSet, Any], UserPicked]


def _describe(exc: CorrectionError) -> str:
    if exc.__cause__ is not None:
        return f"{exc}: {exc.__cause__}"
    return str(exc)


def prepare_bandaids(bandaids: dict[Path, list[BandAid]]) -> dict[Path, list[BandAid]]:
    """Sort every file's band aids by position and validate them all.

    Raises ``BandAidOrderError`` before any file is touched.
    """
    ordered = {
        path: sorted(items, key=lambda b: (b.span.line, b.span.start))
        for path, items in bandaids.items()
        if items
    }
    for path, items in ordered.items():
        validate_bandaids(path, items)
    return ordered


def write_changes_to_disk(picked: UserPicked, dry_run: bool = False) -> CorrectionSummary:
    """Apply the picked band aids, one file at a time.

    A file that cannot be rewritten is recorded in the summary and the
    remaining files are still processed. With ``dry_run`` nothing is written
    and the summary carries the would-be diff.
    """
    summary = CorrectionSummary()
    if picked.count() == 0:
        LOGGER.debug("No band aids to apply")
        picked.take()
        return summary

    LOGGER.debug("Writing changes back to disk")
    ordered = prepare_bandaids(picked.take())
    for path, bandaids in ordered.items():
        try:
            if dry_run:
                before = render_corrected(path, [])
                after = render_corrected(path, bandaids)
                summary.diffs_by_file[path] = make_unified_diff(path, before, after)
                written = False
            else:
                correct_file(path, bandaids)
                written = True
        except CorrectionError as exc:
            LOGGER.error("%s", _describe(exc))
            summary.results.append(
                CorrectionResult(path=path, bandaids=len(bandaids), written=False, error=_describe(exc))
            )
            continue
        summary.results.append(CorrectionResult(path=path, bandaids=len(bandaids), written=written))

    summary.combined_diff = bundle_diffs(summary.diffs_by_file)
    return summary


class Action(Enum):
    """Mode in which docspell operates."""

    # Fix issues without interaction if there is sufficient information
    FIX = "fix"
    # Only show errors
    CHECK = "check"
    # Interactively choose from the candidates provided, similar to `git add -p`
    INTERACTIVE = "interactive"

    def check(self, suggestions: SuggestionSet, console: Console | None = None) -> None:
        """Print all suggestions, raise ``SuggestionsFound`` if there are any."""
        console = console or create_console(stderr=True)
        source = SourceCache()
        count = 0
        for _path, items in suggestions:
            count += len(items)
            for suggestion in items:
                render_suggestion(console, suggestion, source)
        if count > 0:
            raise SuggestionsFound(count)

    def run(
        self,
        suggestions: SuggestionSet,
        config: Any = None,
        console: Console | None = None,
        selector: SelectFn | None = None,
        dry_run: bool = False,
    ) -> CorrectionSummary | None:
        """Run the requested action."""
        if self is Action.FIX:
            raise NotImplementedError("Unsupervised fixing is not implemented just yet")
        if self is Action.CHECK:
            self.check(suggestions, console)
            return None
        picked = (selector or select_interactive)(suggestions, config)
        return write_changes_to_disk(picked, dry_run=dry_run)
