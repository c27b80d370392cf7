from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from docspell.action import Action, prepare_bandaids, write_changes_to_disk
from docspell.errors import BandAidOrderError, SuggestionsFound
from docspell.interactive import UserPicked
from docspell.suggestions import BandAid, Span, Suggestion, SuggestionSet


def _setup(tmp_path: Path) -> tuple[Path, SuggestionSet]:
    target = tmp_path / "guide.md"
    target.write_text("# Guide\n\nTeh quick fox.\n", encoding="utf-8")
    suggestions = SuggestionSet()
    suggestions.add(
        Suggestion(
            path=target,
            span=Span(3, 0, 3),
            replacements=["The", "Ten"],
            detector="spelling",
            description="Possible spelling mistake: Teh",
        )
    )
    return target, suggestions


def _pick_first(suggestions: SuggestionSet, config: Any) -> UserPicked:
    picked = UserPicked()
    for path, items in suggestions:
        for suggestion in items:
            picked.add_bandaid(path, BandAid.from_suggestion(suggestion, 0))
    return picked


def test_check_prints_and_raises(tmp_path: Path) -> None:
    target, suggestions = _setup(tmp_path)
    output = io.StringIO()

    with pytest.raises(SuggestionsFound, match="Found 1 potential spelling mistakes"):
        Action.CHECK.run(suggestions, console=Console(file=output, width=200))

    text = output.getvalue()
    assert f"{target}:3:1" in text
    assert "Teh quick fox." in text
    assert "The, Ten" in text


def test_check_without_suggestions_passes() -> None:
    assert Action.CHECK.run(SuggestionSet(), console=Console(file=io.StringIO())) is None


def test_fix_is_not_implemented(tmp_path: Path) -> None:
    _, suggestions = _setup(tmp_path)
    with pytest.raises(NotImplementedError, match="not implemented just yet"):
        Action.FIX.run(suggestions)


def test_interactive_writes_picked_bandaids(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    target, suggestions = _setup(tmp_path)

    summary = Action.INTERACTIVE.run(suggestions, selector=_pick_first)

    assert summary is not None
    assert summary.ok
    assert [result.path for result in summary.written] == [target]
    assert target.read_text(encoding="utf-8") == "# Guide\n\nThe quick fox.\n"


def test_interactive_dry_run_leaves_files_alone(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    target, suggestions = _setup(tmp_path)

    summary = Action.INTERACTIVE.run(suggestions, selector=_pick_first, dry_run=True)

    assert summary is not None
    assert summary.written == []
    assert "-Teh quick fox." in summary.combined_diff
    assert "+The quick fox." in summary.combined_diff
    assert target.read_text(encoding="utf-8") == "# Guide\n\nTeh quick fox.\n"


def test_failed_file_does_not_stop_the_others(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    target, _ = _setup(tmp_path)
    picked = UserPicked()
    picked.add_bandaid(tmp_path / "gone.md", BandAid(Span(1, 0, 1), "x"))
    picked.add_bandaid(target, BandAid(Span(3, 0, 3), "The"))

    summary = write_changes_to_disk(picked)

    assert not summary.ok
    (failed,) = summary.failed
    assert failed.path == tmp_path / "gone.md"
    assert "Failed to canonicalize" in (failed.error or "")
    assert [result.path for result in summary.written] == [target]
    assert target.read_text(encoding="utf-8") == "# Guide\n\nThe quick fox.\n"


def test_nothing_picked_writes_nothing(tmp_path: Path) -> None:
    target, _ = _setup(tmp_path)
    summary = write_changes_to_disk(UserPicked())
    assert summary.results == []
    assert target.read_text(encoding="utf-8") == "# Guide\n\nTeh quick fox.\n"


def test_prepare_bandaids_sorts_per_file() -> None:
    path = Path("a.md")
    ordered = prepare_bandaids(
        {
            path: [BandAid(Span(2, 0, 1), "b"), BandAid(Span(1, 4, 5), "a")],
            Path("empty.md"): [],
        }
    )
    assert ordered == {path: [BandAid(Span(1, 4, 5), "a"), BandAid(Span(2, 0, 1), "b")]}


def test_overlapping_picks_fail_before_writing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    target, _ = _setup(tmp_path)
    picked = UserPicked()
    picked.add_bandaids(target, [BandAid(Span(3, 0, 3), "The"), BandAid(Span(3, 1, 5), "x")])

    with pytest.raises(BandAidOrderError):
        write_changes_to_disk(picked)
    assert target.read_text(encoding="utf-8") == "# Guide\n\nTeh quick fox.\n"
