from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from patcher.diff import bundle_diffs, make_unified_diff


def test_unified_diff_applies_cleanly(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init"], cwd=repo, check=True, capture_output=True, text=True)
    monkeypatch.chdir(repo)

    target = repo / "README.md"
    target.write_text("# Readme\n\nTeh project.\n", encoding="utf-8")

    old = target.read_text(encoding="utf-8")
    new = "# Readme\n\nThe project.\n"
    diff = make_unified_diff(target, old, new)
    assert diff.startswith("diff --git a/README.md b/README.md\n")

    diff_path = tmp_path / "change.diff"
    diff_path.write_text(diff, encoding="utf-8")
    subprocess.run(["git", "apply", "--check", str(diff_path)], cwd=repo, check=True)
    subprocess.run(["git", "apply", str(diff_path)], cwd=repo, check=True)
    assert target.read_text(encoding="utf-8") == new


def test_unchanged_text_has_no_diff() -> None:
    assert make_unified_diff("a.md", "same\n", "same\n") == ""


def test_bundle_diffs_orders_by_path() -> None:
    diffs = {
        Path("b.md"): make_unified_diff("b.md", "x\n", "y\n"),
        Path("a.md"): make_unified_diff("a.md", "a\n", "b\n"),
        Path("c.md"): "",
    }
    combined = bundle_diffs(diffs)
    assert combined.index("a.md") < combined.index("b.md")
    assert "c.md" not in combined
