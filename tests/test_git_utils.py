from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from docspell.git_utils import get_changed_files


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        ["git", "-c", "user.email=dev@example.com", "-c", "user.name=dev", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )


def test_changed_files_against_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init")
    _git(repo, "checkout", "-b", "main")
    (repo / "old.py").write_text('"""Old."""\n', encoding="utf-8")
    (repo / "README.md").write_text("# Readme\n", encoding="utf-8")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "init")

    _git(repo, "checkout", "-b", "feature")
    (repo / "new.py").write_text('"""New."""\n', encoding="utf-8")
    (repo / "data.json").write_text("{}\n", encoding="utf-8")
    (repo / "README.md").write_text("# Readme\n\nMore.\n", encoding="utf-8")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "change")

    monkeypatch.chdir(repo)
    changed = get_changed_files("main", [".py", ".md"])

    assert sorted(changed) == [Path("README.md"), Path("new.py")]


def test_unknown_base_falls_back_to_tracked_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init")
    (repo / "a.md").write_text("# A\n", encoding="utf-8")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "init")

    monkeypatch.chdir(repo)
    assert get_changed_files("does-not-exist") == [Path("a.md")]
