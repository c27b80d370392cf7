from __future__ import annotations

import difflib
from pathlib import Path


def _display_path(path: Path | str) -> str:
    path = Path(path)
    try:
        return path.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix().lstrip("/")


def make_unified_diff(path: Path | str, old_text: str, new_text: str) -> str:
    if old_text == new_text:
        return ""

    name = _display_path(path)
    diff_lines = difflib.unified_diff(
        old_text.splitlines(keepends=True),
        new_text.splitlines(keepends=True),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
        lineterm="\n",
    )
    return f"diff --git a/{name} b/{name}\n" + "".join(diff_lines)


def bundle_diffs(diffs: dict[Path, str]) -> str:
    """Concatenate per-file diffs ordered by path, each ending in a newline."""
    parts: list[str] = []
    for path in sorted(diffs, key=lambda p: Path(p).as_posix()):
        diff = diffs[path]
        if not diff.strip():
            continue
        if not diff.endswith("\n"):
            diff += "\n"
        parts.append(diff)
    return "".join(parts)
