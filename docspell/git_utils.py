from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

LOGGER = logging.getLogger(__name__)


def _git(args: list[str], check: bool = True) -> str:
    try:
        return subprocess.check_output(
            ["git", *args], text=True, stderr=subprocess.DEVNULL
        ).strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        if check:
            raise
        return ""


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def get_changed_files(base_ref: str, extensions: Iterable[str] | None = None) -> list[Path]:
    """Files changed between origin/<base_ref> (or local base_ref) and HEAD.

    Falls back to every tracked file when neither ref exists or the diff is
    empty. Deleted files are dropped.
    """
    ref = None
    for candidate in (f"origin/{base_ref}", base_ref):
        if _git(["rev-parse", "--verify", candidate], check=False):
            ref = candidate
            break

    output = ""
    if ref is not None:
        output = _git(["diff", "--name-only", f"{ref}...HEAD"], check=False)
    if not output:
        LOGGER.debug("No diff against %s, using all tracked files", base_ref)
        output = _git(["ls-files"], check=False)

    suffixes = {ext.lower() for ext in extensions} if extensions else None
    files: list[Path] = []
    for name in _lines(output):
        path = Path(name)
        if suffixes is not None and path.suffix.lower() not in suffixes:
            continue
        if path.exists():
            files.append(path)
    return files
