from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from docspell.literals import LiteralSet, extract_literals
from docspell.version import SUPPORTED_EXTENSIONS

LOGGER = logging.getLogger(__name__)


def _expand(paths: Iterable[Path], extensions: set[str]) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                relative = candidate.relative_to(path)
                if any(part.startswith(".") for part in relative.parts):
                    continue
                if candidate.is_file() and candidate.suffix.lower() in extensions:
                    files.append(candidate)
        elif path.suffix.lower() in extensions:
            files.append(path)
        else:
            LOGGER.debug("Skipping %s, unsupported extension", path)
    return files


class Documentation:
    """All documentation units of a set of files, keyed by path."""

    def __init__(self) -> None:
        self._per_file: dict[Path, list[LiteralSet]] = {}

    def add(self, path: Path, literal_sets: list[LiteralSet]) -> None:
        if literal_sets:
            self._per_file.setdefault(path, []).extend(literal_sets)

    def add_source(self, path: Path, source: str, include_comments: bool = False) -> None:
        self.add(path, extract_literals(path, source, include_comments=include_comments))

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[Path | str],
        extensions: Iterable[str] | None = None,
        include_comments: bool = False,
    ) -> Documentation:
        suffixes = {ext.lower() for ext in (extensions or SUPPORTED_EXTENSIONS)}
        docs = cls()
        seen: set[Path] = set()
        for path in _expand((Path(p) for p in paths), suffixes):
            if path in seen:
                continue
            seen.add(path)
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                LOGGER.warning("Failed to read %s: %s", path, exc)
                continue
            docs.add_source(path, source, include_comments=include_comments)
        return docs

    def paths(self) -> list[Path]:
        return list(self._per_file)

    def literal_count(self) -> int:
        return sum(len(items) for items in self._per_file.values())

    def __iter__(self) -> Iterator[tuple[Path, list[LiteralSet]]]:
        return iter(self._per_file.items())

    def __len__(self) -> int:
        return len(self._per_file)
