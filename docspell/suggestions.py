from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True, order=True)
class Range:
    """Half-open interval ``[start, end)``.

    A range carries no coordinate space of its own, callers state whether it
    indexes plain text, a raw literal set or a single source line.
    """

    start: int
    end: int

    def __len__(self) -> int:
        return max(0, self.end - self.start)

    def is_empty(self) -> bool:
        return self.end <= self.start

    def contains(self, other: Range) -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: Range) -> bool:
        return self.start < other.end and other.start < self.end

    def shift(self, offset: int) -> Range:
        return Range(self.start + offset, self.end + offset)

    def as_slice(self) -> slice:
        return slice(self.start, self.end)


@dataclass(frozen=True, order=True)
class Span:
    """A location in the original source: one line and a column range on it."""

    line: int
    start: int
    end: int

    @property
    def columns(self) -> Range:
        return Range(self.start, self.end)

    def covers_line(self, line: int) -> bool:
        return self.line == line

    def __str__(self) -> str:
        return f"{self.line}:{self.start}-{self.end}"


@dataclass
class Suggestion:
    path: Path
    span: Span
    replacements: list[str] = field(default_factory=list)
    detector: str = ""
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path.as_posix(),
            "line": self.span.line,
            "start_col": self.span.start,
            "end_col": self.span.end,
            "replacements": list(self.replacements),
            "detector": self.detector,
        }
        if self.description:
            data["description"] = self.description
        return data

    def __str__(self) -> str:
        head = f"{self.path}:{self.span}"
        if self.detector:
            head += f" [{self.detector}]"
        if self.description:
            head += f" {self.description}"
        return head


@dataclass(frozen=True)
class BandAid:
    """One approved replacement at a source span."""

    span: Span
    replacement: str

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion, index: int) -> BandAid:
        if not 0 <= index < len(suggestion.replacements):
            raise IndexError(
                f"Suggestion at {suggestion.span} has no replacement #{index}"
            )
        return cls(span=suggestion.span, replacement=suggestion.replacements[index])


class SuggestionSet:
    """Suggestions grouped by file, in the order they were collected."""

    def __init__(self) -> None:
        self._per_file: dict[Path, list[Suggestion]] = {}

    def add(self, suggestion: Suggestion) -> None:
        self._per_file.setdefault(suggestion.path, []).append(suggestion)

    def extend(self, path: Path, suggestions: Iterable[Suggestion]) -> None:
        self._per_file.setdefault(path, []).extend(suggestions)

    def join(self, other: SuggestionSet) -> None:
        # additive: no re-sorting, no deduplication
        for path, suggestions in other:
            self.extend(path, suggestions)

    def get(self, path: Path) -> list[Suggestion]:
        return self._per_file.get(path, [])

    def paths(self) -> list[Path]:
        return list(self._per_file)

    def count(self) -> int:
        return sum(len(items) for items in self._per_file.values())

    def __iter__(self) -> Iterator[tuple[Path, list[Suggestion]]]:
        return iter(self._per_file.items())

    def __len__(self) -> int:
        return len(self._per_file)

    def __bool__(self) -> bool:
        return self.count() > 0

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            path.as_posix(): [s.to_dict() for s in suggestions]
            for path, suggestions in self._per_file.items()
        }
