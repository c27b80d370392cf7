"""Exceptions raised by docspell."""

from __future__ import annotations

from pathlib import Path


class DocspellError(Exception):
    """Base exception for docspell errors."""


class CorrectionError(DocspellError):
    """Rewriting a single file failed."""

    def __init__(self, path: Path | str, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {self.path}")


class BandAidOrderError(CorrectionError):
    """Approved edits for a file are unsorted or overlap."""


class MappingCorruptionError(DocspellError):
    """A plain-to-raw mapping entry does not describe a verbatim copy.

    This is an internal bug. It is never handled, reporting the issue at a
    different location would be worse than stopping.
    """


class SuggestionsFound(DocspellError):
    """Check mode found issues."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Found {count} potential spelling mistakes")
