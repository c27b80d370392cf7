from __future__ import annotations

"""
Apply approved band aids to source files.

Band aids address the original file: a 1-based line and a column range on
that line. Columns are never re-based while a line is rewritten, so the band
aids of one file must be sorted by (line, start) and must not overlap;
``validate_bandaids`` checks exactly that before anything is written.
"""

import io
import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

from docspell.errors import BandAidOrderError, CorrectionError
from docspell.suggestions import BandAid
from docspell.version import TEMPORARY_FILENAME

LOGGER = logging.getLogger(__name__)


def correct_lines(
    bandaids: Iterable[BandAid],
    source: Iterable[tuple[int, str]],
    sink: TextIO,
) -> list[BandAid]:
    """Write ``source`` lines to ``sink`` with all ``bandaids`` applied.

    ``source`` yields ``(line_number, content)`` without trailing newlines,
    every written line is terminated with ``\\n``. Returns the band aids that
    matched no line.
    """
    dropped: list[BandAid] = []
    pending = iter(bandaids)
    nxt = next(pending, None)
    for line_number, content in source:
        LOGGER.debug("Processing line %d", line_number)
        while nxt is not None and nxt.span.line < line_number:
            LOGGER.warning("Dropping band aid for already written line: %s", nxt)
            dropped.append(nxt)
            nxt = next(pending, None)

        if nxt is None or not nxt.span.covers_line(line_number):
            sink.write(content)
            sink.write("\n")
            continue

        remainder_column = 0
        while nxt is not None and nxt.span.covers_line(line_number):
            LOGGER.debug("Applying %s to line %d >%s<", nxt, line_number, content)
            start = nxt.span.start
            # prelude between line start or previous replacement
            if start > remainder_column:
                sink.write(content[remainder_column:start])
            sink.write(nxt.replacement)
            remainder_column = max(remainder_column, nxt.span.end)
            nxt = next(pending, None)

        if remainder_column < len(content):
            sink.write(content[remainder_column:])
        sink.write("\n")

    while nxt is not None:
        LOGGER.warning("Dropping band aid past the end of the file: %s", nxt)
        dropped.append(nxt)
        nxt = next(pending, None)
    return dropped


def validate_bandaids(path: Path | str, bandaids: list[BandAid]) -> None:
    """Raise ``BandAidOrderError`` unless the band aids can be applied in one pass."""
    previous: BandAid | None = None
    for bandaid in bandaids:
        span = bandaid.span
        if span.line < 1 or span.start < 0 or span.end < span.start:
            raise BandAidOrderError(path, f"Invalid span {span} for replacement {bandaid.replacement!r}")
        if previous is not None:
            prev = previous.span
            if (span.line, span.start) < (prev.line, prev.start):
                raise BandAidOrderError(path, f"Band aid at {span} comes after {prev}")
            if span.line == prev.line and span.start < prev.end:
                raise BandAidOrderError(path, f"Band aid at {span} overlaps {prev}")
        previous = bandaid


def iter_lines(handle: TextIO) -> Iterator[tuple[int, str]]:
    for line_number, line in enumerate(handle, 1):
        yield line_number, line[:-1] if line.endswith("\n") else line


def read_lines(path: Path) -> list[tuple[int, str]]:
    with path.open("r", encoding="utf-8") as handle:
        return list(iter_lines(handle))


def _unmatched(dropped: list[BandAid]) -> str:
    spans = ", ".join(str(bandaid.span) for bandaid in dropped)
    return f"{len(dropped)} correction(s) at {spans} match no line of"


def render_corrected(path: Path | str, bandaids: Iterable[BandAid]) -> str:
    path = Path(path)
    try:
        lines = read_lines(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise CorrectionError(path, "Failed to read") from exc
    sink = io.StringIO()
    dropped = correct_lines(bandaids, lines, sink)
    if dropped:
        raise CorrectionError(path, _unmatched(dropped))
    return sink.getvalue()


def correct_file(
    path: Path | str,
    bandaids: Iterable[BandAid],
    tmp_dir: Path | None = None,
) -> Path:
    """Rewrite ``path`` with ``bandaids`` applied.

    The corrected content is staged in ``<cwd>/.spellcheck.tmp`` and renamed
    over the canonical path, the original is either fully replaced or left
    untouched. Returns the canonical path.
    """
    original = Path(path)
    try:
        canonical = original.resolve(strict=True)
    except OSError as exc:
        raise CorrectionError(original, "Failed to canonicalize") from exc

    LOGGER.debug("Attempting to open %s as read", canonical)
    tmp = (tmp_dir or Path.cwd()) / TEMPORARY_FILENAME
    try:
        with canonical.open("r", encoding="utf-8") as reader:
            with tmp.open("w", encoding="utf-8", newline="") as writer:
                dropped = correct_lines(bandaids, iter_lines(reader), writer)
                writer.flush()
                os.fsync(writer.fileno())
    except UnicodeDecodeError as exc:
        tmp.unlink(missing_ok=True)
        raise CorrectionError(original, "Failed to decode") from exc
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise CorrectionError(original, "Failed to write corrections for") from exc

    if dropped:
        tmp.unlink(missing_ok=True)
        raise CorrectionError(original, _unmatched(dropped))

    try:
        os.replace(tmp, canonical)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise CorrectionError(original, f"Failed to move {tmp} over") from exc
    LOGGER.info("Wrote corrections to %s", canonical)
    return canonical
