"""Split plain text into words for checkers that work on word units."""

from __future__ import annotations

from docspell.suggestions import Range

BOUNDARY_PUNCTUATION = "\";:,.?!#(){}[]-\n\r/`"


def is_boundary(char: str) -> bool:
    return char.isspace() or char in BOUNDARY_PUNCTUATION


def tokenize(text: str) -> list[Range]:
    """Return the ranges of all words in ``text``, in order.

    Hyphenated words are split at the hyphen, partial words at the end of a
    line are not joined.
    """
    ranges: list[Range] = []
    start: int | None = None
    for idx, char in enumerate(text):
        if is_boundary(char):
            if start is not None:
                ranges.append(Range(start, idx))
            start = None
        elif start is None:
            start = idx
    if start is not None:
        ranges.append(Range(start, len(text)))
    return ranges
