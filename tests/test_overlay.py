from __future__ import annotations

from pathlib import Path

import pytest

from docspell.errors import MappingCorruptionError
from docspell.literals import extract_markdown_literals, extract_python_literals
from docspell.overlay import (
    PlainOverlay,
    extract_plain_with_mapping,
    plain_to_raw,
    select_entries,
)
from docspell.suggestions import Range, Span

MARKDOWN = (
    "# Title number 1\n"
    "\n"
    "## Title number 2\n"
    "\n"
    "```rust\n"
    "let x = 777;\n"
    "let y = 111;\n"
    "let z = x/y;\n"
    "assert_eq!(z,7);\n"
    "```\n"
    "\n"
    "### Title number 3\n"
    "\n"
    "Some **extra** _formatting_ if __anticipated__ or _*not*_ or\n"
    "maybe not at all.\n"
    "\n"
    "\n"
    "Extra ~pagaph~ _paragraph_.\n"
    "\n"
    "---\n"
    "\n"
    "And a line, or a **rule**.\n"
    "\n"
)

PLAIN = (
    "Title number 1\n"
    "\n"
    "Title number 2\n"
    "\n"
    "Title number 3\n"
    "\n"
    "Some extra formatting if anticipated or not or\n"
    "maybe not at all.\n"
    "\n"
    "Extra ~pagaph~ paragraph.\n"
    "\n"
    "\n"
    "And a line, or a rule."
)


def _assert_verbatim(plain: str, raw: str, mapping: list[tuple[Range, Range]]) -> None:
    for plain_range, raw_range in mapping:
        assert plain[plain_range.as_slice()] == raw[raw_range.as_slice()]


def _overlay(markdown: str) -> PlainOverlay:
    (literal_set,) = extract_markdown_literals(Path("doc.md"), markdown)
    return PlainOverlay.erase_markdown(literal_set)


def test_headings_code_emphasis_and_rule() -> None:
    plain, mapping = extract_plain_with_mapping(MARKDOWN)
    assert plain == PLAIN
    assert len(mapping) == 19
    _assert_verbatim(plain, MARKDOWN, mapping)


def test_leading_space() -> None:
    markdown = "  Some __underlined__ **bold** text."
    plain, mapping = extract_plain_with_mapping(markdown)
    assert plain == "Some underlined bold text."
    assert len(mapping) == 5
    _assert_verbatim(plain, markdown, mapping)


def test_mapping_is_ordered_and_disjoint() -> None:
    _, mapping = extract_plain_with_mapping(MARKDOWN)
    for (prev_plain, prev_raw), (plain, raw) in zip(mapping, mapping[1:]):
        assert prev_plain.end <= plain.start
        assert prev_raw.end <= raw.start


def test_code_is_not_prose() -> None:
    plain, mapping = extract_plain_with_mapping(
        "Text\n\n```\ncode here\n```\n\nUse `foo` now\n\n    indented code\n"
    )
    assert plain == "Text\n\nUse  now"
    assert "code" not in plain
    assert len(mapping) == 3


def test_link_text_and_title_are_kept() -> None:
    markdown = 'See [the docs](https://example.com "Read me") please.'
    plain, mapping = extract_plain_with_mapping(markdown)
    assert plain == "See the docsRead me please."
    _assert_verbatim(plain, markdown, mapping)


def test_link_title_repeated_in_url_maps_to_the_title() -> None:
    markdown = '[guide](https://example.com/guide "guide")'
    plain, mapping = extract_plain_with_mapping(markdown)
    assert plain == "guideguide"
    assert mapping == [(Range(0, 5), Range(1, 6)), (Range(5, 10), Range(35, 40))]


def test_image_title_repeated_in_src_maps_to_the_title() -> None:
    markdown = "![guide](img/guide.png 'guide')"
    plain, mapping = extract_plain_with_mapping(markdown)
    assert plain == "guideguide"
    assert mapping == [(Range(0, 5), Range(2, 7)), (Range(5, 10), Range(24, 29))]


def test_list_items_are_separated() -> None:
    plain, mapping = extract_plain_with_mapping("- first item\n- second item\n")
    assert plain == "first item\nsecond item"
    _assert_verbatim(plain, "- first item\n- second item\n", mapping)


def test_select_entries_requires_containment() -> None:
    mapping = [
        (Range(0, 2), Range(1, 3)),
        (Range(3, 4), Range(7, 8)),
        (Range(5, 12), Range(11, 18)),
    ]

    ((plain, raw),) = select_entries(mapping, Range(6, 8))
    assert plain_to_raw(plain, raw, Range(6, 8)) == Range(12, 14)

    # overlaps two entries without being contained in either
    assert select_entries(mapping, Range(1, 4)) == []


def test_plain_to_raw_clamps_to_entry() -> None:
    assert plain_to_raw(Range(5, 12), Range(11, 18), Range(10, 14)) == Range(16, 18)


def test_plain_to_raw_rejects_inconsistent_offsets() -> None:
    with pytest.raises(MappingCorruptionError):
        plain_to_raw(Range(0, 4), Range(0, 5), Range(1, 2))


def test_resolve_markdown_word() -> None:
    overlay = _overlay("Some **bold** text\n")
    assert overlay.as_str() == "Some bold text"
    assert overlay.resolve(Range(5, 9)) == [Span(1, 7, 11)]


def test_resolve_across_emphasis_finds_nothing() -> None:
    overlay = _overlay("Some **bold** text\n")
    assert overlay.resolve(Range(0, 9)) == []


def test_resolve_empty_range_is_dropped() -> None:
    overlay = _overlay("Some **bold** text\n")
    assert overlay.resolve(Range(3, 3)) == []


def test_resolve_corrupted_mapping_raises() -> None:
    (literal_set,) = extract_markdown_literals(Path("doc.md"), "Some text\n")
    overlay = PlainOverlay(literal_set, "Some text", [(Range(0, 4), Range(0, 5))])
    with pytest.raises(MappingCorruptionError):
        overlay.resolve(Range(1, 2))


def test_resolve_docstring_to_source_columns() -> None:
    source = 'def f():\n    """Check *teh* value."""\n'
    (literal_set,) = extract_python_literals(Path("f.py"), source)
    overlay = PlainOverlay.erase_markdown(literal_set)

    assert overlay.as_str() == "Check teh value."
    (span,) = overlay.resolve(Range(6, 9))
    assert span == Span(2, 14, 17)
    assert source.split("\n")[1][span.start : span.end] == "teh"


def test_resolve_second_paragraph_line() -> None:
    overlay = _overlay("First line.\n\nSecond *line* here.\n")
    plain = overlay.as_str()
    start = plain.index("line", 12)
    (span,) = overlay.resolve(Range(start, start + 4))
    assert span == Span(3, 8, 12)
