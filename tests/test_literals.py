from __future__ import annotations

from pathlib import Path

from docspell.documentation import Documentation
from docspell.literals import (
    Fragment,
    extract_literals,
    extract_markdown_literals,
    extract_python_literals,
)
from docspell.suggestions import Range, Span

SOURCE = '''"""Module summary.

Second paragraph.
"""


def foo():
    """Do the thing.

    More detail here.
    """
    return 1


class Bar:
    """Single line."""
'''

COMMENTED = """#!/usr/bin/env python
# A comment block
# spanning two lines
x = 1  # trailing

# type: ignore
"""


def test_docstrings_keep_source_columns() -> None:
    literal_sets = extract_python_literals(Path("mod.py"), SOURCE)
    assert [ls.text for ls in literal_sets] == [
        "Module summary.\n\nSecond paragraph.",
        "Do the thing.\n\nMore detail here.",
        "Single line.",
    ]

    foo = literal_sets[1]
    assert foo.fragments[0] == Fragment(8, 7, "Do the thing.")
    assert foo.fragments[-1] == Fragment(10, 4, "More detail here.")
    assert literal_sets[2].fragments == [Fragment(16, 7, "Single line.")]


def test_linear_range_to_spans_points_into_the_source() -> None:
    foo = extract_python_literals(Path("mod.py"), SOURCE)[1]
    source_lines = SOURCE.split("\n")

    (span,) = foo.linear_range_to_spans(Range(15, 19))
    assert span == Span(10, 4, 8)
    assert source_lines[span.line - 1][span.start : span.end] == "More"


def test_linear_range_to_spans_splits_at_line_breaks() -> None:
    foo = extract_python_literals(Path("mod.py"), SOURCE)[1]
    spans = foo.linear_range_to_spans(Range(7, 19))
    assert spans == [Span(8, 14, 20), Span(10, 4, 8)]


def test_strings_next_to_a_docstring_are_code() -> None:
    source = 'def f(x="teh default"): "Real doc."\n'
    (literal_set,) = extract_python_literals(Path("f.py"), source)
    assert literal_set.fragments == [Fragment(1, 25, "Real doc.")]


def test_docstring_after_non_ascii_default() -> None:
    source = 'def g(x="café"): "Doc."\n'
    (literal_set,) = extract_python_literals(Path("g.py"), source)
    assert literal_set.fragments == [Fragment(1, 18, "Doc.")]
    assert source[18:22] == "Doc."


def test_comment_blocks_are_opt_in() -> None:
    assert extract_python_literals(Path("c.py"), COMMENTED) == []

    (block,) = extract_python_literals(Path("c.py"), COMMENTED, include_comments=True)
    assert block.kind == "comment"
    assert block.fragments == [
        Fragment(2, 2, "A comment block"),
        Fragment(3, 2, "spanning two lines"),
    ]


def test_unparsable_python_is_skipped() -> None:
    assert extract_python_literals(Path("broken.py"), "def broken(:\n") == []


def test_markdown_file_is_a_single_literal_set() -> None:
    (literal_set,) = extract_markdown_literals(Path("a.md"), "# Title\n\nBody\n")
    assert literal_set.kind == "markdown"
    assert literal_set.text == "# Title\n\nBody"
    assert literal_set.fragments[2] == Fragment(3, 0, "Body")
    assert extract_markdown_literals(Path("empty.md"), "\n\n") == []


def test_extract_literals_dispatches_on_suffix() -> None:
    assert extract_literals(Path("notes.txt"), "Some text") == []
    assert len(extract_literals(Path("README.MD"), "Some text")) == 1


def test_documentation_from_paths(tmp_path: Path) -> None:
    package = tmp_path / "pkg"
    package.mkdir()
    (package / "mod.py").write_text(SOURCE, encoding="utf-8")
    (package / "empty.py").write_text("x = 1\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# Readme\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored\n", encoding="utf-8")
    hidden = tmp_path / ".hidden"
    hidden.mkdir()
    (hidden / "secret.py").write_text('"""Hidden."""\n', encoding="utf-8")

    docs = Documentation.from_paths([tmp_path])

    assert docs.paths() == [tmp_path / "README.md", package / "mod.py"]
    assert len(docs) == 2
    assert docs.literal_count() == 4
