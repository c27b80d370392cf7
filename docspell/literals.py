"""Documentation literals and their positions in the source file.

A :class:`LiteralSet` is one documentation unit (a docstring, a block of
comments, a whole Markdown file) stitched together from per-line
:class:`Fragment` objects. Its ``text`` is what the Markdown overlay parses;
``linear_range_to_spans`` maps ranges in that text back to source spans.
"""

from __future__ import annotations

import ast
import io
import logging
import re
import tokenize
from dataclasses import dataclass, field
from pathlib import Path

from docspell.suggestions import Range, Span

LOGGER = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}
_PRAGMA_RE = re.compile(r"^#\s*(noqa|type:|pragma|fmt:|isort:|-\*-)")
_STRING_PREFIX_RE = re.compile(r"^[rRuUbB]*")


@dataclass(frozen=True)
class Fragment:
    """The part of one source line that belongs to a documentation unit."""

    line: int
    column: int
    text: str


@dataclass
class LiteralSet:
    path: Path
    fragments: list[Fragment] = field(default_factory=list)
    kind: str = "docstring"

    @property
    def text(self) -> str:
        return "\n".join(fragment.text for fragment in self.fragments)

    @property
    def first_line(self) -> int:
        return self.fragments[0].line if self.fragments else 0

    def linear_range_to_spans(self, linear: Range) -> list[Span]:
        """Map a range over ``text`` to one span per touched source line.

        The newlines joining fragments do not exist in the source at this
        position and are never part of a span.
        """
        spans: list[Span] = []
        offset = 0
        for fragment in self.fragments:
            fragment_range = Range(offset, offset + len(fragment.text))
            start = max(linear.start, fragment_range.start)
            end = min(linear.end, fragment_range.end)
            if start < end:
                spans.append(
                    Span(
                        line=fragment.line,
                        start=fragment.column + start - offset,
                        end=fragment.column + end - offset,
                    )
                )
            offset = fragment_range.end + 1
            if offset > linear.end:
                break
        return spans

    def __str__(self) -> str:
        return self.text


def _leading_whitespace(text: str) -> int:
    return len(text) - len(text.lstrip())


def _char_column(lines: list[str], lineno: int, byte_offset: int) -> int:
    """``ast`` columns count UTF-8 bytes, ``tokenize`` columns count characters."""
    line = lines[lineno - 1] if 0 < lineno <= len(lines) else ""
    return len(line.encode("utf-8")[:byte_offset].decode("utf-8", errors="ignore"))


def _docstring_nodes(tree: ast.AST) -> list[ast.Constant]:
    nodes: list[ast.Constant] = []
    for node in ast.walk(tree):
        if not isinstance(
            node, (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)
        ):
            continue
        if not node.body:
            continue
        first = node.body[0]
        if (
            isinstance(first, ast.Expr)
            and isinstance(first.value, ast.Constant)
            and isinstance(first.value.value, str)
        ):
            nodes.append(first.value)
    return sorted(nodes, key=lambda n: (n.lineno, n.col_offset))


def _string_token_fragments(token: tokenize.TokenInfo) -> list[Fragment]:
    """Fragments of a string token's body, trimmed like ``inspect.cleandoc``."""
    prefix = _STRING_PREFIX_RE.match(token.string).group(0)  # type: ignore[union-attr]
    if "b" in prefix.lower():
        return []
    rest = token.string[len(prefix) :]
    quote = rest[:3] if rest[:3] in ('"""', "'''") else rest[:1]
    body = rest[len(quote) : len(rest) - len(quote)]
    row, col = token.start
    body_col = col + len(prefix) + len(quote)

    lines = body.split("\n")
    indents = [_leading_whitespace(line) for line in lines[1:] if line.strip()]
    common = min(indents) if indents else 0

    fragments: list[Fragment] = []
    for idx, line in enumerate(lines):
        if idx == 0:
            skip = _leading_whitespace(line)
            fragments.append(Fragment(row, body_col + skip, line[skip:]))
        else:
            skip = min(common, len(line))
            fragments.append(Fragment(row + idx, skip, line[skip:]))

    while fragments and not fragments[-1].text.strip():
        fragments.pop()
    while fragments and not fragments[0].text.strip():
        fragments.pop(0)
    return fragments


def _comment_blocks(path: Path, tokens: list[tokenize.TokenInfo]) -> list[LiteralSet]:
    blocks: list[LiteralSet] = []
    current: LiteralSet | None = None
    previous: tuple[int, int] | None = None
    for token in tokens:
        if token.type != tokenize.COMMENT:
            continue
        row, col = token.start
        if token.line[:col].strip():
            # trailing comment after code
            current, previous = None, None
            continue
        if (row == 1 and token.string.startswith("#!")) or _PRAGMA_RE.match(token.string):
            current, previous = None, None
            continue
        text = token.string[1:]
        column = col + 1
        if text.startswith(" "):
            text = text[1:]
            column += 1
        fragment = Fragment(row, column, text)
        if current is not None and previous == (row - 1, col):
            current.fragments.append(fragment)
        else:
            current = LiteralSet(path=path, fragments=[fragment], kind="comment")
            blocks.append(current)
        previous = (row, col)
    return blocks


def extract_python_literals(
    path: Path, source: str, include_comments: bool = False
) -> list[LiteralSet]:
    try:
        tree = ast.parse(source, filename=str(path))
        tokens = list(tokenize.generate_tokens(io.StringIO(source).readline))
    except (SyntaxError, tokenize.TokenError) as exc:
        LOGGER.warning("Failed to parse %s: %s", path, exc)
        return []

    strings_by_line: dict[int, list[tokenize.TokenInfo]] = {}
    for token in tokens:
        if token.type == tokenize.STRING:
            strings_by_line.setdefault(token.start[0], []).append(token)

    lines = source.split("\n")
    literal_sets: list[LiteralSet] = []
    for node in _docstring_nodes(tree):
        end_line = node.end_lineno or node.lineno
        first = (node.lineno, _char_column(lines, node.lineno, node.col_offset))
        last = (end_line, _char_column(lines, end_line, node.end_col_offset or 0))
        for line in range(node.lineno, end_line + 1):
            for token in strings_by_line.get(line, []):
                # other strings sharing a line with the docstring are code
                if token.start < first or token.end > last:
                    continue
                fragments = _string_token_fragments(token)
                if fragments:
                    literal_sets.append(LiteralSet(path=path, fragments=fragments))

    if include_comments:
        literal_sets.extend(_comment_blocks(path, tokens))
        literal_sets.sort(key=lambda literal_set: literal_set.first_line)
    return literal_sets


def extract_markdown_literals(path: Path, source: str) -> list[LiteralSet]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    if not any(line.strip() for line in lines):
        return []
    fragments = [Fragment(idx, 0, line) for idx, line in enumerate(lines, 1)]
    return [LiteralSet(path=path, fragments=fragments, kind="markdown")]


def extract_literals(
    path: Path, source: str, include_comments: bool = False
) -> list[LiteralSet]:
    suffix = path.suffix.lower()
    if suffix == ".py":
        return extract_python_literals(path, source, include_comments=include_comments)
    if suffix in MARKDOWN_SUFFIXES:
        return extract_markdown_literals(path, source)
    LOGGER.debug("No literal extractor for %s", path)
    return []
