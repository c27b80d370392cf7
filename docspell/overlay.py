"""Erase markdown syntax.

The resulting overlay is plain prose that can be fed into a grammar or spell
checker, together with a mapping that leads every copied character back to
its position in the markdown source.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from docspell.errors import MappingCorruptionError
from docspell.literals import LiteralSet
from docspell.suggestions import Range, Span

LOGGER = logging.getLogger(__name__)

# closing tags that separate blocks of prose, and how many newlines they add
_BLOCK_BREAKS = {
    "heading_close": 2,
    "paragraph_close": 2,
    "list_item_close": 1,
    "th_close": 1,
    "td_close": 1,
    "hr": 1,
}


@lru_cache(maxsize=1)
def markdown_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    # keep escapes and entities apart from the text around them, they are
    # not verbatim copies of the source
    md.disable("text_join")
    md.use(footnote_plugin).use(tasklists_plugin)
    return md


class _Extractor:
    def __init__(self, markdown: str):
        self.markdown = markdown
        self.parts: list[str] = []
        self.length = 0
        self.mapping: list[tuple[Range, Range]] = []
        self.cursor = 0
        self.limit = len(markdown)
        self.line_starts = [0]
        self.line_starts.extend(
            idx + 1 for idx, char in enumerate(markdown) if char == "\n"
        )

    def _line_offset(self, line: int) -> int:
        if line >= len(self.line_starts):
            return len(self.markdown)
        return self.line_starts[line]

    def track(self, content: str) -> None:
        if not content:
            return
        idx = self.markdown.find(content, self.cursor, self.limit)
        if idx < 0:
            LOGGER.debug("Could not locate %r in the markdown source, skipping", content)
            return
        plain = Range(self.length, self.length + len(content))
        raw = Range(idx, idx + len(content))
        self.mapping.append((plain, raw))
        self.parts.append(content)
        self.length += len(content)
        self.cursor = raw.end

    def newlines(self, n: int) -> None:
        self.parts.append("\n" * n)
        self.length += n

    def skip_past(self, marker: str) -> None:
        idx = self.markdown.find(marker, self.cursor, self.limit)
        if idx >= 0:
            self.cursor = idx + len(marker)

    def track_title(self, title: str, destination: str) -> None:
        """Track a link or image title, which follows its destination."""
        if not title:
            return
        if destination:
            self.skip_past(destination)
        candidates = [
            self.markdown.find(f"{opening}{title}{closing}", self.cursor, self.limit)
            for opening, closing in ('""', "''", "()")
        ]
        found = [idx for idx in candidates if idx >= 0]
        if not found:
            LOGGER.debug("Could not locate title %r in the markdown source, skipping", title)
            return
        self.cursor = min(found) + 1
        self.track(title)

    def skip_code(self, token: Token) -> None:
        fence = token.markup or "`"
        start = self.markdown.find(fence, self.cursor, self.limit)
        if start < 0:
            return
        end = self.markdown.find(fence, start + len(fence), self.limit)
        if end >= 0:
            self.cursor = end + len(fence)

    def inline(self, token: Token) -> None:
        if token.map:
            self.cursor = self._line_offset(token.map[0])
            self.limit = self._line_offset(token.map[1])
        else:
            self.limit = len(self.markdown)
        self.children(token.children or [])

    def children(self, children: list[Token]) -> None:
        titles: list[tuple[str, str]] = []
        for child in children:
            kind = child.type
            LOGGER.debug("Parsing inline token %s %r", kind, child.content)
            if kind == "text":
                self.track(child.content)
            elif kind == "softbreak":
                self.newlines(1)
            elif kind == "hardbreak":
                self.newlines(2)
            elif kind == "code_inline":
                self.skip_code(child)
            elif kind == "html_inline":
                self.skip_past(child.content)
            elif kind == "link_open":
                titles.append(
                    (str(child.attrs.get("title") or ""), str(child.attrs.get("href") or ""))
                )
            elif kind == "link_close":
                if titles:
                    self.track_title(*titles.pop())
            elif kind == "image":
                self.children(child.children or [])
                self.track_title(
                    str(child.attrs.get("title") or ""), str(child.attrs.get("src") or "")
                )
            # emphasis, strikethrough, escapes, entities and footnote
            # references carry no prose of their own

    def run(self) -> tuple[str, list[tuple[Range, Range]]]:
        tokens = markdown_parser().parse(self.markdown)
        for token in tokens:
            kind = token.type
            if kind == "inline":
                self.inline(token)
            elif kind in _BLOCK_BREAKS:
                if token.hidden:
                    # paragraphs of tight lists, the item close separates them
                    continue
                self.newlines(_BLOCK_BREAKS[kind])
            # fenced and indented code, html blocks: not prose

        plain = "".join(self.parts)
        trimmed = plain.rstrip("\n")
        if self.mapping and len(trimmed) < self.mapping[-1][0].end:
            last_plain, last_raw = self.mapping.pop()
            end = max(last_plain.start, len(trimmed))
            removed = last_plain.end - end
            self.mapping.append(
                (Range(last_plain.start, end), Range(last_raw.start, last_raw.end - removed))
            )
        return trimmed, self.mapping


def extract_plain_with_mapping(markdown: str) -> tuple[str, list[tuple[Range, Range]]]:
    """Project ``markdown`` to plain text; ranges are mapped ``plain -> raw``."""
    return _Extractor(markdown).run()


def select_entries(
    mapping: list[tuple[Range, Range]], plain_range: Range
) -> list[tuple[Range, Range]]:
    """Entries whose plain range fully contains ``plain_range``.

    Overlapping-but-not-containing entries are not selected, an issue is never
    attributed to source text outside of what was flagged.
    """
    return [(plain, raw) for plain, raw in mapping if plain.contains(plain_range)]


def plain_to_raw(plain: Range, raw: Range, query: Range) -> Range:
    offset = raw.start - plain.start
    if raw.end - plain.end != offset:
        raise MappingCorruptionError(
            f"Mapping {plain} -> {raw} is not a verbatim copy "
            f"(offset {offset} != {raw.end - plain.end})"
        )
    return Range(query.start + offset, min(raw.end, query.end + offset))


class PlainOverlay:
    """A plain representation of a markdown riddled literal set."""

    def __init__(self, raw: LiteralSet, plain: str, mapping: list[tuple[Range, Range]]):
        self.raw = raw
        self.plain = plain
        self.mapping = mapping

    @classmethod
    def erase_markdown(cls, literal_set: LiteralSet) -> PlainOverlay:
        plain, mapping = extract_plain_with_mapping(literal_set.text)
        return cls(literal_set, plain, mapping)

    def resolve(self, plain_range: Range) -> list[Span]:
        """Translate a range of the plain text into source spans."""
        spans: list[Span] = []
        for plain, raw in select_entries(self.mapping, plain_range):
            extracted = plain_to_raw(plain, raw, plain_range)
            LOGGER.debug("highlight: %s -> %s (via %s -> %s)", plain_range, extracted, plain, raw)
            if extracted.is_empty():
                LOGGER.warning("linear range to spans: %s empty!", extracted)
                continue
            resolved = self.raw.linear_range_to_spans(extracted)
            LOGGER.debug("linear range to spans: %s -> %s", extracted, resolved)
            spans.extend(resolved)
        return spans

    def as_str(self) -> str:
        return self.plain

    def __str__(self) -> str:
        return self.plain

    def __repr__(self) -> str:
        return f"PlainOverlay(path={self.raw.path!s}, entries={len(self.mapping)}, plain={self.plain!r})"
