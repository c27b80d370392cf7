"""Spelling backend built on SymSpell.

Each literal set is stripped of markdown, split into words and every word
is looked up in the SymSpell frequency dictionary shipped with symspellpy.
Unknown words become suggestions carrying the closest dictionary terms.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from docspell.checkers import Checker, register_checker
from docspell.documentation import Documentation
from docspell.overlay import PlainOverlay
from docspell.suggestions import Range, Suggestion, SuggestionSet
from docspell.tokens import tokenize

LOGGER = logging.getLogger(__name__)

FREQUENCY_DICT = "frequency_dictionary_en_82_765.txt"
_STRIP_CHARS = "'’*_~<>"
_CUSTOM_FREQUENCY = 1_000_000


@lru_cache(maxsize=4)
def load_symspell(
    max_edit_distance: int = 2,
    prefix_length: int = 7,
    extra_dictionaries: tuple[str, ...] = (),
) -> Any:
    from symspellpy import SymSpell

    sym_spell = SymSpell(
        max_dictionary_edit_distance=max_edit_distance,
        prefix_length=prefix_length,
    )
    dict_path = resources.files("symspellpy").joinpath(FREQUENCY_DICT)
    with resources.as_file(dict_path) as path:
        if not sym_spell.load_dictionary(str(path), term_index=0, count_index=1):
            raise RuntimeError(f"Failed to load SymSpell dictionary {path}")

    for extra in extra_dictionaries:
        for word in read_wordlist(Path(extra)):
            sym_spell.create_dictionary_entry(word, _CUSTOM_FREQUENCY)
    return sym_spell


def read_wordlist(path: Path) -> list[str]:
    """One word per line, ``#`` starts a comment."""
    words: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        word = line.split("#", 1)[0].strip().lower()
        if word:
            words.append(word)
    return words


def _trim(text: str, rng: Range) -> Range:
    start, end = rng.start, rng.end
    while start < end and text[start] in _STRIP_CHARS:
        start += 1
    while end > start and text[end - 1] in _STRIP_CHARS:
        end -= 1
    return Range(start, end)


def should_skip(word: str, min_word_length: int, ignore: set[str]) -> bool:
    if len(word) < min_word_length:
        return True
    if word.lower() in ignore:
        return True
    if not word.isalpha():
        # numbers, identifiers, contractions, paths
        return True
    if word.isupper():
        return True
    if any(char.isupper() for char in word[1:]):
        # CamelCase
        return True
    return False


def _match_case(word: str, term: str) -> str:
    if word[:1].isupper():
        return term[:1].upper() + term[1:]
    return term


@register_checker("spelling")
class SpellingChecker(Checker):
    @classmethod
    def available(cls) -> tuple[bool, str]:
        try:
            import symspellpy  # noqa: F401
        except ImportError as exc:
            return False, f"symspellpy not installed: {exc}"
        return True, "symspellpy"

    def check(self, documentation: Documentation, config: dict[str, Any]) -> SuggestionSet:
        from symspellpy import Verbosity

        max_edit_distance = int(config.get("max_edit_distance", 2))
        max_suggestions = int(config.get("max_suggestions", 5))
        min_word_length = int(config.get("min_word_length", 2))
        ignore = {str(word).lower() for word in config.get("ignore") or []}
        sym_spell = load_symspell(
            max_edit_distance,
            int(config.get("prefix_length", 7)),
            tuple(str(p) for p in config.get("extra_dictionaries") or []),
        )

        suggestions = SuggestionSet()
        for path, literal_sets in documentation:
            for literal_set in literal_sets:
                overlay = PlainOverlay.erase_markdown(literal_set)
                plain = overlay.as_str()
                for token in tokenize(plain):
                    rng = _trim(plain, token)
                    word = plain[rng.as_slice()]
                    if should_skip(word, min_word_length, ignore):
                        continue
                    lookups = sym_spell.lookup(
                        word.lower(),
                        Verbosity.CLOSEST,
                        max_edit_distance=max_edit_distance,
                    )
                    if any(item.distance == 0 for item in lookups):
                        continue
                    candidates = [
                        _match_case(word, item.term) for item in lookups[:max_suggestions]
                    ]
                    spans = overlay.resolve(rng)
                    if not spans:
                        LOGGER.debug("No source location for %r in %s", word, path)
                    for span in spans:
                        suggestions.add(
                            Suggestion(
                                path=path,
                                span=span,
                                replacements=list(candidates),
                                detector=self.name,
                                description=f"Possible spelling mistake: {word}",
                            )
                        )
        return suggestions
