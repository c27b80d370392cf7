"""
docspell checker backends

Every backend implements the same contract, ``check(documentation, config)``,
and returns a :class:`SuggestionSet` whose spans are already translated back
to source coordinates:

- spelling: dictionary lookup with SymSpell (symspellpy)
- languagetool: grammar and style rules from LanguageTool (language_tool_python)

Backends are selected at runtime by name from the configuration and run one
after the other. A backend that fails is logged and left out, the others
still contribute.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

from docspell.documentation import Documentation
from docspell.errors import MappingCorruptionError
from docspell.suggestions import SuggestionSet

LOGGER = logging.getLogger(__name__)


class Checker(ABC):
    """A spelling or grammar backend."""

    name: str = ""

    @abstractmethod
    def check(self, documentation: Documentation, config: dict[str, Any]) -> SuggestionSet:
        """Check all literal sets of ``documentation``."""

    @classmethod
    def available(cls) -> tuple[bool, str]:
        """Whether the backend's library can be imported, and a short note."""
        return True, "built in"


CHECKERS: dict[str, type[Checker]] = {}

_C = TypeVar("_C", bound=type[Checker])


def register_checker(name: str) -> Callable[[_C], _C]:
    def decorator(cls: _C) -> _C:
        cls.name = name
        CHECKERS[name] = cls
        return cls

    return decorator


def get_checker(name: str) -> type[Checker]:
    try:
        return CHECKERS[name]
    except KeyError:
        raise KeyError(
            f"Unknown checker {name!r}, known: {', '.join(sorted(CHECKERS)) or 'none'}"
        ) from None


def check(documentation: Documentation, config: Any) -> SuggestionSet:
    """Run every enabled backend and merge their results in order.

    ``config`` is a :class:`docspell.config.Config` or a plain dict with a
    ``checkers`` list and one section per backend.
    """
    collective = SuggestionSet()
    for name in config.get("checkers") or []:
        try:
            checker_cls = get_checker(name)
        except KeyError as exc:
            LOGGER.error("%s", exc.args[0])
            continue
        LOGGER.debug("Running %s checks", name)
        section = config.get(name) or {}
        try:
            suggestions = checker_cls().check(documentation, dict(section))
        except MappingCorruptionError:
            raise
        except Exception as exc:
            LOGGER.error("Checker %s failed, skipping its results: %s", name, exc)
            LOGGER.debug("Checker %s failure", name, exc_info=True)
            continue
        LOGGER.info("%s reported %d suggestions", name, suggestions.count())
        collective.join(suggestions)
    return collective


# Importing the modules registers the backends.
from docspell.checkers import languagetool, spelling  # noqa: E402,F401

__all__ = [
    "CHECKERS",
    "Checker",
    "check",
    "get_checker",
    "register_checker",
]
