"""Grammar backend wrapping LanguageTool via language_tool_python.

Requires a Java runtime for the local server, or ``remote_server`` pointing
at a running LanguageTool instance.
"""

from __future__ import annotations

import logging
from typing import Any

from docspell.checkers import Checker, register_checker
from docspell.documentation import Documentation
from docspell.overlay import PlainOverlay
from docspell.suggestions import Range, Suggestion, SuggestionSet

LOGGER = logging.getLogger(__name__)


def _open_tool(config: dict[str, Any]) -> Any:
    import language_tool_python

    language = config.get("language") or "en-US"
    remote = config.get("remote_server")
    if remote:
        tool = language_tool_python.LanguageTool(language, remote_server=remote)
    else:
        tool = language_tool_python.LanguageTool(language)
    for rule in config.get("disabled_rules") or []:
        tool.disabled_rules.add(str(rule))
    return tool


@register_checker("languagetool")
class LanguageToolChecker(Checker):
    @classmethod
    def available(cls) -> tuple[bool, str]:
        try:
            import language_tool_python  # noqa: F401
        except ImportError as exc:
            return False, f"language_tool_python not installed: {exc}"
        return True, "language_tool_python (needs Java or a remote server)"

    def check(self, documentation: Documentation, config: dict[str, Any]) -> SuggestionSet:
        max_suggestions = int(config.get("max_suggestions", 5))
        suggestions = SuggestionSet()
        tool = _open_tool(config)
        try:
            for path, literal_sets in documentation:
                for literal_set in literal_sets:
                    overlay = PlainOverlay.erase_markdown(literal_set)
                    plain = overlay.as_str()
                    if not plain.strip():
                        continue
                    for match in tool.check(plain):
                        rng = Range(match.offset, match.offset + match.errorLength)
                        spans = overlay.resolve(rng)
                        if not spans:
                            LOGGER.debug(
                                "No source location for %s at %s in %s", match.ruleId, rng, path
                            )
                        replacements = list(match.replacements or [])[:max_suggestions]
                        for span in spans:
                            suggestions.add(
                                Suggestion(
                                    path=path,
                                    span=span,
                                    replacements=list(replacements),
                                    detector=self.name,
                                    description=f"{match.ruleId}: {match.message}",
                                )
                            )
        finally:
            tool.close()
        return suggestions
