"""docspell version and constants."""

__version__ = "0.3.0"
__app_name__ = "docspell"
__description__ = "Spelling and grammar checks for documentation embedded in source files"

# Exit codes
EXIT_SUCCESS = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2
EXIT_CONFIG_ERROR = 3
EXIT_CANCELLED = 130

# Scratch file the corrected content is staged in before the rename
TEMPORARY_FILENAME = ".spellcheck.tmp"

SUPPORTED_EXTENSIONS = [".py", ".md", ".markdown"]

# Default configuration
DEFAULT_CONFIG = {
    "checkers": ["spelling"],
    "extensions": list(SUPPORTED_EXTENSIONS),
    "include_comments": False,
    "base_ref": "main",
    "log_level": None,
    "verbose": False,
    "quiet": False,
    "color": True,
    "spelling": {
        "max_edit_distance": 2,
        "prefix_length": 7,
        "max_suggestions": 5,
        "min_word_length": 2,
        "extra_dictionaries": [],
        "ignore": [],
    },
    "languagetool": {
        "language": "en-US",
        "remote_server": None,
        "disabled_rules": [],
        "max_suggestions": 5,
    },
}
