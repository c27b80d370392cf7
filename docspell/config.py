"""Configuration management for docspell."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from docspell.version import DEFAULT_CONFIG

LOGGER = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "on")


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


class Config:
    """docspell settings: defaults, then a YAML file, then ``DOCSPELL_*`` variables."""

    CONFIG_FILENAMES = [
        ".docspell.yaml",
        ".docspell.yml",
        "docspell.yaml",
        "docspell.yml",
    ]

    def __init__(self) -> None:
        self._config: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        self._config_path: Path | None = None

    def load(self, config_path: Path | None = None) -> Config:
        """Load ``config_path`` (or a discovered file) and the environment."""
        if config_path:
            self._load_file(config_path)
        else:
            self._auto_discover()

        self._load_env()
        return self

    def _auto_discover(self) -> None:
        """Use the first known config filename in the cwd, then in home."""
        for search_dir in (Path.cwd(), Path.home()):
            for filename in self.CONFIG_FILENAMES:
                config_path = search_dir / filename
                if config_path.exists():
                    self._load_file(config_path)
                    return

    def _load_file(self, path: Path) -> None:
        """Merge a YAML file into the current settings, section by section."""
        if not path.exists():
            LOGGER.warning("Config file %s does not exist", path)
            return

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            LOGGER.warning("Ignoring unreadable config file %s: %s", path, exc)
            return
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring config file %s, expected a mapping", path)
            return
        _merge(self._config, data)
        self._config_path = path

    def _load_env(self) -> None:
        """Apply ``DOCSPELL_*`` overrides."""
        env = os.environ
        if env.get("DOCSPELL_CHECKERS"):
            self._config["checkers"] = [
                name.strip() for name in env["DOCSPELL_CHECKERS"].split(",") if name.strip()
            ]
        if "DOCSPELL_INCLUDE_COMMENTS" in env:
            self._config["include_comments"] = env["DOCSPELL_INCLUDE_COMMENTS"].lower() in _TRUE
        if env.get("DOCSPELL_LANGUAGE"):
            self._config.setdefault("languagetool", {})["language"] = env["DOCSPELL_LANGUAGE"]
        if env.get("DOCSPELL_LOG_LEVEL"):
            self._config["log_level"] = env["DOCSPELL_LOG_LEVEL"]
        for env_var, config_key in (("DOCSPELL_VERBOSE", "verbose"), ("DOCSPELL_QUIET", "quiet")):
            if env_var in env:
                self._config[config_key] = env[env_var].lower() in _TRUE
        if "DOCSPELL_NO_COLOR" in env:
            self._config["color"] = env["DOCSPELL_NO_COLOR"].lower() not in _TRUE

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        self._config[key] = value

    def checker_config(self, name: str) -> dict[str, Any]:
        section = self._config.get(name)
        return dict(section) if isinstance(section, dict) else {}

    @property
    def config_path(self) -> Path | None:
        """Return the path to the loaded config file."""
        return self._config_path

    def to_dict(self) -> dict[str, Any]:
        """A deep copy, safe to mutate."""
        return copy.deepcopy(self._config)
