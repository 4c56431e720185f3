"""Settings resolution and the persistent JSON preferences file.

Each setting resolves as: command-line flag, then ``git config twig.<key>``,
then the JSON file under the per-user config directory, then the default.
Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from platformdirs import user_config_dir

from .status_model.rendering import DEFAULT_INDENT, clamp_indent
from .ui_theme import DEFAULT_THEME_NAME, available_theme_names

logger = logging.getLogger(__name__)

APP_NAME = "twig"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

GIT_CONFIG_PREFIX = "twig."
KEY_OVERRIDE_PREFIX = "twig.key."
THEME_OVERRIDE_PREFIX = "twig.theme."

_TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "off", "0"})


class ConfigSource(Protocol):
    """The git-config lookups settings resolution needs."""

    def config_value(self, key: str) -> str | None: ...

    def config_regexp(self, pattern: str) -> dict[str, str]: ...


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.debug("could not write config %s: %s", CONFIG_PATH, exc)


def parse_bool(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def parse_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _git_value(source: ConfigSource | None, key: str) -> str | None:
    if source is None:
        return None
    return source.config_value(f"{GIT_CONFIG_PREFIX}{key}")


def resolve_indent(cli_value: int | None, source: ConfigSource | None = None) -> int:
    """Return the indent width clamped to the supported range."""
    for candidate in (cli_value, _git_value(source, "indent"), load_config().get("indent")):
        parsed = parse_int(candidate)
        if parsed is not None:
            return clamp_indent(parsed)
    return DEFAULT_INDENT


def resolve_collapse(cli_flag: bool, source: ConfigSource | None = None) -> bool:
    """Return whether single-child directory chains are collapsed.

    The flag can only switch collapsing on; git config and the JSON file are
    consulted when it is absent.
    """
    if cli_flag:
        return True
    for candidate in (_git_value(source, "collapse"), load_config().get("collapse")):
        parsed = parse_bool(candidate)
        if parsed is not None:
            return parsed
    return False


def load_theme_name() -> str | None:
    """Load persisted theme name, returning ``None`` when unset/invalid."""
    value = load_config().get("theme")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def save_theme_name(theme_name: str) -> None:
    """Persist the selected theme name."""
    stripped = str(theme_name).strip()
    if not stripped:
        return
    config = load_config()
    config["theme"] = stripped
    save_config(config)


def resolve_theme_name(cli_value: str | None, source: ConfigSource | None = None) -> str:
    """Return the first known theme name among flag, git config and JSON file."""
    known = available_theme_names()
    for candidate in (cli_value, _git_value(source, "theme"), load_theme_name()):
        if isinstance(candidate, str) and candidate.strip().lower() in known:
            return candidate.strip().lower()
    return DEFAULT_THEME_NAME


def _prefixed(values: dict[str, str], prefix: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, value in values.items():
        if key.lower().startswith(prefix):
            out[key[len(prefix):].lower()] = value
    return out


def load_glyph_overrides(source: ConfigSource | None = None) -> dict[str, str]:
    """Return ``{glyph_name: char}`` from ``git config twig.theme.<glyph>``."""
    if source is None:
        return {}
    return _prefixed(source.config_regexp(r"^twig\.theme\."), THEME_OVERRIDE_PREFIX)


def load_key_overrides(source: ConfigSource | None = None) -> dict[str, str]:
    """Return ``{action_name: key_name}`` overrides.

    The JSON file's ``"keys"`` object is read first; ``git config
    twig.key.<action>`` entries replace it per action.
    """
    overrides: dict[str, str] = {}
    raw_keys = load_config().get("keys")
    if isinstance(raw_keys, dict):
        for action, key_name in raw_keys.items():
            if isinstance(action, str) and isinstance(key_name, str) and key_name:
                overrides[action.strip().lower()] = key_name
    if source is not None:
        overrides.update(_prefixed(source.config_regexp(r"^twig\.key\."), KEY_OVERRIDE_PREFIX))
    return overrides


@dataclass(frozen=True)
class Settings:
    """Fully resolved display settings for one invocation."""

    indent: int = DEFAULT_INDENT
    collapse: bool = False
    theme_name: str = DEFAULT_THEME_NAME
    glyph_overrides: dict[str, str] = field(default_factory=dict)
    key_overrides: dict[str, str] = field(default_factory=dict)


def resolve_settings(
    source: ConfigSource | None,
    *,
    indent: int | None = None,
    collapse: bool = False,
    theme: str | None = None,
) -> Settings:
    return Settings(
        indent=resolve_indent(indent, source),
        collapse=resolve_collapse(collapse, source),
        theme_name=resolve_theme_name(theme, source),
        glyph_overrides=load_glyph_overrides(source),
        key_overrides=load_key_overrides(source),
    )
