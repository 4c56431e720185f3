"""Tree-view key bindings: action names, defaults, overrides and dispatch.

Keys are the tokens produced by ``read_key``. Two-character printable
bindings such as ``gg`` are key sequences resolved by the loop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

QUIT = "quit"
SEARCH = "search"
DOWN = "down"
UP = "up"
COLLAPSE = "collapse"
COLLAPSE_ALL = "collapse_all"
EXPAND = "expand"
EXPAND_ALL = "expand_all"
NEXT_FILE = "next_file"
PREV_FILE = "prev_file"
STAGE = "stage"
FILTER = "filter"
LAYOUT = "layout"
EASTER_EGG = "easter_egg"
THEME = "theme"
SWITCH_PANE = "switch_pane"
DIFF = "diff"
HELP = "help"
BACK = "back"
TOP = "top"
BOTTOM = "bottom"
CENTER = "center"
PAGE_UP = "page_up"
PAGE_DOWN = "page_down"
YANK = "yank"
VISUAL = "visual"
UNDO = "undo"
REDO = "redo"
COMMIT = "commit"
WORKTREES = "worktrees"

DEFAULT_BINDINGS: dict[str, tuple[str, ...]] = {
    QUIT: ("q",),
    SEARCH: ("/",),
    DOWN: ("j", "DOWN"),
    UP: ("k", "UP"),
    COLLAPSE: ("h", "LEFT"),
    COLLAPSE_ALL: ("H",),
    EXPAND: ("l", "RIGHT"),
    EXPAND_ALL: ("L",),
    NEXT_FILE: ("d",),
    PREV_FILE: ("u",),
    STAGE: ("s", " "),
    FILTER: ("f",),
    LAYOUT: ("v",),
    EASTER_EGG: ("ALT_v", "ALT_V"),
    THEME: ("t",),
    SWITCH_PANE: ("TAB",),
    DIFF: ("ENTER",),
    HELP: ("?",),
    BACK: ("ESC",),
    TOP: ("gg", "HOME"),
    BOTTOM: ("G", "END"),
    CENTER: ("zz",),
    PAGE_UP: ("PAGE_UP", "CTRL_B"),
    PAGE_DOWN: ("PAGE_DOWN", "CTRL_F"),
    YANK: ("y",),
    VISUAL: ("V",),
    UNDO: ("U",),
    REDO: ("CTRL_R",),
    COMMIT: ("c",),
    WORKTREES: ("w",),
}

ACTION_ALIASES: dict[str, str] = {
    "jump_to_top": TOP,
    "jump_to_bottom": BOTTOM,
    "center_view": CENTER,
    "yank_path": YANK,
    "visual_mode": VISUAL,
    "move_down": DOWN,
    "move_up": UP,
}

_NAMED_KEYS: dict[str, str] = {
    "enter": "ENTER",
    "return": "ENTER",
    "tab": "TAB",
    "esc": "ESC",
    "escape": "ESC",
    "backspace": "BACKSPACE",
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "space": " ",
    "home": "HOME",
    "end": "END",
    "pageup": "PAGE_UP",
    "page_up": "PAGE_UP",
    "pagedown": "PAGE_DOWN",
    "page_down": "PAGE_DOWN",
}


def normalize_action(name: str) -> str | None:
    """Map a configured action name to a known action, or ``None``.

    Hyphens are accepted in place of underscores since git config variable
    names cannot contain underscores.
    """
    candidate = name.strip().lower().replace("-", "_")
    candidate = ACTION_ALIASES.get(candidate, candidate)
    return candidate if candidate in DEFAULT_BINDINGS else None


def parse_key_name(text: str) -> str | None:
    """Translate a configured key name into a ``read_key`` token.

    Accepts single characters, two-character sequences (``gg``), named keys
    (``enter``, ``space``, ``pagedown``) and ``ctrl+x`` / ``alt+x`` combos.
    """
    if not text:
        return None
    if len(text) == 1:
        return text
    lowered = text.strip().lower()
    if lowered in _NAMED_KEYS:
        return _NAMED_KEYS[lowered]
    for prefix in ("ctrl+", "ctrl-", "c-"):
        if lowered.startswith(prefix) and len(lowered) == len(prefix) + 1 and lowered[-1].isalpha():
            return f"CTRL_{lowered[-1].upper()}"
    for prefix in ("alt+", "alt-", "m-"):
        if lowered.startswith(prefix) and len(text.strip()) == len(prefix) + 1:
            return f"ALT_{text.strip()[-1]}"
    stripped = text.strip()
    if len(stripped) == 2 and stripped.isprintable() and " " not in stripped:
        return stripped
    return None


def is_sequence(token: str) -> bool:
    """Return whether ``token`` is a two-key printable sequence."""
    return len(token) == 2 and token.isprintable() and not token.isupper()


def build_keymap(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return ``{key_token: action}`` from defaults plus configured overrides.

    An override adds a key for an action; it replaces whatever that key was
    bound to before. Unknown actions or key names are ignored.
    """
    keymap: dict[str, str] = {}
    for action, keys in DEFAULT_BINDINGS.items():
        for key in keys:
            keymap[key] = action
    for action_name, key_name in (overrides or {}).items():
        action = normalize_action(action_name)
        token = parse_key_name(key_name)
        if action is None or token is None:
            logger.debug("ignoring key override %s=%s", action_name, key_name)
            continue
        keymap[token] = action
    return keymap


def keys_for_action(keymap: Mapping[str, str], action: str) -> tuple[str, ...]:
    return tuple(key for key, bound in keymap.items() if bound == action)


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    """Small key-dispatch table with optional key normalization strategy."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else self._identity
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    @staticmethod
    def _identity(key: str) -> str:
        return key

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def has_prefix(self, key: str) -> bool:
        """Return whether ``key`` starts a registered two-key sequence."""
        normalized = self._normalize(key)
        return any(is_sequence(combo) and combo[0] == normalized for combo in self._handlers)

    def dispatch(self, key: str) -> bool | None:
        """Invoke bound handler for ``key`` and return its handled result."""
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        return handler()


def build_registry(keymap: Mapping[str, str], handlers: Mapping[str, Callable[[], bool | None]]) -> KeyComboRegistry:
    """Bind every key of ``keymap`` whose action has a handler."""
    registry = KeyComboRegistry()
    for action, handler in handlers.items():
        combos = keys_for_action(keymap, action)
        if combos:
            registry.register_binding(KeyComboBinding(combos=combos, handler=handler))
    return registry
