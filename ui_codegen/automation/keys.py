"""Canonical key labels used for merge comparisons and rendered keyboard calls."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .events import MODIFIER_NAMES, normalize_modifiers

# key values the DOM reports for the modifier keys themselves
_MODIFIER_KEYS: Dict[str, Tuple[str, ...]] = {
    "alt": ("Alt", "AltGraph"),
    "ctrl": ("Ctrl", "Control"),
    "meta": ("Meta", "OS"),
    "shift": ("Shift",),
}

# label spelling -> Playwright key name
PLAYWRIGHT_MODIFIERS: Dict[str, str] = {
    "Alt": "Alt",
    "Ctrl": "Control",
    "Meta": "Meta",
    "Shift": "Shift",
}


def key_label(key: str, modifiers: Optional[Iterable[str]] = None) -> str:
    """
    Return 'Alt+Ctrl+Meta+Shift+<key>' for the modifiers present, in that order.

    A modifier is skipped when the key is that modifier itself, so a bare
    Control press yields 'Control' rather than 'Ctrl+Control'.
    """
    active = normalize_modifiers(modifiers)
    parts: List[str] = []
    for mod in MODIFIER_NAMES:
        if mod not in active or key in _MODIFIER_KEYS[mod]:
            continue
        parts.append(mod.capitalize())
    parts.append(key)
    return "+".join(parts)


def playwright_key(label: str) -> str:
    """Spell a key label the way ``page.keyboard`` expects ('Ctrl+a' -> 'Control+a')."""
    parts: List[str] = []
    rest = label
    while True:
        head, sep, tail = rest.partition("+")
        if not (sep and tail and head in PLAYWRIGHT_MODIFIERS):
            break
        parts.append(PLAYWRIGHT_MODIFIERS[head])
        rest = tail
    parts.append(rest)
    return "+".join(parts)
