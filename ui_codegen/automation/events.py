# ui_codegen/automation/events.py
"""Raw events as delivered by the browser instrumentation, in arrival order."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from .exceptions import UnknownEventError

MODIFIER_NAMES = ("alt", "ctrl", "meta", "shift")


def normalize_modifiers(modifiers: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Accept 'Shift', 'shiftKey', 'control' style names and keep the canonical ones."""
    if not modifiers:
        return frozenset()
    result = set()
    for raw in modifiers:
        name = str(raw).strip().lower()
        if name.endswith("key"):
            name = name[:-3]
        if name == "control":
            name = "ctrl"
        if name in MODIFIER_NAMES:
            result.add(name)
    return frozenset(result)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rect":
        return cls(
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
        )


@dataclass(frozen=True)
class MouseDown:
    x: float
    y: float
    locator: str = ""
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class MouseMove:
    x: float
    y: float
    locator: str = ""
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class MouseUp:
    x: float
    y: float
    locator: str = ""
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class DoubleClick:
    x: float
    y: float
    locator: str = ""
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Wheel:
    x: float
    y: float
    delta_x: float = 0
    delta_y: float = 0
    locator: str = ""
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class KeyDown:
    key: str
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class KeyUp:
    key: str
    modifiers: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ScreenshotRequest:
    name: str
    image_bytes: bytes = field(default=b"", repr=False)
    locator: str = ""
    region: Optional[Rect] = None


@dataclass(frozen=True)
class StepStart:
    name: Optional[str] = None


@dataclass(frozen=True)
class StepEnd:
    pass


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Navigation:
    url: str


RawEvent = Union[
    MouseDown,
    MouseMove,
    MouseUp,
    DoubleClick,
    Wheel,
    KeyDown,
    KeyUp,
    ScreenshotRequest,
    StepStart,
    StepEnd,
    Comment,
    Navigation,
]

_POINTER_TYPES = {
    "mousedown": MouseDown,
    "mousemove": MouseMove,
    "mouseup": MouseUp,
    "dblclick": DoubleClick,
}
_KEY_TYPES = {
    "keydown": KeyDown,
    "keyup": KeyUp,
}


def raw_event_from_payload(payload: Mapping[str, Any]) -> RawEvent:
    """Decode the JSON payload shipped by the page listener into a RawEvent."""
    kind = str(payload.get("type") or "").lower()
    modifiers = normalize_modifiers(
        name for name in ("altKey", "ctrlKey", "metaKey", "shiftKey") if payload.get(name)
    )
    locator = str(payload.get("locator") or "")

    if kind in _POINTER_TYPES:
        return _POINTER_TYPES[kind](
            x=payload.get("x", 0),
            y=payload.get("y", 0),
            locator=locator,
            modifiers=modifiers,
        )
    if kind == "wheel":
        return Wheel(
            x=payload.get("x", 0),
            y=payload.get("y", 0),
            delta_x=payload.get("deltaX", 0),
            delta_y=payload.get("deltaY", 0),
            locator=locator,
            modifiers=modifiers,
        )
    if kind in _KEY_TYPES:
        key = payload.get("key")
        if not key:
            raise UnknownEventError(f"Keyboard payload without key: {dict(payload)!r}")
        return _KEY_TYPES[kind](key=str(key), modifiers=modifiers)
    if kind == "navigation":
        return Navigation(url=str(payload.get("url") or ""))
    raise UnknownEventError(f"Unsupported event type {kind!r}")
