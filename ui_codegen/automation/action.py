# ui_codegen/automation/action.py
"""Normalized action-log entries; the log keeps them in chronological order."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, Union

from .events import Rect


@dataclass(frozen=True)
class MouseDownEntry:
    kind: ClassVar[str] = "mouse_down"
    x: float
    y: float


@dataclass(frozen=True)
class MouseMoveRun:
    kind: ClassVar[str] = "mouse_move"
    x: float
    y: float
    steps: int = 0


@dataclass(frozen=True)
class MouseUpEntry:
    kind: ClassVar[str] = "mouse_up"


@dataclass(frozen=True)
class ClickEntry:
    kind: ClassVar[str] = "click"
    x: float
    y: float


@dataclass(frozen=True)
class DoubleClickEntry:
    kind: ClassVar[str] = "double_click"
    x: float
    y: float


@dataclass(frozen=True)
class WheelEntry:
    kind: ClassVar[str] = "wheel"
    x: float
    y: float
    delta_x: float = 0
    delta_y: float = 0


@dataclass(frozen=True)
class KeyDownEntry:
    kind: ClassVar[str] = "key_down"
    label: str


@dataclass(frozen=True)
class KeyUpEntry:
    kind: ClassVar[str] = "key_up"
    label: str


@dataclass(frozen=True)
class KeyPressEntry:
    kind: ClassVar[str] = "key_press"
    label: str


@dataclass(frozen=True)
class ScreenshotEntry:
    kind: ClassVar[str] = "screenshot"
    name: str
    locator: str = ""
    region: Optional[Rect] = None


@dataclass(frozen=True)
class StepBoundary:
    kind: ClassVar[str] = "step"
    which: str  # "start" | "end"
    name: Optional[str] = None

    @property
    def is_start(self) -> bool:
        return self.which == "start"


@dataclass(frozen=True)
class CommentEntry:
    kind: ClassVar[str] = "comment"
    text: str


@dataclass(frozen=True)
class NavigationEntry:
    kind: ClassVar[str] = "navigation"
    url: str


ActionLogEntry = Union[
    MouseDownEntry,
    MouseMoveRun,
    MouseUpEntry,
    ClickEntry,
    DoubleClickEntry,
    WheelEntry,
    KeyDownEntry,
    KeyUpEntry,
    KeyPressEntry,
    ScreenshotEntry,
    StepBoundary,
    CommentEntry,
    NavigationEntry,
]

ENTRY_TYPES: Dict[str, Type[Any]] = {
    cls.kind: cls
    for cls in (
        MouseDownEntry,
        MouseMoveRun,
        MouseUpEntry,
        ClickEntry,
        DoubleClickEntry,
        WheelEntry,
        KeyDownEntry,
        KeyUpEntry,
        KeyPressEntry,
        ScreenshotEntry,
        StepBoundary,
        CommentEntry,
        NavigationEntry,
    )
}


def entry_to_dict(entry: ActionLogEntry) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"kind": entry.kind}
    payload.update(asdict(entry))
    return payload


def entry_from_dict(data: Mapping[str, Any]) -> ActionLogEntry:
    kind = data.get("kind")
    cls = ENTRY_TYPES.get(str(kind))
    if cls is None:
        raise ValueError(f"Unknown action-log entry kind {kind!r}")
    kwargs = {f.name: data[f.name] for f in fields(cls) if f.name in data}
    region = kwargs.get("region")
    if isinstance(region, Mapping):
        kwargs["region"] = Rect.from_dict(region)
    return cls(**kwargs)
