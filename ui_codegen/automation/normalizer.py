"""Online reduction of raw events into the action log.

Each raw event is applied once, in arrival order. Merge decisions only look at
the last one or two log entries and are never revisited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from . import events as ev
from .action import (
    ActionLogEntry,
    ClickEntry,
    CommentEntry,
    DoubleClickEntry,
    KeyDownEntry,
    KeyPressEntry,
    KeyUpEntry,
    MouseDownEntry,
    MouseMoveRun,
    MouseUpEntry,
    NavigationEntry,
    ScreenshotEntry,
    StepBoundary,
    WheelEntry,
)
from .keys import key_label

logger = logging.getLogger(__name__)

DEFAULT_STEP_NAME = "step"


@dataclass
class SessionState:
    """Everything the normalizer mutates for one recording."""

    recording: bool = False
    button_down: bool = False
    open_steps: List[str] = field(default_factory=list)
    log: List[ActionLogEntry] = field(default_factory=list)


class Normalizer:
    def __init__(self, state: Optional[SessionState] = None, default_step_name: str = DEFAULT_STEP_NAME) -> None:
        self.state = state if state is not None else SessionState()
        self.default_step_name = default_step_name

    def apply(self, event: ev.RawEvent) -> bool:
        """Apply one raw event. Returns True when the log or step stack changed."""
        state = self.state
        if not state.recording:
            return False

        if isinstance(event, ev.MouseDown):
            state.button_down = True
            self._append(MouseDownEntry(x=event.x, y=event.y))
            logger.info(f"Recorded: mouse_down at ({event.x}, {event.y})")
            return True

        if isinstance(event, ev.MouseMove):
            if not state.button_down:
                return False
            tail = self._tail()
            if isinstance(tail, MouseMoveRun):
                self._replace(1, MouseMoveRun(x=event.x, y=event.y, steps=tail.steps + 1))
            else:
                self._append(MouseMoveRun(x=event.x, y=event.y, steps=0))
            logger.debug(f"Recorded: mouse_move -> ({event.x}, {event.y})")
            return True

        if isinstance(event, ev.MouseUp):
            state.button_down = False
            tail = self._tail()
            if isinstance(tail, MouseDownEntry):
                self._replace(1, ClickEntry(x=tail.x, y=tail.y))
                logger.info(f"Recorded: click at ({tail.x}, {tail.y})")
            else:
                self._append(MouseUpEntry())
                logger.info(f"Recorded: mouse_up at ({event.x}, {event.y})")
            return True

        if isinstance(event, ev.DoubleClick):
            if len(state.log) >= 2 and all(isinstance(e, ClickEntry) for e in state.log[-2:]):
                self._replace(2, DoubleClickEntry(x=event.x, y=event.y))
            else:
                self._append(DoubleClickEntry(x=event.x, y=event.y))
            logger.info(f"Recorded: double_click at ({event.x}, {event.y})")
            return True

        if isinstance(event, ev.Wheel):
            tail = self._tail()
            if isinstance(tail, WheelEntry) and (tail.x, tail.y) == (event.x, event.y):
                self._replace(
                    1,
                    WheelEntry(
                        x=tail.x,
                        y=tail.y,
                        delta_x=tail.delta_x + event.delta_x,
                        delta_y=tail.delta_y + event.delta_y,
                    ),
                )
            else:
                self._append(WheelEntry(x=event.x, y=event.y, delta_x=event.delta_x, delta_y=event.delta_y))
            logger.debug(f"Recorded: wheel at ({event.x}, {event.y}) dx={event.delta_x}, dy={event.delta_y}")
            return True

        if isinstance(event, ev.KeyDown):
            label = key_label(event.key, event.modifiers)
            self._append(KeyDownEntry(label=label))
            logger.info(f"Recorded: key_down '{label}'")
            return True

        if isinstance(event, ev.KeyUp):
            label = key_label(event.key, event.modifiers)
            tail = self._tail()
            if isinstance(tail, KeyDownEntry) and tail.label == label:
                self._replace(1, KeyPressEntry(label=label))
                logger.info(f"Recorded: key_press '{label}'")
            else:
                self._append(KeyUpEntry(label=label))
                logger.info(f"Recorded: key_up '{label}'")
            return True

        if isinstance(event, ev.ScreenshotRequest):
            self._append(ScreenshotEntry(name=event.name, locator=event.locator, region=event.region))
            logger.info(f"Recorded: screenshot '{event.name}'")
            return True

        if isinstance(event, ev.StepStart):
            name = event.name or self.default_step_name
            state.open_steps.append(name)
            self._append(StepBoundary(which="start", name=name))
            logger.info(f"Recorded: step '{name}' (depth={len(state.open_steps)})")
            return True

        if isinstance(event, ev.StepEnd):
            if not state.open_steps:
                logger.warning("Ignored: end of step with no open step")
                return False
            name = state.open_steps.pop()
            self._append(StepBoundary(which="end", name=name))
            logger.info(f"Recorded: end of step '{name}'")
            return True

        if isinstance(event, ev.Comment):
            self._append(CommentEntry(text=event.text))
            logger.info("Recorded: comment")
            return True

        if isinstance(event, ev.Navigation):
            self._append(NavigationEntry(url=event.url))
            logger.info(f"Recorded: navigation -> {event.url}")
            return True

        raise TypeError(f"Unsupported raw event: {event!r}")

    def _tail(self) -> Optional[ActionLogEntry]:
        return self.state.log[-1] if self.state.log else None

    def _append(self, entry: ActionLogEntry) -> None:
        self.state.log.append(entry)

    def _replace(self, count: int, entry: ActionLogEntry) -> None:
        del self.state.log[-count:]
        self.state.log.append(entry)
