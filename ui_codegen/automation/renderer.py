"""Render an action log as a pytest + Playwright (sync API) test module."""

from __future__ import annotations

import json
from typing import Iterable, List, Optional, Sequence

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
from .events import Rect
from .keys import playwright_key

INDENT = "    "
TEST_FUNCTION_NAME = "test_recorded_session"

SCRIPT_HEADER = (
    "import allure",
    "from playwright.sync_api import Page",
    "",
    "from ui_codegen.snapshots import assert_snapshot",
    "",
    "",
    f"def {TEST_FUNCTION_NAME}(page: Page) -> None:",
)


def _num(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


def _str(value: Optional[str]) -> str:
    return json.dumps(value or "")


def _clip(region: Rect) -> str:
    items = ", ".join(f"{json.dumps(k)}: {_num(v)}" for k, v in region.to_dict().items())
    return "{" + items + "}"


def _screenshot_expr(entry: ScreenshotEntry) -> str:
    if entry.region is not None:
        return f"page.screenshot(clip={_clip(entry.region)})"
    if entry.locator:
        return f"page.locator({_str(entry.locator)}).screenshot()"
    return "page.screenshot()"


def entry_lines(entry: ActionLogEntry) -> List[str]:
    """Statement lines for one non-step entry, without indentation."""
    if isinstance(entry, MouseDownEntry):
        return [f"page.mouse.move({_num(entry.x)}, {_num(entry.y)})", "page.mouse.down()"]
    if isinstance(entry, MouseMoveRun):
        if entry.steps:
            return [f"page.mouse.move({_num(entry.x)}, {_num(entry.y)}, steps={entry.steps})"]
        return [f"page.mouse.move({_num(entry.x)}, {_num(entry.y)})"]
    if isinstance(entry, MouseUpEntry):
        return ["page.mouse.up()"]
    if isinstance(entry, ClickEntry):
        return [f"page.mouse.click({_num(entry.x)}, {_num(entry.y)})"]
    if isinstance(entry, DoubleClickEntry):
        return [f"page.mouse.dblclick({_num(entry.x)}, {_num(entry.y)})"]
    if isinstance(entry, WheelEntry):
        return [
            f"page.mouse.move({_num(entry.x)}, {_num(entry.y)})",
            f"page.mouse.wheel({_num(entry.delta_x)}, {_num(entry.delta_y)})",
        ]
    if isinstance(entry, KeyDownEntry):
        return [f"page.keyboard.down({_str(playwright_key(entry.label))})"]
    if isinstance(entry, KeyUpEntry):
        return [f"page.keyboard.up({_str(playwright_key(entry.label))})"]
    if isinstance(entry, KeyPressEntry):
        return [f"page.keyboard.press({_str(playwright_key(entry.label))})"]
    if isinstance(entry, ScreenshotEntry):
        return [f"assert_snapshot({_screenshot_expr(entry)}, {_str(entry.name)})"]
    if isinstance(entry, NavigationEntry):
        return [f"page.goto({_str(entry.url)})"]
    raise TypeError(f"Cannot render action-log entry {entry!r}")


def close_open_steps(log: Sequence[ActionLogEntry], open_steps: Sequence[str]) -> List[ActionLogEntry]:
    """Return the log followed by one end boundary per open step, innermost first."""
    closed = list(log)
    closed.extend(StepBoundary(which="end", name=name) for name in reversed(open_steps))
    return closed


def render(
    log: Sequence[ActionLogEntry],
    open_steps: Sequence[str] = (),
    base_indent: int = 1,
    closed: bool = False,
) -> List[str]:
    """
    Map the log to indented script lines.

    Step boundaries open and close ``with allure.step(...)`` blocks; ``open_steps``
    are closed innermost first after the log. A block that is closed without
    having received a statement gets ``pass``. Blocks still open at the end, and
    an empty body, are only padded when ``closed`` is set, so rendering a prefix
    of the log yields a prefix of the full rendering.
    """
    lines: List[str] = []
    # one flag per open block: has it received a statement yet?
    filled: List[bool] = [False]

    def emit(statements: Iterable[str]) -> None:
        prefix = INDENT * (base_indent + len(filled) - 1)
        for statement in statements:
            lines.append(prefix + statement)
        filled[-1] = True

    for entry in close_open_steps(log, open_steps):
        if isinstance(entry, StepBoundary):
            if entry.is_start:
                emit([f"with allure.step({_str(entry.name)}):"])
                filled.append(False)
            elif len(filled) > 1:
                if not filled[-1]:
                    emit(["pass"])
                filled.pop()
            continue
        if isinstance(entry, CommentEntry):
            prefix = INDENT * (base_indent + len(filled) - 1)
            for text_line in (entry.text.replace("\x00", "").splitlines() or [""]):
                lines.append(f"{prefix}# {text_line}".rstrip())
            continue
        emit(entry_lines(entry))

    if not closed:
        return lines
    while len(filled) > 1:
        # starts left open by a log loaded without its open-step stack
        if not filled[-1]:
            emit(["pass"])
        filled.pop()
    if not filled[0]:
        emit(["pass"])
    return lines


def render_script(log: Sequence[ActionLogEntry], open_steps: Sequence[str] = ()) -> str:
    """Full module text: imports, test function and the rendered, fully closed body."""
    return "\n".join(list(SCRIPT_HEADER) + render(log, open_steps, closed=True)) + "\n"
