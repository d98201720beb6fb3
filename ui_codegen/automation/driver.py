"""Debounced persistence of the rendered script and its companion files."""

from __future__ import annotations

import io
import json
import logging
import shlex
import subprocess
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional

from PIL import Image

from .action import entry_to_dict
from .normalizer import SessionState
from .renderer import render_script

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 250

TimerFactory = Callable[[float, Callable[[], None]], Any]


def _thread_timer(interval: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class ScriptWriter:
    """
    Owns the script artifact for one session.

    ``schedule()`` is called after every accepted event and restarts a
    trailing-edge timer, so a burst of events produces a single write.
    ``flush()`` renders and writes immediately; ``close()`` is the final flush.
    """

    def __init__(
        self,
        state: SessionState,
        script_path: Path,
        lock: Optional[threading.RLock] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        log_path: Optional[Path] = None,
        formatter: Optional[str] = None,
        editor: Optional[str] = None,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self.state = state
        self.script_path = Path(script_path)
        self.log_path = Path(log_path) if log_path else None
        self.lock = lock if lock is not None else threading.RLock()
        self.debounce_ms = max(0, int(debounce_ms))
        self.formatter = formatter
        self.editor = editor
        self._timer_factory = timer_factory
        self._timer: Optional[Any] = None
        self._timer_lock = threading.Lock()
        # held from log snapshot to file write so writes land in snapshot order
        self._write_lock = threading.Lock()
        self._generation = 0
        self._closed = False
        self.writes = 0

    def open(self) -> None:
        """Write the initial (empty) script and hand it to the editor, if one is configured."""
        with self._timer_lock:
            self._closed = False
        self.flush()
        if self.editor:
            try:
                subprocess.Popen([*shlex.split(self.editor), str(self.script_path)])
            except (OSError, ValueError) as exc:
                logger.debug("Editor '%s' could not be launched: %s", self.editor, exc)

    def schedule(self) -> None:
        with self._timer_lock:
            if self._closed:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = self._timer_factory(self.debounce_ms / 1000.0, lambda: self._on_timer(generation))
            self._timer.start()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def _cancel(self) -> None:
        with self._timer_lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._write_lock:
            with self._timer_lock:
                if generation != self._generation or self._closed:
                    return
                self._timer = None
            self._write_all()

    def flush(self) -> None:
        self._cancel()
        with self._write_lock:
            self._write_all()

    def close(self) -> None:
        """Final flush; later ``schedule()`` calls are ignored until ``open()``."""
        with self._timer_lock:
            self._closed = True
        self.flush()
        with self._write_lock:
            self._run_formatter()

    def _write_all(self) -> None:
        with self.lock:
            log = list(self.state.log)
            open_steps = list(self.state.open_steps)
        if self._write_text(self.script_path, render_script(log, open_steps)):
            self.writes += 1
            logger.debug("Wrote %d action(s) to %s", len(log), self.script_path)
        if self.log_path is not None:
            payload = {
                "open_steps": open_steps,
                "actions": [entry_to_dict(entry) for entry in log],
            }
            self._write_text(self.log_path, json.dumps(payload, indent=2))

    @staticmethod
    def _write_text(path: Path, text: str) -> bool:
        for attempt in (1, 2):
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8")
                return True
            except OSError as exc:
                logger.warning("Write to %s failed (attempt %d): %s", path, attempt, exc)
        return False

    def _run_formatter(self) -> None:
        if not self.formatter:
            return
        cmd: List[str] = [*shlex.split(self.formatter), str(self.script_path)]
        try:
            subprocess.run(cmd, check=True, capture_output=True, timeout=60)
            logger.debug("Formatted %s with '%s'", self.script_path, self.formatter)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            logger.debug("Formatter '%s' skipped: %s", self.formatter, exc)


def save_snapshot(directory: Path, name: str, image_bytes: bytes) -> Optional[Path]:
    """Persist a captured screenshot; re-encode as PNG when Pillow can read it."""
    path = Path(directory) / name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Snapshot directory %s unavailable: %s", path.parent, exc)
        return None
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img.save(path, format="PNG")
        return path
    except OSError as exc:
        logger.debug("Snapshot '%s' not decodable by Pillow (%s); writing raw bytes", name, exc)
    try:
        path.write_bytes(image_bytes)
        return path
    except OSError as exc:
        logger.warning("Could not save snapshot %s: %s", path, exc)
        return None
