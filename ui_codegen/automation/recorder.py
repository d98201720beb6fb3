import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from ui_codegen.automation import events as ev
from ui_codegen.automation.action import ActionLogEntry
from ui_codegen.automation.driver import DEFAULT_DEBOUNCE_MS, ScriptWriter, save_snapshot
from ui_codegen.automation.exceptions import RecordingNotActiveError, UnknownEventError
from ui_codegen.automation.normalizer import DEFAULT_STEP_NAME, Normalizer, SessionState
from ui_codegen.automation.reporting.allure_helpers import attach_session
from ui_codegen.automation.util import auto_snapshot_name, ensure_png_name

logger = logging.getLogger(__name__)


@dataclass
class RecorderConfig:
    output_dir: Path
    script_name: str = "codegen.py"
    snapshot_dir: Optional[Path] = None     # defaults to <output_dir>/snapshots
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    default_step_name: str = DEFAULT_STEP_NAME
    formatter: Optional[str] = None         # e.g. "black -q"
    editor: Optional[str] = None            # e.g. "code"
    save_log_json: bool = True
    attach_to_report: bool = True

    @property
    def script_path(self) -> Path:
        return self.output_dir / self.script_name

    @property
    def log_path(self) -> Path:
        return self.script_path.with_suffix(".json")

    @property
    def snapshots_path(self) -> Path:
        return self.snapshot_dir or (self.output_dir / "snapshots")


class Recorder:
    """One recording session: raw events in, a continuously rewritten script out."""

    def __init__(self, config: RecorderConfig, timer_factory: Optional[Callable[..., Any]] = None) -> None:
        self.config = config
        self.state = SessionState()
        self.normalizer = Normalizer(self.state, default_step_name=config.default_step_name)
        self._lock = threading.RLock()
        writer_kwargs = {}
        if timer_factory is not None:
            writer_kwargs["timer_factory"] = timer_factory
        self.writer = ScriptWriter(
            self.state,
            config.script_path,
            lock=self._lock,
            debounce_ms=config.debounce_ms,
            log_path=config.log_path if config.save_log_json else None,
            formatter=config.formatter,
            editor=config.editor,
            **writer_kwargs,
        )
        self._shot_idx = 0
        self.snapshots: List[Path] = []

    @property
    def running(self) -> bool:
        return self.state.recording

    @property
    def actions(self) -> List[ActionLogEntry]:
        with self._lock:
            return list(self.state.log)

    def __enter__(self) -> "Recorder":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def start(self) -> None:
        if self.running:
            return
        with self._lock:
            self.state.recording = True
        self.writer.open()
        logger.info(f"Recorder started. Writing script to {self.config.script_path}")

    def stop(self) -> None:
        if not self.running:
            return
        with self._lock:
            self.state.recording = False
            self.state.button_down = False
        self.writer.close()
        logger.info(
            f"Recorder stopped: {len(self.state.log)} action(s), "
            f"{len(self.state.open_steps)} step(s) closed automatically"
        )
        if self.config.attach_to_report:
            attach_session(self.config.script_path, self.snapshots)

    def feed(self, event: ev.RawEvent) -> bool:
        """Apply one raw event from the transport; events outside a recording are dropped."""
        with self._lock:
            accepted = self.normalizer.apply(event)
        if not accepted:
            return False
        if isinstance(event, ev.ScreenshotRequest):
            path = save_snapshot(self.config.snapshots_path, event.name, event.image_bytes)
            if path is not None:
                self.snapshots.append(path)
        self.writer.schedule()
        return True

    def feed_payload(self, payload: Mapping[str, Any]) -> bool:
        try:
            event = ev.raw_event_from_payload(payload)
        except UnknownEventError as exc:
            logger.debug("Ignored: %s", exc)
            return False
        return self.feed(event)

    def _require_recording(self, operation: str) -> None:
        if not self.running:
            raise RecordingNotActiveError(operation)

    def record_step(self, name: Optional[str] = None) -> None:
        self._require_recording("record_step")
        self.feed(ev.StepStart(name=name))

    def end_step(self) -> None:
        self._require_recording("end_step")
        self.feed(ev.StepEnd())

    def record_comment(self, text: str) -> None:
        self._require_recording("record_comment")
        self.feed(ev.Comment(text=str(text)))

    def record_navigation(self, url: str) -> None:
        self._require_recording("record_navigation")
        self.feed(ev.Navigation(url=str(url)))

    def request_screenshot(
        self,
        image_bytes: bytes,
        name: Optional[str] = None,
        locator: str = "",
        region: Union[ev.Rect, Mapping[str, Any], None] = None,
    ) -> str:
        """Record a snapshot assertion for already-captured bytes; returns the snapshot name."""
        self._require_recording("request_screenshot")
        if name:
            snapshot = ensure_png_name(name)
        else:
            self._shot_idx += 1
            snapshot = auto_snapshot_name(self._shot_idx)
        if region is not None and not isinstance(region, ev.Rect):
            region = ev.Rect.from_dict(region)
        self.feed(ev.ScreenshotRequest(name=snapshot, image_bytes=image_bytes, locator=locator or "", region=region))
        return snapshot
