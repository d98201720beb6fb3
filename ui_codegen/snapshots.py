"""Snapshot assertions used by generated scripts."""

from __future__ import annotations

import inspect
import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

SNAPSHOT_DIR_ENV = "UI_CODEGEN_SNAPSHOT_DIR"
UPDATE_ENV = "UI_CODEGEN_UPDATE_SNAPSHOTS"
TOLERANCE_ENV = "UI_CODEGEN_SNAPSHOT_TOLERANCE"

ImageSource = Union[bytes, Path, Image.Image]


@dataclass(slots=True)
class SnapshotResult:
    passed: bool
    diff_percent: float
    size_mismatch: bool = False
    diff_image: Optional[Image.Image] = None


def _load(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source.convert("RGBA")
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(source)).convert("RGBA")
    return Image.open(source).convert("RGBA")


def compare_images(expected: ImageSource, actual: ImageSource, tolerance_percent: float = 0.0) -> SnapshotResult:
    """Pixel diff of two images; passes when the share of changed pixels is within tolerance."""
    original = _load(expected)
    test = _load(actual)
    if original.size != test.size:
        logger.warning("Snapshot sizes differ: %s vs %s", original.size, test.size)
        return SnapshotResult(passed=False, diff_percent=100.0, size_mismatch=True)

    a = np.asarray(original, dtype=np.int16)
    b = np.asarray(test, dtype=np.int16)
    absdiff = np.abs(a - b)
    diff_mask = np.any(absdiff > 0, axis=2)
    total = diff_mask.size
    diff_percent = (int(diff_mask.sum()) / total) * 100.0 if total else 0.0

    diff_image = None
    if diff_mask.any():
        perpix = absdiff[..., :3].max(axis=2)
        if perpix.max() > 0:
            perpix = (perpix.astype(np.float32) / perpix.max()) * 255.0
        diff_image = Image.fromarray(perpix.astype(np.uint8))
    return SnapshotResult(
        passed=diff_percent <= tolerance_percent,
        diff_percent=diff_percent,
        diff_image=diff_image,
    )


def _caller_snapshot_dir() -> Path:
    frame = inspect.currentframe()
    try:
        caller = frame.f_back.f_back if frame and frame.f_back else None
        if caller is not None:
            return Path(caller.f_code.co_filename).resolve().parent / "snapshots"
    finally:
        del frame
    return Path.cwd() / "snapshots"


def _env_tolerance() -> float:
    raw = os.environ.get(TOLERANCE_ENV)
    if raw is None:
        return 0.0
    try:
        return float(raw)
    except ValueError:
        return 0.0


def assert_snapshot(
    actual: ImageSource,
    name: str,
    snapshot_dir: Optional[Path] = None,
    tolerance_percent: Optional[float] = None,
) -> None:
    """
    Compare ``actual`` against the stored snapshot ``name``.

    Snapshots are looked up in ``snapshot_dir``, then ``$UI_CODEGEN_SNAPSHOT_DIR``,
    then a ``snapshots`` folder next to the calling test module. A missing
    snapshot is written and the assertion passes; set
    ``UI_CODEGEN_UPDATE_SNAPSHOTS=1`` to overwrite existing ones.
    """
    if snapshot_dir is None:
        env_dir = os.environ.get(SNAPSHOT_DIR_ENV)
        snapshot_dir = Path(env_dir) if env_dir else _caller_snapshot_dir()
    tolerance = _env_tolerance() if tolerance_percent is None else float(tolerance_percent)
    baseline = Path(snapshot_dir) / name

    if not baseline.exists() or os.environ.get(UPDATE_ENV, "").lower() in {"1", "true", "yes", "on"}:
        baseline.parent.mkdir(parents=True, exist_ok=True)
        _load(actual).save(baseline, format="PNG")
        logger.info("Snapshot written: %s", baseline)
        return

    result = compare_images(baseline, actual, tolerance)
    if result.passed:
        return

    actual_path = baseline.with_name(f"{baseline.stem}-actual.png")
    _load(actual).save(actual_path, format="PNG")
    if result.diff_image is not None:
        result.diff_image.save(baseline.with_name(f"{baseline.stem}-diff.png"))
    if result.size_mismatch:
        raise AssertionError(f"Snapshot '{name}' size differs from {baseline}; actual saved to {actual_path}")
    raise AssertionError(
        f"Snapshot '{name}' differs by {result.diff_percent:.3f}% "
        f"(tolerance {tolerance:.3f}%); actual saved to {actual_path}"
    )
