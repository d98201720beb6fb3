# ui_codegen/app/environment.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .settings import RecorderSettings


@dataclass
class Paths:
    """Resolved filesystem locations for one recording."""

    output_dir: Path
    script_path: Path
    snapshot_dir: Path


def build_default_paths(settings: RecorderSettings, root: Optional[Path] = None) -> Paths:
    """Resolve the settings' output locations against ``root`` and ensure directories exist."""
    base = Path(root) if root is not None else Path.cwd()
    output_dir = Path(settings.output_dir).expanduser()
    if not output_dir.is_absolute():
        output_dir = base / output_dir
    snapshot_dir = Path(settings.snapshot_dir).expanduser() if settings.snapshot_dir else output_dir / "snapshots"
    if not snapshot_dir.is_absolute():
        snapshot_dir = base / snapshot_dir
    paths = Paths(
        output_dir=output_dir,
        script_path=output_dir / settings.script_name,
        snapshot_dir=snapshot_dir,
    )
    _ensure_dirs(paths.output_dir, paths.snapshot_dir)
    return paths


def _ensure_dirs(*directories: Path) -> None:
    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)
