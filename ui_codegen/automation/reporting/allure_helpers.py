"""Allure reporting helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import allure

logger = logging.getLogger(__name__)


def attach_file(name: str, path: Path, attachment_type: Optional[str] = None) -> None:
    if not path.exists():
        return
    attachment_type = attachment_type or "text/plain"
    try:
        allure.attach(path.read_bytes(), name=name, attachment_type=attachment_type)
    except Exception as exc:
        logger.debug("Allure attachment '%s' skipped: %s", name, exc)


def attach_session(script_path: Path, snapshots: Iterable[Path]) -> None:
    """Attach the generated script and every captured snapshot to the running report."""
    attach_file(script_path.name, script_path, "text/plain")
    for snapshot in snapshots:
        attach_file(snapshot.name, snapshot, "image/png")
