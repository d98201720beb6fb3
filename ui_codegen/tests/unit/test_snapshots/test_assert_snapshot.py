from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from ui_codegen.snapshots import TOLERANCE_ENV, UPDATE_ENV, assert_snapshot, compare_images


def _png(size=(10, 10), color=(255, 255, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(UPDATE_ENV, raising=False)
    monkeypatch.delenv(TOLERANCE_ENV, raising=False)


def test_missing_baseline_is_written(tmp_path: Path) -> None:
    assert_snapshot(_png(), "a.png", snapshot_dir=tmp_path)
    assert (tmp_path / "a.png").exists()


def test_identical_image_passes(tmp_path: Path) -> None:
    assert_snapshot(_png(), "a.png", snapshot_dir=tmp_path)
    assert_snapshot(_png(), "a.png", snapshot_dir=tmp_path)
    assert not (tmp_path / "a-actual.png").exists()


def test_mismatch_raises_and_saves_artifacts(tmp_path: Path) -> None:
    assert_snapshot(_png(), "a.png", snapshot_dir=tmp_path)
    with pytest.raises(AssertionError, match="differs by 100.000%"):
        assert_snapshot(_png(color=(0, 0, 0)), "a.png", snapshot_dir=tmp_path)
    assert (tmp_path / "a-actual.png").exists()
    assert (tmp_path / "a-diff.png").exists()


def test_size_mismatch_fails(tmp_path: Path) -> None:
    assert_snapshot(_png(), "a.png", snapshot_dir=tmp_path)
    with pytest.raises(AssertionError, match="size differs"):
        assert_snapshot(_png(size=(12, 10)), "a.png", snapshot_dir=tmp_path)


def test_update_env_overwrites_baseline(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert_snapshot(_png(), "a.png", snapshot_dir=tmp_path)
    monkeypatch.setenv(UPDATE_ENV, "1")
    assert_snapshot(_png(color=(0, 0, 0)), "a.png", snapshot_dir=tmp_path)
    with Image.open(tmp_path / "a.png") as img:
        assert img.convert("RGB").getpixel((0, 0)) == (0, 0, 0)


def test_tolerance_allows_small_diff() -> None:
    base = Image.new("RGB", (10, 10), (255, 255, 255))
    changed = base.copy()
    changed.putpixel((0, 0), (0, 0, 0))
    strict = compare_images(base, changed)
    assert not strict.passed
    assert strict.diff_percent == pytest.approx(1.0)
    assert compare_images(base, changed, tolerance_percent=1.0).passed
