from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from ui_codegen.cli import main


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("UI_CODEGEN_"):
            monkeypatch.delenv(key, raising=False)


def test_render_writes_script(tmp_path: Path) -> None:
    log = tmp_path / "codegen.json"
    log.write_text(
        json.dumps(
            {
                "open_steps": ["a"],
                "actions": [
                    {"kind": "step", "which": "start", "name": "a"},
                    {"kind": "click", "x": 1, "y": 2},
                ],
            }
        ),
        encoding="utf-8",
    )
    out = tmp_path / "out" / "test_session.py"
    assert main(["render", str(log), "--output", str(out)]) == 0
    script = out.read_text(encoding="utf-8")
    assert 'with allure.step("a"):' in script
    assert "        page.mouse.click(1, 2)" in script


def test_render_accepts_bare_list(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log = tmp_path / "codegen.json"
    log.write_text(json.dumps([{"kind": "navigation", "url": "https://example.com"}]), encoding="utf-8")
    assert main(["render", str(log)]) == 0
    assert 'page.goto("https://example.com")' in capsys.readouterr().out


@pytest.mark.parametrize("content", ["not json", "42", '{"actions": [{"kind": "teleport"}]}'])
def test_render_rejects_invalid_logs(tmp_path: Path, content: str) -> None:
    log = tmp_path / "codegen.json"
    log.write_text(content, encoding="utf-8")
    assert main(["render", str(log)]) == 2


def test_render_missing_file(tmp_path: Path) -> None:
    assert main(["render", str(tmp_path / "missing.json")]) == 2
