from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

import pytest

from ui_codegen.app.configuration import load_runtime_config
from ui_codegen.app.environment import build_default_paths
from ui_codegen.app.settings import RecorderSettings


@pytest.fixture
def temp_ini(tmp_path: Path) -> Path:
    ini = tmp_path / "ui_codegen.ini"
    ini.write_text(
        "[runtime]\n"
        "output_dir = recordings\n"
        "debounce_ms = 100\n"
        "save_log_json = false\n"
        "formatter = black -q\n",
        encoding="utf-8",
    )
    return ini


def test_load_runtime_config_prefers_explicit_path(temp_ini: Path) -> None:
    cfg = load_runtime_config({}, config_path=temp_ini)
    assert cfg.output_dir == "recordings"
    assert cfg.debounce_ms == 100
    assert cfg.save_log_json is False
    assert cfg.formatter == "black -q"
    # Config source should reflect the file used
    assert cfg.config_source == temp_ini


def test_env_overrides_ini(temp_ini: Path) -> None:
    env: Dict[str, str] = {
        "UI_CODEGEN_OUTPUT_DIR": "elsewhere",
        "UI_CODEGEN_DEBOUNCE_MS": "500",
        "UI_CODEGEN_SAVE_LOG_JSON": "yes",
        "UI_CODEGEN_DEFAULT_STEP_NAME": "block",
    }
    cfg = load_runtime_config(env, config_path=temp_ini)
    assert cfg.output_dir == "elsewhere"
    assert cfg.debounce_ms == 500
    assert cfg.save_log_json is True
    assert cfg.default_step_name == "block"


def test_invalid_values_keep_previous(temp_ini: Path) -> None:
    cfg = load_runtime_config({"UI_CODEGEN_DEBOUNCE_MS": "soon", "UI_CODEGEN_SAVE_LOG_JSON": "maybe"}, config_path=temp_ini)
    assert cfg.debounce_ms == 100
    assert cfg.save_log_json is False


def test_config_file_from_env(temp_ini: Path) -> None:
    cfg = load_runtime_config({"UI_CODEGEN_CONFIG_FILE": str(temp_ini)})
    assert cfg.config_source == temp_ini
    assert cfg.output_dir == "recordings"


def test_runtime_config_applies_to_settings(temp_ini: Path) -> None:
    cfg = load_runtime_config({}, config_path=temp_ini)
    settings = RecorderSettings()
    cfg.apply_to_settings(settings)
    assert settings.output_dir == "recordings"
    assert settings.debounce_ms == 100
    assert settings.save_log_json is False
    assert settings.script_name == "codegen.py"


def test_load_runtime_config_handles_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "does_not_exist.ini"
    cfg = load_runtime_config({}, config_path=missing)
    assert cfg.output_dir is None
    assert cfg.config_source == missing


def test_settings_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    RecorderSettings(output_dir="out", editor="code", debounce_ms=50).save(path)
    loaded = RecorderSettings.load(path)
    assert loaded.output_dir == "out"
    assert loaded.editor == "code"
    assert loaded.debounce_ms == 50


def test_settings_load_tolerates_bad_json(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    assert RecorderSettings.load(path) == RecorderSettings()


def test_build_default_paths(tmp_path: Path) -> None:
    paths = build_default_paths(RecorderSettings(output_dir="rec"), root=tmp_path)
    assert paths.script_path == tmp_path / "rec" / "codegen.py"
    assert paths.snapshot_dir == tmp_path / "rec" / "snapshots"
    assert paths.snapshot_dir.is_dir()
