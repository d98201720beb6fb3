"""Runtime configuration loading helpers for the codegen recorder."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .settings import RecorderSettings

_ENV_PREFIX = "UI_CODEGEN_"
_BOOL_TRUE = {"1", "true", "yes", "on"}
_BOOL_FALSE = {"0", "false", "no", "off"}


@dataclass(slots=True)
class RuntimeConfig:
    """Declarative overrides sourced from environment variables or config files."""

    config_source: Optional[Path] = None
    output_dir: Optional[str] = None
    script_name: Optional[str] = None
    snapshot_dir: Optional[str] = None
    debounce_ms: Optional[int] = None
    default_step_name: Optional[str] = None
    formatter: Optional[str] = None
    editor: Optional[str] = None
    save_log_json: Optional[bool] = None

    def apply_to_settings(self, settings: RecorderSettings) -> None:
        """Project runtime overrides onto persisted settings without destroying saved values."""

        if self.output_dir is not None:
            settings.output_dir = self.output_dir
        if self.script_name is not None:
            settings.script_name = self.script_name
        if self.snapshot_dir is not None:
            settings.snapshot_dir = self.snapshot_dir
        if self.debounce_ms is not None:
            settings.debounce_ms = self.debounce_ms
        if self.default_step_name is not None:
            settings.default_step_name = self.default_step_name
        if self.formatter is not None:
            settings.formatter = self.formatter
        if self.editor is not None:
            settings.editor = self.editor
        if self.save_log_json is not None:
            settings.save_log_json = self.save_log_json


def load_runtime_config(
    env: Mapping[str, str] | None = None,
    config_path: Optional[Path] = None,
) -> RuntimeConfig:
    """Load runtime configuration overrides from environment variables and optional INI files."""

    source_env = os.environ if env is None else env
    config_file = _determine_config_path(source_env, config_path)
    config = RuntimeConfig(config_source=config_file)

    if config_file is not None and config_file.is_file():
        parser = configparser.ConfigParser()
        try:
            parser.read(config_file, encoding="utf-8")
        except configparser.Error:
            parser = None  # pragma: no cover - invalid file handled via env overrides only
        if parser and parser.has_section("runtime"):
            section = parser["runtime"]
            config.output_dir = section.get("output_dir", config.output_dir)
            config.script_name = section.get("script_name", config.script_name)
            config.snapshot_dir = section.get("snapshot_dir", config.snapshot_dir)
            config.debounce_ms = _get_int(section, "debounce_ms", config.debounce_ms)
            config.default_step_name = section.get("default_step_name", config.default_step_name)
            config.formatter = section.get("formatter", config.formatter)
            config.editor = section.get("editor", config.editor)
            config.save_log_json = _get_bool(section, "save_log_json", config.save_log_json)

    _apply_env_overrides(config, source_env)
    return config


def _determine_config_path(env: Mapping[str, str], explicit: Optional[Path]) -> Optional[Path]:
    if explicit is not None:
        return explicit
    env_override = env.get(f"{_ENV_PREFIX}CONFIG_FILE")
    if env_override:
        return Path(env_override).expanduser()
    candidates = (
        Path(env.get("UI_CODEGEN_ROOT", "")) / "ui_codegen.ini" if env.get("UI_CODEGEN_ROOT") else None,
        Path.cwd() / "ui_codegen.ini",
        Path.cwd() / "ui-codegen.ini",
    )
    for candidate in candidates:
        if candidate and candidate.is_file():
            return candidate
    return None


def _apply_env_overrides(config: RuntimeConfig, env: Mapping[str, str]) -> None:
    config.output_dir = env.get(f"{_ENV_PREFIX}OUTPUT_DIR", config.output_dir)
    config.script_name = env.get(f"{_ENV_PREFIX}SCRIPT_NAME", config.script_name)
    config.snapshot_dir = env.get(f"{_ENV_PREFIX}SNAPSHOT_DIR", config.snapshot_dir)
    config.debounce_ms = _get_int(env, f"{_ENV_PREFIX}DEBOUNCE_MS", config.debounce_ms)
    config.default_step_name = env.get(f"{_ENV_PREFIX}DEFAULT_STEP_NAME", config.default_step_name)
    config.formatter = env.get(f"{_ENV_PREFIX}FORMATTER", config.formatter)
    config.editor = env.get(f"{_ENV_PREFIX}EDITOR", config.editor)
    config.save_log_json = _get_bool(env, f"{_ENV_PREFIX}SAVE_LOG_JSON", config.save_log_json)


def _get_int(source: Mapping[str, str], key: str, default: Optional[int]) -> Optional[int]:
    raw = source.get(key)
    if raw is None:
        return default
    try:
        return int(float(str(raw).strip()))
    except (TypeError, ValueError):
        return default


def _get_bool(source: Mapping[str, str], key: str, default: Optional[bool]) -> Optional[bool]:
    raw = source.get(key)
    if raw is None:
        return default
    value = str(raw).strip().lower()
    if value in _BOOL_TRUE:
        return True
    if value in _BOOL_FALSE:
        return False
    return default
