# ui_codegen/app/settings.py
from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional


@dataclass
class RecorderSettings:
    output_dir: str = "codegen-output"
    script_name: str = "codegen.py"
    snapshot_dir: Optional[str] = None
    debounce_ms: int = 250
    default_step_name: str = "step"
    formatter: Optional[str] = None
    editor: Optional[str] = None
    save_log_json: bool = True

    @classmethod
    def load(cls, path: Path) -> RecorderSettings:
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except Exception:
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls(
            output_dir=str(data.get("output_dir", cls.output_dir)),
            script_name=str(data.get("script_name", cls.script_name)),
            snapshot_dir=data.get("snapshot_dir"),
            debounce_ms=int(data.get("debounce_ms", cls.debounce_ms)),
            default_step_name=str(data.get("default_step_name", cls.default_step_name)),
            formatter=data.get("formatter"),
            editor=data.get("editor"),
            save_log_json=bool(data.get("save_log_json", cls.save_log_json)),
        )

    def save(self, path: Path) -> None:
        try:
            path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
        except Exception:
            pass
