from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from ui_codegen.app.configuration import RuntimeConfig, load_runtime_config
from ui_codegen.app.environment import build_default_paths
from ui_codegen.app.settings import RecorderSettings
from ui_codegen.automation.action import entry_from_dict
from ui_codegen.automation.renderer import render_script

logger = logging.getLogger("ui_codegen.cli")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ui-codegen", description="Record a browser session as a Playwright test")
    parser.add_argument("--settings", type=Path, default=None, help="Recorder settings JSON, applied before environment/INI overrides")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    record_parser = subparsers.add_parser("record", help="Open a browser and record until the page is closed")
    record_parser.add_argument("url", help="Page to open before recording starts")
    record_parser.add_argument("--output-dir", help="Directory for the script and snapshots")
    record_parser.add_argument("--script-name", help="Script file name (default codegen.py)")
    record_parser.add_argument("--headless", action="store_true", help="Run the browser headless")

    render_parser = subparsers.add_parser("render", help="Re-render a saved action log JSON")
    render_parser.add_argument("log_json", type=Path, help="Action log written next to a recorded script")
    render_parser.add_argument("--output", type=Path, help="Write the script here instead of stdout")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s - %(message)s")

    runtime_cfg = load_runtime_config()
    logger.debug("Loaded runtime config overrides: %s", runtime_cfg)

    if args.command == "record":
        return _handle_record(args, runtime_cfg)
    if args.command == "render":
        return _handle_render(args.log_json, args.output)
    parser.print_help()
    return 1


def _load_settings(settings_path: Optional[Path], runtime_cfg: RuntimeConfig) -> RecorderSettings:
    settings = RecorderSettings.load(settings_path) if settings_path else RecorderSettings()
    runtime_cfg.apply_to_settings(settings)
    return settings


def _handle_record(args: argparse.Namespace, runtime_cfg: RuntimeConfig) -> int:
    from playwright.sync_api import Error as PlaywrightError, sync_playwright

    from ui_codegen.automation.browser import install
    from ui_codegen.automation.recorder import Recorder, RecorderConfig

    settings = _load_settings(args.settings, runtime_cfg)
    if args.output_dir:
        settings.output_dir = args.output_dir
    if args.script_name:
        settings.script_name = args.script_name
    paths = build_default_paths(settings)
    config = RecorderConfig(
        output_dir=paths.output_dir,
        script_name=settings.script_name,
        snapshot_dir=paths.snapshot_dir,
        debounce_ms=settings.debounce_ms,
        default_step_name=settings.default_step_name,
        formatter=settings.formatter,
        editor=settings.editor,
        save_log_json=settings.save_log_json,
        attach_to_report=False,
    )
    recorder = Recorder(config)
    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=args.headless)
            page = browser.new_page()
            install(page, recorder)
            page.goto(args.url)
            recorder.start()
            recorder.record_navigation(page.url)
            logger.info("Recording '%s'. Close the browser window to finish.", args.url)
            try:
                page.wait_for_event("close", timeout=0)
            except PlaywrightError:
                logger.info("Browser closed; finishing recording")
            except KeyboardInterrupt:
                logger.info("Interrupted; finishing recording")
            finally:
                recorder.stop()
                browser.close()
    except Exception as exc:
        logger.exception("Recording failed: %s", exc)
        recorder.stop()
        return 4
    logger.info("Script written to %s", config.script_path)
    return 0


def _handle_render(log_json: Path, output: Optional[Path]) -> int:
    try:
        payload = json.loads(log_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Cannot read action log '%s': %s", log_json, exc)
        return 2
    if isinstance(payload, list):
        payload = {"actions": payload, "open_steps": []}
    if not isinstance(payload, dict):
        logger.error("Invalid action log '%s': expected an object or a list", log_json)
        return 2
    try:
        entries = [entry_from_dict(item) for item in payload.get("actions", [])]
    except (AttributeError, TypeError, ValueError, KeyError) as exc:
        logger.error("Invalid action log '%s': %s", log_json, exc)
        return 2
    script = render_script(entries, [str(name) for name in payload.get("open_steps", [])])
    if output is None:
        sys.stdout.write(script)
        return 0
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(script, encoding="utf-8")
    logger.info("Rendered %d action(s) to %s", len(entries), output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
