"""Playwright glue: ship DOM events from the page into a Recorder."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from playwright.sync_api import Frame, Page

from .events import Rect
from .exceptions import RecordingNotActiveError
from .recorder import Recorder

logger = logging.getLogger(__name__)

EVENT_BINDING = "__codegenEvent"
DOM_EVENTS = ("mousedown", "mousemove", "mouseup", "dblclick", "wheel", "keydown", "keyup")

LISTENER_JS = """
(() => {
  if (window !== window.top || window.__codegenInstalled) return;
  window.__codegenInstalled = true;

  const locatorOf = (el) => {
    if (!el || el.nodeType !== Node.ELEMENT_NODE) return "";
    if (el.id) return `#${el.id}`;
    for (const attr of ["data-testid", "data-test", "name", "aria-label"]) {
      if (el.hasAttribute(attr)) {
        return `${el.tagName.toLowerCase()}[${attr}="${el.getAttribute(attr)}"]`;
      }
    }
    const path = [];
    let current = el;
    while (current && current.nodeType === Node.ELEMENT_NODE) {
      if (current.id) {
        path.unshift(`#${current.id}`);
        break;
      }
      let selector = current.nodeName.toLowerCase();
      const parent = current.parentNode;
      if (parent && parent.children) {
        const siblings = Array.from(parent.children).filter((e) => e.nodeName === current.nodeName);
        if (siblings.length > 1) selector += `:nth-of-type(${siblings.indexOf(current) + 1})`;
      }
      path.unshift(selector);
      current = parent;
    }
    return path.join(" > ");
  };
  window.__codegenLocatorOf = locatorOf;

  const send = (e) => {
    if (typeof window.__codegenEvent !== "function") return;
    if (e.type === "mousemove" && !e.buttons) return;
    window.__codegenEvent({
      type: e.type,
      x: e.clientX,
      y: e.clientY,
      key: e.key,
      deltaX: e.deltaX,
      deltaY: e.deltaY,
      shiftKey: e.shiftKey,
      ctrlKey: e.ctrlKey,
      altKey: e.altKey,
      metaKey: e.metaKey,
      locator: locatorOf(e.target),
    });
  };
  for (const type of %(events)s) {
    window.addEventListener(type, send, { capture: true, passive: true });
  }
})();
"""


def _screenshot_bytes(page: Page, options: Dict[str, Any]) -> bytes:
    clip = options.get("clip")
    if clip:
        return page.screenshot(clip=Rect.from_dict(clip).to_dict())
    locator = options.get("locator")
    if locator:
        return page.locator(locator).screenshot()
    return page.screenshot()


def install(page: Page, recorder: Recorder) -> None:
    """
    Expose the recording API to the page.

    In the browser console: ``startRecording()``, ``step("name")``, ``endStep()``,
    ``comment("text")``, ``captureScreenshot({name, clip})``, ``stopRecording()``.
    """

    def on_event(source: Dict[str, Any], payload: Dict[str, Any]) -> None:
        recorder.feed_payload(payload or {})

    def on_start(source: Dict[str, Any]) -> None:
        recorder.start()

    def on_stop(source: Dict[str, Any]) -> None:
        recorder.stop()

    def on_step(source: Dict[str, Any], name: Optional[str] = None) -> None:
        recorder.record_step(name)

    def on_end_step(source: Dict[str, Any]) -> None:
        recorder.end_step()

    def on_comment(source: Dict[str, Any], text: str = "") -> None:
        recorder.record_comment(text)

    def on_screenshot(source: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> str:
        options = dict(options or {})
        if not recorder.running:
            raise RecordingNotActiveError("request_screenshot")
        target: Page = source.get("page") or page
        if not options.get("clip") and not options.get("locator"):
            options["locator"] = target.evaluate(
                "() => window.__codegenLocatorOf ? window.__codegenLocatorOf(document.activeElement) : ''"
            )
        image = _screenshot_bytes(target, options)
        return recorder.request_screenshot(
            image,
            name=options.get("name"),
            locator=options.get("locator") or "",
            region=options.get("clip"),
        )

    def on_navigated(frame: Frame) -> None:
        if frame == page.main_frame and recorder.running:
            recorder.record_navigation(frame.url)

    page.expose_binding(EVENT_BINDING, on_event)
    page.expose_binding("startRecording", on_start)
    page.expose_binding("stopRecording", on_stop)
    page.expose_binding("step", on_step)
    page.expose_binding("endStep", on_end_step)
    page.expose_binding("comment", on_comment)
    page.expose_binding("captureScreenshot", on_screenshot)
    page.on("framenavigated", on_navigated)

    script = LISTENER_JS % {"events": list(DOM_EVENTS)}
    page.add_init_script(script=script)
    try:
        page.evaluate(script)
    except Exception as exc:
        logger.debug("Listener will attach on next navigation: %s", exc)
    logger.info("Recorder bindings installed on %s", page.url or "<blank page>")
