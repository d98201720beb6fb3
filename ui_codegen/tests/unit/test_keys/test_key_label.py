from __future__ import annotations

from hypothesis import given, strategies as st

from ui_codegen.automation.keys import key_label, playwright_key


def test_plain_key_has_no_prefix() -> None:
    assert key_label("a") == "a"
    assert key_label("Enter", []) == "Enter"


def test_modifiers_use_canonical_order() -> None:
    assert key_label("x", {"shift", "ctrl", "meta", "alt"}) == "Alt+Ctrl+Meta+Shift+x"
    assert key_label("x", ["shift", "alt"]) == "Alt+Shift+x"


def test_event_style_modifier_names_are_accepted() -> None:
    assert key_label("k", ["ctrlKey", "shiftKey"]) == "Ctrl+Shift+k"
    assert key_label("k", ["Control"]) == "Ctrl+k"


def test_modifier_matching_key_is_skipped() -> None:
    assert key_label("Shift", {"shift"}) == "Shift"
    assert key_label("Alt", {"alt", "shift"}) == "Shift+Alt"


def test_unknown_modifiers_are_ignored() -> None:
    assert key_label("q", {"hyper", "fn"}) == "q"


@given(st.text(min_size=1, max_size=8), st.sets(st.sampled_from(["alt", "ctrl", "meta", "shift"])))
def test_label_always_ends_with_key(key: str, mods: set) -> None:
    label = key_label(key, mods)
    assert label.endswith(key)
    assert label == key_label(key, mods)


def test_dom_name_of_modifier_key_is_skipped() -> None:
    assert key_label("Control", {"ctrl"}) == "Control"
    assert key_label("Control", {"ctrl", "shift"}) == "Shift+Control"
    assert key_label("Meta", {"meta"}) == "Meta"


def test_playwright_key_spells_control() -> None:
    assert playwright_key("Ctrl+a") == "Control+a"
    assert playwright_key("Alt+Ctrl+Shift+Delete") == "Alt+Control+Shift+Delete"
    assert playwright_key("Ctrl++") == "Control++"
    assert playwright_key("+") == "+"
    assert playwright_key("Control") == "Control"
