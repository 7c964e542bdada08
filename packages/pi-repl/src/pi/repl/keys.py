"""Terminal keyboard input parsing for the REPL editor.

Recognises legacy escape sequences and kitty CSI-u sequences for the keys the
REPL editor cares about, and turns them into key identifiers such as
``"shift+tab"`` or ``"alt+enter"``. ``event_from_terminal`` maps those onto
the typed router events.
"""

from __future__ import annotations

import re

from pi.repl.events import (
    Cancel,
    Down,
    EditorEvent,
    Enter,
    OtherKey,
    Tab,
    Up,
)

KeyId = str

# Bracketed paste markers
PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

MODIFIERS = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
    "super": 8,
}

LOCK_MASK = 64 + 128

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[3~": "delete",
}

LEGACY_SHIFT_SEQUENCES: dict[str, str] = {
    "\x1b[1;2A": "up",
    "\x1b[1;2B": "down",
    "\x1b[1;2C": "right",
    "\x1b[1;2D": "left",
    "\x1b[Z": "tab",
    "\x1b[13;2~": "enter",
}

LEGACY_ALT_SEQUENCES: dict[str, str] = {
    "\x1b[1;3A": "up",
    "\x1b[1;3B": "down",
    "\x1b[1;3C": "right",
    "\x1b[1;3D": "left",
}

LEGACY_CTRL_SEQUENCES: dict[str, str] = {
    "\x1b[1;5A": "up",
    "\x1b[1;5B": "down",
    "\x1b[1;5C": "right",
    "\x1b[1;5D": "left",
}

_KITTY_CODEPOINTS: dict[int, str] = {
    9: "tab",
    13: "enter",
    27: "escape",
    127: "backspace",
    57414: "enter",  # keypad enter
}

_KITTY_CSI_U_RE = re.compile(r"^\x1b\[(\d+)(?::\d*)?(?::\d+)?(?:;(\d+))?(?::\d+)?u$")
_KITTY_ARROW_RE = re.compile(r"^\x1b\[1;(\d+)(?::\d+)?([ABCD])$")
_ARROW_LETTERS = {"A": "up", "B": "down", "C": "right", "D": "left"}


def _modifier_prefix(modifier: int) -> str:
    mod = (modifier - 1) & ~LOCK_MASK
    prefix = ""
    if mod & MODIFIERS["ctrl"]:
        prefix += "ctrl+"
    if mod & MODIFIERS["shift"]:
        prefix += "shift+"
    if mod & (MODIFIERS["alt"] | MODIFIERS["super"]):
        prefix += "alt+"
    return prefix


def parse_key(data: str) -> KeyId | None:  # noqa: C901
    """Parse raw terminal input and return a key identifier, or ``None``."""
    if not data:
        return None

    m = _KITTY_CSI_U_RE.match(data)
    if m:
        codepoint = int(m.group(1))
        prefix = _modifier_prefix(int(m.group(2)) if m.group(2) else 1)
        name = _KITTY_CODEPOINTS.get(codepoint)
        if name is not None:
            return prefix + name
        if codepoint >= 32:
            ch = chr(codepoint)
            if ch.isprintable():
                return prefix + ch
        return None

    m = _KITTY_ARROW_RE.match(data)
    if m:
        return _modifier_prefix(int(m.group(1))) + _ARROW_LETTERS[m.group(2)]

    for seq_dict, mod_prefix in [
        (LEGACY_CTRL_SEQUENCES, "ctrl+"),
        (LEGACY_SHIFT_SEQUENCES, "shift+"),
        (LEGACY_ALT_SEQUENCES, "alt+"),
        (LEGACY_KEY_SEQUENCES, ""),
    ]:
        if data in seq_dict:
            return mod_prefix + seq_dict[data]

    if data == "\x1b":
        return "escape"
    if data == "\r":
        return "enter"
    if data == "\n":
        # Ctrl+J / LF: what most terminals send for Shift+Enter when mapped
        return "shift+enter"
    if data == "\t":
        return "tab"
    if data == "\x7f" or data == "\x08":
        return "backspace"

    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\r" or ch == "\n":
            return "alt+enter"
        if ch.isprintable():
            return "alt+" + ch

    if data.isprintable():
        return data

    return None


def is_printable_input(data: str) -> bool:
    """Return ``True`` if *data* is plain text to insert rather than a key."""
    return bool(data) and not data.startswith("\x1b") and data.isprintable()


def is_pasted_text(data: str) -> bool:
    """Return ``True`` for multi-character text, line breaks and tabs allowed."""
    return (
        len(data) > 1
        and not data.startswith("\x1b")
        and all(ch.isprintable() or ch in "\r\n\t" for ch in data)
    )


def clean_paste(text: str) -> str:
    """Normalise line endings, expand tabs and drop other control characters."""
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", "    ")
    return "".join(ch for ch in text if ch == "\n" or ord(ch) >= 32)


def event_from_key_id(key: KeyId) -> EditorEvent:
    """Map a key identifier onto a router event."""
    *mods, name = key.split("+") if key != "+" else ["+"]
    shift = "shift" in mods
    meta = "alt" in mods or "ctrl" in mods

    if name == "escape" and not mods:
        return Cancel()
    if name == "tab" and not meta:
        return Tab(shift=shift)
    if name == "enter":
        return Enter(shift_key=shift, meta_key=meta)
    if name == "up" and not meta:
        return Up(shift_key=shift)
    if name == "down" and not meta:
        return Down(shift_key=shift)
    return OtherKey(key)


def event_from_terminal(data: str) -> EditorEvent | None:
    """Translate raw terminal input into a router event, or ``None`` if unknown."""
    if is_pasted_text(data):
        # Pasted or buffered text; refresh completions like any other edit.
        return OtherKey(data)
    key = parse_key(data)
    if key is None:
        return None
    return event_from_key_id(key)
