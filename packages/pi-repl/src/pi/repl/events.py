"""Typed key events consumed by the event router."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# DOM-style key codes
TAB = 9
ENTER = 13
SHIFT = 16
CTRL = 17
ALT = 18
ESCAPE = 27
UP = 38
DOWN = 40
META_LEFT = 91
META_RIGHT = 93

MODIFIER_KEY_CODES = frozenset({SHIFT, CTRL, ALT, META_LEFT, META_RIGHT})
SHOW_ALL_KEY_CODES = frozenset({CTRL, ALT, META_LEFT, META_RIGHT})


@dataclass(frozen=True)
class Cancel:
    """Escape: abandon the completion session."""


@dataclass(frozen=True)
class ShowAllModifier:
    key_code: int
    released: bool = False

    @property
    def shows_all(self) -> bool:
        return self.key_code in SHOW_ALL_KEY_CODES


@dataclass(frozen=True)
class Tab:
    shift: bool = False


@dataclass(frozen=True)
class Enter:
    shift_key: bool = False
    meta_key: bool = False


@dataclass(frozen=True)
class Up:
    shift_key: bool = False


@dataclass(frozen=True)
class Down:
    shift_key: bool = False


@dataclass(frozen=True)
class OtherKey:
    code: int | str


EditorEvent = Union[Cancel, ShowAllModifier, Tab, Enter, Up, Down, OtherKey]


def event_from_key_code(
    code: int,
    *,
    shift_key: bool = False,
    meta_key: bool = False,
    released: bool = False,
) -> EditorEvent:
    """Translate a DOM-style key code plus modifier flags into an event."""
    if code == ESCAPE:
        return Cancel()
    if code in MODIFIER_KEY_CODES:
        return ShowAllModifier(key_code=code, released=released)
    if code == TAB:
        return Tab(shift=shift_key)
    if code == ENTER:
        return Enter(shift_key=shift_key, meta_key=meta_key)
    if code == UP:
        return Up(shift_key=shift_key)
    if code == DOWN:
        return Down(shift_key=shift_key)
    return OtherKey(code)
