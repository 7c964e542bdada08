"""Decide whether Enter submits and whether Up/Down browse history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pi.repl.document import Document
from pi.repl.validators import SourceValidator, is_balanced_form, safe_validator

if TYPE_CHECKING:
    from pi.repl.events import Enter


def is_cursor_in_place(document: Document) -> bool:
    """True for a one-line buffer, or when the cursor trails the last line."""
    lines = document.line_count()
    if lines == 1:
        return True
    cursor = document.get_cursor()
    last_line = lines - 1
    return cursor.line == last_line and cursor.ch == len(document.get_line(last_line))


def should_submit(
    document: Document,
    *,
    shift_key: bool,
    meta_key: bool,
    is_valid: SourceValidator,
) -> bool:
    """Decide whether Enter should submit the buffer.

    Shift never submits (it inserts a line break), meta always does. Otherwise
    the cursor has to be in place and the source has to validate.
    """
    if shift_key:
        return False
    if meta_key:
        return True
    return is_cursor_in_place(document) and safe_validator(is_valid)(document.get_value())


def should_go_up(document: Document) -> bool:
    return document.get_cursor().line == 0


def should_go_down(document: Document) -> bool:
    return document.get_cursor().line == document.line_count() - 1


# Hooks with the signatures ``ReplEditorOptions`` expects.


def default_should_eval(
    source: str,
    document: Document,
    event: Enter,
    is_valid: SourceValidator = is_balanced_form,
) -> bool:
    return should_submit(
        document,
        shift_key=event.shift_key,
        meta_key=event.meta_key,
        is_valid=is_valid,
    )


def default_should_go_up(source: str, document: Document) -> bool:
    return should_go_up(document)


def default_should_go_down(source: str, document: Document) -> bool:
    return should_go_down(document)
