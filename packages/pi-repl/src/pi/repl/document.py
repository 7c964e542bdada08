"""Document positions and the in-memory text buffer behind the REPL editor.

``Document`` is the contract the decision engine needs from an editing
surface. ``TextBuffer`` implements it over a list of lines so the engine can
run without a real editor attached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import grapheme as _grapheme


@dataclass(frozen=True, order=True)
class Position:
    """A (line, column) location. Columns count code points."""

    line: int
    ch: int


@dataclass(frozen=True)
class Span:
    """Half-open document range ``[start, end)``."""

    start: Position
    end: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@runtime_checkable
class Document(Protocol):
    """Interface for the editing surface the router drives."""

    def get_value(self) -> str:
        """Get the full buffer text."""
        ...

    def set_value(self, text: str) -> None:
        """Replace the full buffer text."""
        ...

    def get_cursor(self) -> Position:
        """Get the cursor position."""
        ...

    def set_cursor(self, pos: Position) -> None:
        """Move the cursor, clamped to the buffer."""
        ...

    def line_count(self) -> int:
        ...

    def get_line(self, line: int) -> str:
        ...

    def get_range(self, start: Position, end: Position) -> str:
        """Get the text in ``[start, end)``."""
        ...

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        """Replace ``[start, end)`` with *text*."""
        ...


def _split_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


@dataclass
class BufferState:
    """Internal mutable state of the buffer."""

    lines: list[str] = field(default_factory=lambda: [""])
    cursor_line: int = 0
    cursor_col: int = 0


class TextBuffer:
    """Multi-line text buffer with a single cursor."""

    def __init__(self, text: str = "") -> None:
        self._state = BufferState()
        self.set_value(text)

    # -- Document interface --------------------------------------------------

    def get_value(self) -> str:
        return "\n".join(self._state.lines)

    def set_value(self, text: str) -> None:
        """Replace the text and put the cursor at the end of the last line."""
        self._state.lines = _split_lines(text)
        self._state.cursor_line = len(self._state.lines) - 1
        self._state.cursor_col = len(self._state.lines[-1])

    def get_cursor(self) -> Position:
        return Position(self._state.cursor_line, self._state.cursor_col)

    def set_cursor(self, pos: Position) -> None:
        line = max(0, min(pos.line, len(self._state.lines) - 1))
        self._state.cursor_line = line
        self._state.cursor_col = max(0, min(pos.ch, len(self._state.lines[line])))

    def line_count(self) -> int:
        return len(self._state.lines)

    def get_line(self, line: int) -> str:
        if 0 <= line < len(self._state.lines):
            return self._state.lines[line]
        return ""

    def last_line(self) -> int:
        return len(self._state.lines) - 1

    def get_lines(self) -> list[str]:
        return list(self._state.lines)

    def _offset(self, pos: Position) -> int:
        lines = self._state.lines
        line = max(0, min(pos.line, len(lines) - 1))
        offset = sum(len(lines[i]) + 1 for i in range(line))
        return offset + max(0, min(pos.ch, len(lines[line])))

    def _position(self, offset: int) -> Position:
        for i, line in enumerate(self._state.lines):
            if offset <= len(line):
                return Position(i, offset)
            offset -= len(line) + 1
        return Position(self.last_line(), len(self._state.lines[-1]))

    def get_range(self, start: Position, end: Position) -> str:
        return self.get_value()[self._offset(start) : self._offset(end)]

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        """Replace ``[start, end)``; the cursor lands after the inserted text."""
        value = self.get_value()
        begin = self._offset(start)
        finish = max(begin, self._offset(end))
        normalized = text.replace("\r\n", "\n").replace("\r", "\n")
        self._state.lines = _split_lines(value[:begin] + normalized + value[finish:])
        cursor = self._position(begin + len(normalized))
        self._state.cursor_line = cursor.line
        self._state.cursor_col = cursor.ch

    # -- Editing primitives ---------------------------------------------------

    def insert_text(self, text: str) -> None:
        """Insert *text* at the cursor. Handles single and multi-line text."""
        if not text:
            return
        cursor = self.get_cursor()
        self.replace_range(text, cursor, cursor)

    def insert_newline(self) -> None:
        self.insert_text("\n")

    def delete_backward(self) -> None:
        """Delete the grapheme before the cursor, merging lines at column 0."""
        state = self._state
        if state.cursor_col > 0:
            line = state.lines[state.cursor_line]
            graphemes = list(_grapheme.graphemes(line[: state.cursor_col]))
            length = len(graphemes[-1]) if graphemes else 1
            state.lines[state.cursor_line] = (
                line[: state.cursor_col - length] + line[state.cursor_col :]
            )
            state.cursor_col -= length
        elif state.cursor_line > 0:
            previous = state.lines[state.cursor_line - 1]
            state.lines[state.cursor_line - 1] = previous + state.lines[state.cursor_line]
            del state.lines[state.cursor_line]
            state.cursor_line -= 1
            state.cursor_col = len(previous)

    def move_left(self) -> None:
        state = self._state
        if state.cursor_col > 0:
            before = state.lines[state.cursor_line][: state.cursor_col]
            graphemes = list(_grapheme.graphemes(before))
            state.cursor_col -= len(graphemes[-1]) if graphemes else 1
        elif state.cursor_line > 0:
            state.cursor_line -= 1
            state.cursor_col = len(state.lines[state.cursor_line])

    def move_right(self) -> None:
        state = self._state
        line = state.lines[state.cursor_line]
        if state.cursor_col < len(line):
            graphemes = list(_grapheme.graphemes(line[state.cursor_col :]))
            state.cursor_col += len(graphemes[0]) if graphemes else 1
        elif state.cursor_line < len(state.lines) - 1:
            state.cursor_line += 1
            state.cursor_col = 0

    def move_vertical(self, delta: int) -> None:
        """Move the cursor *delta* lines, keeping the column where possible."""
        target = self._state.cursor_line + delta
        if 0 <= target < len(self._state.lines):
            self.set_cursor(Position(target, self._state.cursor_col))

    def move_to_end(self) -> None:
        self.set_cursor(Position(self.last_line(), len(self._state.lines[-1])))
