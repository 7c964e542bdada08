"""Locate the "current word" under the cursor.

Word characters are decided by a predicate handed to ``WordLocator``. The
default rule treats everything except whitespace, brackets, comma, backtick
and quote as part of a word, which suits Lisp-style symbols such as
``clojure.string/join`` or ``swap!``.
"""

from __future__ import annotations

import re
from typing import Callable

from pi.repl.document import Document, Position, Span

WordCharPredicate = Callable[[str], bool]

LISP_WORD_CHARS = re.compile(r"[^\s\(\)\[\]\{\},`']")

_NON_WORD_CHARS = frozenset("()[]{},`'")


def default_word_char(char: str) -> bool:
    """Return ``True`` if *char* can be part of a word."""
    return bool(char) and not char.isspace() and char not in _NON_WORD_CHARS


def word_chars_from_pattern(pattern: str | re.Pattern[str]) -> WordCharPredicate:
    """Build a predicate from a regex matching one word character."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

    def is_word_char(char: str) -> bool:
        return bool(char) and compiled.fullmatch(char) is not None

    return is_word_char


class WordLocator:
    """Finds the span of the word that ends at (or surrounds) the cursor."""

    def __init__(self, is_word_char: WordCharPredicate | None = None) -> None:
        self._is_word_char = is_word_char or default_word_char

    def is_word_char(self, char: str) -> bool:
        return self._is_word_char(char)

    def locate(self, cursor: Position, document: Document) -> Span:
        """Return the maximal run of word characters around *cursor*.

        The scan starts one character before the cursor. If that character is
        not a word character the span is empty and sits at the cursor.
        """
        line = document.get_line(cursor.line)
        ch = min(cursor.ch, len(line))
        if ch == 0 or not self._is_word_char(line[ch - 1]):
            return Span(Position(cursor.line, ch), Position(cursor.line, ch))

        start = ch - 1
        while start > 0 and self._is_word_char(line[start - 1]):
            start -= 1
        end = ch
        while end < len(line) and self._is_word_char(line[end]):
            end += 1
        return Span(Position(cursor.line, start), Position(cursor.line, end))

    def current_word(self, document: Document) -> tuple[Span, str]:
        """Locate the word at the document's cursor and return it with its text."""
        span = self.locate(document.get_cursor(), document)
        return span, document.get_range(span.start, span.end)
