"""Terminal text utilities: width measurement, truncation and wrapping."""

from __future__ import annotations

import re

import grapheme
import wcwidth as _wcwidth

_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def strip_ansi(text: str) -> str:
    return _SGR_RE.sub("", text)


def _grapheme_width(g: str) -> int:
    """Display width of one grapheme cluster (emoji sequences count as 2)."""
    if not g:
        return 0
    if len(g) > 1 and ("\u200d" in g or "\ufe0f" in g):  # ZWJ sequence or VS16
        return 2
    cp = ord(g[0])
    if cp < 0x20 or 0x7F <= cp <= 0x9F:
        return 0
    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Visible terminal width of *text*, ignoring SGR codes. Tabs count as 3."""
    if not text:
        return 0
    stripped = strip_ansi(text).replace("\t", "   ")
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached
    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


def _take_columns(text: str, max_cols: int) -> str:
    """Longest prefix of *text* fitting *max_cols*; SGR codes are kept."""
    result: list[str] = []
    cols = 0
    i = 0
    while i < len(text):
        m = _SGR_RE.match(text, i)
        if m:
            result.append(m.group(0))
            i = m.end()
            continue
        g = next(grapheme.graphemes(text[i:]))
        w = _grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
        i += len(g)
    return "".join(result)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to *max_width* columns, appending *ellipsis* if cut."""
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        return text + " " * (max_width - text_width) if pad else text

    target_width = max_width - visible_width(ellipsis)
    if target_width <= 0:
        return _take_columns(ellipsis, max_width)

    result = _take_columns(text, target_width) + ellipsis
    if pad:
        result += " " * max(0, max_width - visible_width(result))
    return result


def wrap_words(text: str, width: int) -> list[str]:
    """Word-wrap plain *text* to *width* columns.

    Each physical line is wrapped separately. Words wider than *width* are
    broken at grapheme boundaries.
    """
    if width <= 0:
        return [text]

    lines: list[str] = []
    for physical in text.split("\n"):
        current = ""
        for word in physical.split(" "):
            candidate = f"{current} {word}" if current else word
            if visible_width(candidate) <= width:
                current = candidate
                continue
            if current:
                lines.append(current)
            while visible_width(word) > width:
                head = _take_columns(word, width) or next(grapheme.graphemes(word))
                lines.append(head)
                word = word[len(head) :]
            current = word
        lines.append(current)
    return lines
