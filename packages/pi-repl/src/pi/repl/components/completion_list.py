"""CompletionList component: one row of candidates, or a grid of all of them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pi.repl.completion import CompletionState
from pi.repl.utils import truncate_to_width, visible_width


def _reverse(text: str) -> str:
    return f"\x1b[7m{text}\x1b[27m"


def _underline(text: str) -> str:
    return f"\x1b[4m{text}\x1b[24m"


def _dim(text: str) -> str:
    return f"\x1b[2m{text}\x1b[22m"


@dataclass
class CompletionListTheme:
    active: Callable[[str], str] = _reverse
    selected: Callable[[str], str] = _underline
    empty: Callable[[str], str] = _dim
    more: Callable[[str], str] = _dim


class CompletionList:
    """Renders the candidates of a completion state.

    The candidate the pointer is on is drawn with ``theme.active`` when it is
    substituted into the document, and with ``theme.selected`` otherwise.
    """

    SEPARATOR = "  "
    EMPTY_TEXT = "(no completions)"

    def __init__(
        self,
        max_rows: int = 8,
        theme: CompletionListTheme | None = None,
    ) -> None:
        self._state: CompletionState | None = None
        self._max_rows = max(1, max_rows)
        self._theme = theme or CompletionListTheme()

    def set_state(self, state: CompletionState | None) -> None:
        self._state = state

    def invalidate(self) -> None:
        pass

    def _styled(self, index: int, width: int) -> str:
        state = self._state
        assert state is not None
        label = truncate_to_width(state.candidates[index].display, width, "…")
        if index != state.position:
            return label
        return self._theme.active(label) if state.active else self._theme.selected(label)

    def render(self, width: int) -> list[str]:
        state = self._state
        if state is None:
            return [self._theme.empty(truncate_to_width(self.EMPTY_TEXT, width, ""))]
        if state.show_all:
            return self._render_grid(width)
        return [self._render_row(width)]

    def _render_row(self, width: int) -> str:
        """Single row scrolled so that the pointed-at candidate is visible."""
        state = self._state
        assert state is not None
        sep_width = len(self.SEPARATOR)

        # Walk back from the pointer while everything still fits.
        first = state.position
        used = visible_width(state.current.display)
        while first > 0:
            needed = visible_width(state.candidates[first - 1].display) + sep_width
            if used + needed > width // 2:
                break
            used += needed
            first -= 1

        parts: list[str] = []
        remaining = width
        for i in range(first, state.count):
            label_width = visible_width(state.candidates[i].display)
            if parts:
                remaining -= sep_width
            if remaining <= 0:
                break
            parts.append(self._styled(i, remaining))
            remaining -= min(label_width, remaining)
        return self.SEPARATOR.join(parts)

    def _render_grid(self, width: int) -> list[str]:
        state = self._state
        assert state is not None
        rows: list[list[int]] = [[]]
        row_width = 0
        for i, candidate in enumerate(state.candidates):
            w = min(visible_width(candidate.display), width)
            extra = w + (len(self.SEPARATOR) if rows[-1] else 0)
            if rows[-1] and row_width + extra > width:
                rows.append([])
                row_width = 0
                extra = w
            rows[-1].append(i)
            row_width += extra

        lines = [
            self.SEPARATOR.join(self._styled(i, width) for i in row)
            for row in rows[: self._max_rows]
        ]
        hidden = sum(len(row) for row in rows[self._max_rows :])
        if hidden:
            lines.append(self._theme.more(truncate_to_width(f"({hidden} more)", width, "")))
        return lines
