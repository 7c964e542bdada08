"""REPL session model: submitted items, in-memory history and evaluation.

History is a list whose newest entry is the live draft being edited.
``hist_pos`` counts back from that draft, so ``0`` means "editing the
draft" and ``len(history) - 1`` is the oldest entry. Nothing is persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal

logger = logging.getLogger(__name__)

ItemKind = Literal["input", "output", "error", "log"]
ResultCallback = Callable[[bool, Any], None]
Execute = Callable[[str, ResultCallback], None]

CLEAR_COMMAND = ":clear"


@dataclass(frozen=True)
class ReplItem:
    """One entry in the REPL transcript."""

    kind: ItemKind
    value: Any = None
    num: int | None = None


class ReplSession:
    """Holds the transcript and history for one REPL."""

    def __init__(
        self,
        execute: Execute,
        initial_history: list[str] | None = None,
    ) -> None:
        self._execute = execute
        self._items: list[ReplItem] = []
        self._history: list[str] = list(initial_history) if initial_history else [""]
        self._hist_pos = 0

    # -- Accessors -------------------------------------------------------------

    @property
    def items(self) -> list[ReplItem]:
        return list(self._items)

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def hist_pos(self) -> int:
        return self._hist_pos

    @property
    def text(self) -> str:
        return self._history[-1 - self._hist_pos]

    def prompt(self) -> str:
        return f"[{self._hist_pos + 1}/{len(self._history)}]>"

    # -- History ---------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Write *text* into the history slot currently shown."""
        self._history[-1 - self._hist_pos] = text

    def go_up(self) -> None:
        if self._hist_pos < len(self._history) - 1:
            self._hist_pos += 1

    def go_down(self) -> None:
        if self._hist_pos > 0:
            self._hist_pos -= 1

    # -- Transcript ------------------------------------------------------------

    def add_input(self, text: str) -> None:
        self._items.append(ReplItem(kind="input", value=text, num=len(self._history)))
        self._history.append("")
        self._hist_pos = 0

    def add_result(self, is_error: bool, value: Any) -> None:
        self._items.append(ReplItem(kind="error" if is_error else "output", value=value))

    def add_log(self, value: Any) -> None:
        self._items.append(ReplItem(kind="log", value=value))

    def clear_items(self) -> None:
        self._items = []

    # -- Submission ------------------------------------------------------------

    def submit(self, text: str) -> None:
        """Record *text* as input and hand it to the evaluator.

        ``:clear`` empties the transcript instead; blank input is ignored.
        """
        trimmed = text.strip()
        if trimmed == CLEAR_COMMAND:
            self.clear_items()
            self.set_text("")
            return
        if not trimmed:
            return

        # Submitting from an older entry still lands in the draft slot.
        self._hist_pos = 0
        self.set_text(text)
        self.add_input(text)
        try:
            self._execute(text, lambda ok, value: self.add_result(not ok, value))
        except Exception as exc:
            logger.exception("Evaluator raised for %r", text)
            self.add_result(True, exc)
