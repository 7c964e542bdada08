"""Key event router: owns the completion state and calls back into the host.

The router is a two-state machine. It is *idle* while there is no completion
state and *completing* while there is one. ``handle`` runs the key-down
decision (cycle, submit, history), lets the host apply its default editing
action when the key was not consumed, and then runs the key-up bookkeeping
(cancel, refresh candidates).

Completion and documentation sources may be coroutine functions. Those are
resolved through ``refresh_async`` / ``lookup_docs_async``; every request and
every handled key bumps a generation counter and a result is only applied if
no newer request or key arrived while it was in flight.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable

from pi.repl.completion import (
    CompletionState,
    cycle_completions,
    normalize_candidates,
    start_completion,
    state_from_candidates,
)
from pi.repl.document import Document
from pi.repl.events import (
    Cancel,
    Down,
    EditorEvent,
    Enter,
    OtherKey,
    ShowAllModifier,
    Tab,
    Up,
)
from pi.repl.options import ReplEditorOptions
from pi.repl.words import WordLocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResult:
    """Outcome of routing one key event.

    ``consumed`` means the host must suppress the key's default behaviour.
    """

    consumed: bool
    state: CompletionState | None


def _is_async_callable(fn: Callable[..., Any] | None) -> bool:
    return fn is not None and (
        inspect.iscoroutinefunction(fn)
        or inspect.iscoroutinefunction(getattr(fn, "__call__", None))
    )


class EventRouter:
    """Routes editor key events to completion, submit and history decisions."""

    def __init__(self, options: ReplEditorOptions | None = None) -> None:
        self._options = options if options is not None else ReplEditorOptions()
        self._locator = WordLocator(self._options.is_word_char)
        self._state: CompletionState | None = None
        self._generation = 0
        self._docs_generation = 0

    @property
    def options(self) -> ReplEditorOptions:
        return self._options

    @property
    def locator(self) -> WordLocator:
        return self._locator

    @property
    def state(self) -> CompletionState | None:
        return self._state

    @property
    def is_completing(self) -> bool:
        return self._state is not None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_async_completions(self) -> bool:
        return _is_async_callable(self._options.complete_word)

    @property
    def has_async_docs(self) -> bool:
        return _is_async_callable(self._options.get_docs)

    def clear(self) -> None:
        if self._state is not None:
            logger.debug("Completion cleared")
        self._state = None

    # -- Event handling ------------------------------------------------------

    def handle(
        self,
        event: EditorEvent,
        document: Document,
        default_action: Callable[[], None] | None = None,
    ) -> RouteResult:
        """Route *event* against *document*.

        *default_action* is the surface's own behaviour for the key (insert a
        character, move the cursor, ...); it only runs when the router did not
        consume the event.
        """
        self._generation += 1
        consumed = self._key_down(event, document)
        if not consumed and default_action is not None:
            default_action()
        self._key_up(event, document)
        return RouteResult(consumed=consumed, state=self._state)

    def _key_down(self, event: EditorEvent, document: Document) -> bool:
        opts = self._options

        if isinstance(event, Cancel):
            self.clear()
            return False

        if isinstance(event, ShowAllModifier):
            if event.shows_all and self._state is not None:
                self._state = replace(self._state, show_all=not event.released)
            return False

        if isinstance(event, Tab):
            new_state = cycle_completions(self._state, event.shift, document)
            if new_state is None:
                return False
            self._state = new_state
            logger.debug(
                "Cycled to position %d (active=%s)", new_state.position, new_state.active
            )
            return True

        if isinstance(event, Enter):
            source = document.get_value()
            if opts.should_eval(source, document, event):
                if opts.on_eval is not None:
                    opts.on_eval(source)
                return True
            return False

        if isinstance(event, Up):
            if not event.shift_key and opts.should_go_up(document.get_value(), document):
                if opts.on_up is not None:
                    opts.on_up()
                return True
            return False

        if isinstance(event, Down):
            if not event.shift_key and opts.should_go_down(document.get_value(), document):
                if opts.on_down is not None:
                    opts.on_down()
                return True
            return False

        return False

    def _key_up(self, event: EditorEvent, document: Document) -> None:
        if isinstance(event, (Cancel, Enter)):
            self.clear()
        elif isinstance(event, (Up, Down, OtherKey)):
            self.refresh(document)

    # -- Completion refresh --------------------------------------------------

    def refresh(self, document: Document) -> CompletionState | None:
        """Recompute the completion state for the word at the cursor.

        With a coroutine completion source the state is only cleared here;
        call ``refresh_async`` to fetch candidates.
        """
        if self.has_async_completions:
            self._state = None
            return None
        self._state = start_completion(self._options.complete_word, self._locator, document)
        return self._state

    async def refresh_async(self, document: Document) -> CompletionState | None:
        """Fetch candidates from a sync or async source, last request wins."""
        self._generation += 1
        generation = self._generation

        complete_word = self._options.complete_word
        span, text = self._locator.current_word(document)
        if complete_word is None or not text:
            self._state = None
            return None

        try:
            result = complete_word(text)
            if inspect.isawaitable(result):
                result = await result
            candidates = normalize_candidates(result)
        except Exception:
            logger.exception("Completion source failed for %r", text)
            candidates = ()

        if generation != self._generation:
            logger.debug("Discarding stale completions for %r", text)
            return self._state

        self._state = state_from_candidates(candidates, text, span.start, span.end)
        return self._state

    # -- Documentation -------------------------------------------------------

    def _doc_target(self) -> Any | None:
        state = self._state
        if state is None or self._options.get_docs is None:
            return None
        value = state.current.value
        if not self._options.is_symbol(value):
            return None
        return value

    def lookup_docs(self) -> str | None:
        """Documentation for the candidate the completion pointer is on."""
        value = self._doc_target()
        if value is None:
            return None
        try:
            docs = self._options.get_docs(value)
        except Exception:
            logger.exception("Documentation source failed for %r", value)
            return None
        if inspect.isawaitable(docs):
            close = getattr(docs, "close", None)
            if close is not None:
                close()
            logger.debug("Async documentation source needs lookup_docs_async")
            return None
        return docs

    async def lookup_docs_async(self) -> str | None:
        value = self._doc_target()
        if value is None:
            return None
        self._docs_generation += 1
        request = (self._generation, self._docs_generation)
        try:
            docs = self._options.get_docs(value)
            if inspect.isawaitable(docs):
                docs = await docs
        except Exception:
            logger.exception("Documentation source failed for %r", value)
            return None
        if request != (self._generation, self._docs_generation):
            logger.debug("Discarding stale docs for %r", value)
            return None
        return docs

    # -- Change notification -------------------------------------------------

    def notify_change(self, document: Document, external_value: str) -> bool:
        """Call ``on_change`` if the document diverged from *external_value*."""
        value = document.get_value()
        if value == external_value:
            return False
        if self._options.on_change is not None:
            self._options.on_change(value)
        return True
