"""Tab completion: candidates, completion state, and the cycling engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Union

from pi.repl.document import Document, Position
from pi.repl.words import WordLocator

logger = logging.getLogger(__name__)


class Symbol(str):
    """Marks a candidate value as a symbol with documentation."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


@dataclass(frozen=True)
class Candidate:
    """A single completion option."""

    value: Any
    display: str
    match_text: str


CandidateLike = Union[Candidate, tuple, str]
CompletionSource = Callable[[str], Iterable[CandidateLike]]


def to_candidate(item: CandidateLike) -> Candidate:
    """Normalise a ``Candidate``, ``(value, display, match_text)`` tuple or string."""
    if isinstance(item, Candidate):
        return item
    if isinstance(item, str):
        return Candidate(value=item, display=item, match_text=item)
    if isinstance(item, tuple) and len(item) == 3:
        value, display, match_text = item
        return Candidate(value=value, display=str(display), match_text=str(match_text))
    raise TypeError(f"Cannot use {item!r} as a completion candidate")


def normalize_candidates(items: Iterable[CandidateLike] | None) -> tuple[Candidate, ...]:
    if items is None:
        return ()
    return tuple(to_candidate(item) for item in items)


@dataclass(frozen=True)
class CompletionState:
    """An in-progress completion session.

    The document text in ``[start, end)`` is ``initial_text`` while inactive
    and ``candidates[position].match_text`` while active.
    """

    candidates: tuple[Candidate, ...]
    initial_text: str
    start: Position
    end: Position
    position: int = 0
    active: bool = False
    show_all: bool = False

    def __post_init__(self) -> None:
        if not self.candidates:
            raise ValueError("CompletionState needs at least one candidate")
        if not 0 <= self.position < len(self.candidates):
            raise ValueError(
                f"position {self.position} out of range for {len(self.candidates)} candidates"
            )

    @property
    def count(self) -> int:
        return len(self.candidates)

    @property
    def initial_active(self) -> bool:
        """Whether the first candidate is exactly what the user typed."""
        return self.initial_text == self.candidates[0].match_text

    @property
    def current(self) -> Candidate:
        return self.candidates[self.position]

    @property
    def displayed_text(self) -> str:
        return self.current.match_text if self.active else self.initial_text

    def can_cycle(self) -> bool:
        return self.count > 1 or not self.initial_active


def cycle_position(
    count: int, current: int, go_back: bool, initial_active: bool
) -> tuple[bool, int]:
    """Step an active pointer through *count* candidates.

    Returns ``(active, position)``. Running off either end wraps to the other
    end when *initial_active*, otherwise it lands inactive at position 0 so the
    user's original text is shown again.
    """
    if go_back:
        if current <= 0:
            return (True, count - 1) if initial_active else (False, 0)
        return True, current - 1
    if current >= count - 1:
        return (True, 0) if initial_active else (False, 0)
    return True, current + 1


def cycle_completions(
    state: CompletionState | None, go_back: bool, document: Document
) -> CompletionState | None:
    """Move to the next (or previous) candidate and write it into *document*.

    Returns ``None`` when there is nothing to cycle through; the caller should
    then let the key through untouched.
    """
    if state is None or not state.can_cycle():
        return None

    if state.active:
        active, position = cycle_position(
            state.count, state.position, go_back, state.initial_active
        )
    else:
        active, position = True, (state.count - 1 if go_back else state.position)

    text = state.candidates[position].match_text if active else state.initial_text
    document.replace_range(text, state.start, state.end)
    return replace(
        state,
        position=position,
        active=active,
        end=Position(state.start.line, state.start.ch + len(text)),
    )


def start_completion(
    complete_word: CompletionSource | None,
    locator: WordLocator,
    document: Document,
) -> CompletionState | None:
    """Build a fresh completion state for the word at the cursor."""
    if complete_word is None:
        return None
    span, text = locator.current_word(document)
    if not text:
        return None
    try:
        candidates = normalize_candidates(complete_word(text))
    except Exception:
        logger.exception("Completion source failed for %r", text)
        return None
    return state_from_candidates(candidates, text, span.start, span.end)


def state_from_candidates(
    candidates: tuple[Candidate, ...],
    text: str,
    start: Position,
    end: Position,
) -> CompletionState | None:
    if not candidates:
        return None
    return CompletionState(
        candidates=candidates,
        initial_text=text,
        start=start,
        end=end,
        active=candidates[0].match_text == text,
    )
