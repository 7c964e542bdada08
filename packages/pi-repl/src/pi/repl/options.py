"""Configuration for the REPL editor."""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Mapping, Union

from pi.repl.completion import CandidateLike, Symbol
from pi.repl.decisions import (
    default_should_eval,
    default_should_go_down,
    default_should_go_up,
)
from pi.repl.document import Document
from pi.repl.validators import SourceValidator, is_balanced_form
from pi.repl.words import WordCharPredicate, default_word_char

if TYPE_CHECKING:
    from pi.repl.events import Enter

CompleteWord = Callable[[str], Union[Iterable[CandidateLike], Awaitable[Iterable[CandidateLike]]]]
GetDocs = Callable[[Any], Union[str, None, Awaitable[Union[str, None]]]]
ShouldEval = Callable[[str, Document, "Enter"], bool]
ShouldNavigate = Callable[[str, Document], bool]


def is_symbol(value: Any) -> bool:
    return isinstance(value, Symbol)


@dataclass
class ReplEditorOptions:
    """Options recognised by ``ReplEditor`` and ``EventRouter``.

    ``style`` and ``surface_options`` are passed through untouched for the
    host's presentation layer. Unset decision hooks fall back to the default
    cursor/validity rules, with ``is_valid_source`` deciding validity.
    """

    style: Mapping[str, Any] = field(default_factory=dict)
    on_change: Callable[[str], None] | None = None
    on_eval: Callable[[str], None] | None = None
    on_up: Callable[[], None] | None = None
    on_down: Callable[[], None] | None = None
    complete_word: CompleteWord | None = None
    get_docs: GetDocs | None = None
    should_go_up: ShouldNavigate | None = None
    should_go_down: ShouldNavigate | None = None
    should_eval: ShouldEval | None = None
    is_valid_source: SourceValidator = is_balanced_form
    is_word_char: WordCharPredicate = default_word_char
    is_symbol: Callable[[Any], bool] = is_symbol
    surface_options: Mapping[str, Any] = field(default_factory=dict)
    on_editor_init: Callable[[Any], None] | None = None
    completion_max_visible: int = 8

    def __post_init__(self) -> None:
        if self.should_eval is None:
            self.should_eval = functools.partial(
                default_should_eval, is_valid=self.is_valid_source
            )
        if self.should_go_up is None:
            self.should_go_up = default_should_go_up
        if self.should_go_down is None:
            self.should_go_down = default_should_go_down

        max_visible = self.completion_max_visible
        if not math.isfinite(max_visible):
            max_visible = 8
        self.completion_max_visible = max(3, min(20, int(max_visible)))
