"""pi-repl: REPL input editing with completion cycling and submit/history gating."""

# Completion
from pi.repl.completion import (
    Candidate,
    CompletionState,
    Symbol,
    cycle_completions,
    cycle_position,
    start_completion,
)

# Components
from pi.repl.components import (
    CompletionList,
    CompletionListTheme,
    DocsView,
    ReplEditor,
    create_session_editor,
)

# Decisions
from pi.repl.decisions import should_go_down, should_go_up, should_submit

# Documents
from pi.repl.document import Document, Position, Span, TextBuffer

# Events and keys
from pi.repl.events import (
    Cancel,
    Down,
    EditorEvent,
    Enter,
    OtherKey,
    ShowAllModifier,
    Tab,
    Up,
    event_from_key_code,
)
from pi.repl.keys import event_from_terminal, parse_key

# Configuration
from pi.repl.options import ReplEditorOptions

# Router
from pi.repl.router import EventRouter, RouteResult

# Session
from pi.repl.session import ReplItem, ReplSession

# Validators
from pi.repl.validators import is_balanced_form, is_valid_python, safe_validator

# Words
from pi.repl.words import WordLocator, default_word_char, word_chars_from_pattern

__all__ = [
    # Completion
    "Candidate",
    "CompletionState",
    "Symbol",
    "cycle_completions",
    "cycle_position",
    "start_completion",
    # Components
    "CompletionList",
    "CompletionListTheme",
    "DocsView",
    "ReplEditor",
    "create_session_editor",
    # Decisions
    "should_go_down",
    "should_go_up",
    "should_submit",
    # Documents
    "Document",
    "Position",
    "Span",
    "TextBuffer",
    # Events and keys
    "Cancel",
    "Down",
    "EditorEvent",
    "Enter",
    "OtherKey",
    "ShowAllModifier",
    "Tab",
    "Up",
    "event_from_key_code",
    "event_from_terminal",
    "parse_key",
    # Configuration
    "ReplEditorOptions",
    # Router
    "EventRouter",
    "RouteResult",
    # Session
    "ReplItem",
    "ReplSession",
    # Validators
    "is_balanced_form",
    "is_valid_python",
    "safe_validator",
    # Words
    "WordLocator",
    "default_word_char",
    "word_chars_from_pattern",
]
