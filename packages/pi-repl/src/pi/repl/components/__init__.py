"""pi-repl terminal components."""

from pi.repl.components.completion_list import CompletionList, CompletionListTheme
from pi.repl.components.docs_view import DocsView, render_markdown
from pi.repl.components.repl_editor import ReplEditor, create_session_editor

__all__ = [
    "CompletionList",
    "CompletionListTheme",
    "DocsView",
    "render_markdown",
    "ReplEditor",
    "create_session_editor",
]
