"""ReplEditor component: a terminal code editor that knows how to be a REPL.

Wraps a ``TextBuffer`` with an ``EventRouter``: Tab cycles completions for
the word at the cursor, Enter submits when the source is complete, and
Up/Down browse history from the first/last line. Keys the router does not
consume fall back to plain editing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable

from pi.repl.components.completion_list import CompletionList, CompletionListTheme
from pi.repl.components.docs_view import DocsView
from pi.repl.document import TextBuffer
from pi.repl.events import Down, EditorEvent, Enter, OtherKey, Tab, Up
from pi.repl.keys import (
    PASTE_END,
    PASTE_START,
    clean_paste,
    event_from_terminal,
    is_pasted_text,
    is_printable_input,
    parse_key,
)
from pi.repl.options import ReplEditorOptions
from pi.repl.router import EventRouter
from pi.repl.utils import visible_width

if TYPE_CHECKING:
    from pi.repl.session import ReplSession

logger = logging.getLogger(__name__)

TAB_TEXT = "  "


def _cancel(task: asyncio.Task[Any] | None) -> None:
    if task is not None and not task.done():
        task.cancel()


def _cursor_block(char: str) -> str:
    return f"\x1b[7m{char}\x1b[27m"


class ReplEditor:
    """Multi-line REPL input with completion cycling and history gating.

    Implements the component interface (``render``, ``handle_input``,
    ``invalidate``, ``focused``).
    """

    def __init__(
        self,
        options: ReplEditorOptions | None = None,
        value: str = "",
        *,
        prompt: str | Callable[[], str] = "> ",
        completion_theme: CompletionListTheme | None = None,
        show_completions: bool = True,
        show_docs: bool = True,
        request_render: Callable[[], None] | None = None,
    ) -> None:
        self._options = options if options is not None else ReplEditorOptions()
        self._buffer = TextBuffer(value)
        self._router = EventRouter(self._options)
        self._external_value = value
        self._prompt = prompt

        self._completion_list = CompletionList(
            self._options.completion_max_visible, completion_theme
        )
        self._docs_view = DocsView()
        self._show_completions = show_completions
        self._show_docs = show_docs
        self._request_render = request_render
        self._pending_refresh: asyncio.Task[Any] | None = None
        self._pending_docs: asyncio.Task[Any] | None = None

        # Bracketed paste mode buffering
        self._paste_buffer: str = ""
        self._is_in_paste: bool = False

        self.focused: bool = False

        if self._options.on_editor_init is not None:
            self._options.on_editor_init(self)

    # -- Accessors -------------------------------------------------------------

    @property
    def buffer(self) -> TextBuffer:
        return self._buffer

    @property
    def router(self) -> EventRouter:
        return self._router

    @property
    def options(self) -> ReplEditorOptions:
        return self._options

    def get_value(self) -> str:
        return self._buffer.get_value()

    def set_value(self, value: str) -> None:
        """Adopt an externally supplied value, moving the cursor to the end."""
        self._external_value = value
        if value != self._buffer.get_value():
            self._buffer.set_value(value)
            self._buffer.move_to_end()

    # -- Input -----------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        # Bracketed paste mode
        if PASTE_START in data:
            self._is_in_paste = True
            self._paste_buffer = ""
            data = data.replace(PASTE_START, "")

        if self._is_in_paste:
            self._paste_buffer += data
            end_index = self._paste_buffer.find(PASTE_END)
            if end_index == -1:
                return
            pasted = clean_paste(self._paste_buffer[:end_index])
            remaining = self._paste_buffer[end_index + len(PASTE_END) :]
            self._is_in_paste = False
            self._paste_buffer = ""
            if pasted:
                self._handle_event(OtherKey(pasted), pasted)
            if remaining:
                self.handle_input(remaining)
            return

        event = event_from_terminal(data)
        if event is None:
            return
        if is_pasted_text(data):
            data = clean_paste(data)
            event = OtherKey(data)
        self._handle_event(event, data)

    def _handle_event(self, event: EditorEvent, data: str) -> None:
        before = self._buffer.get_value()
        self._router.handle(event, self._buffer, lambda: self._default_action(event, data))
        self._sync_views()

        if self._router.has_async_completions and isinstance(event, (Up, Down, OtherKey)):
            self._schedule_refresh()

        if self._buffer.get_value() != before:
            self._router.notify_change(self._buffer, self._external_value)

    def _default_action(self, event: EditorEvent, data: str) -> None:
        buf = self._buffer
        if isinstance(event, Tab):
            if not event.shift:
                buf.insert_text(TAB_TEXT)
        elif isinstance(event, Enter):
            buf.insert_newline()
        elif isinstance(event, Up):
            buf.move_vertical(-1)
        elif isinstance(event, Down):
            buf.move_vertical(1)
        elif isinstance(event, OtherKey):
            if is_printable_input(data) or "\n" in data:
                buf.insert_text(data)
                return
            key = parse_key(data)
            if key in ("backspace", "shift+backspace"):
                buf.delete_backward()
            elif key == "left":
                buf.move_left()
            elif key == "right":
                buf.move_right()

    def _sync_views(self) -> None:
        self._completion_list.set_state(self._router.state)
        # Any in-flight lookup was started for an older key.
        _cancel(self._pending_refresh)
        _cancel(self._pending_docs)
        if not self._router.has_async_docs:
            self._docs_view.set_docs(self._router.lookup_docs())
        elif self._router.state is None:
            self._docs_view.set_docs(None)
        else:
            self._schedule_docs()

    def _schedule_refresh(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; async completions skipped")
            return
        _cancel(self._pending_refresh)
        self._pending_refresh = loop.create_task(self.refresh_completions())

    def _schedule_docs(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; async docs skipped")
            return
        _cancel(self._pending_docs)
        self._pending_docs = loop.create_task(self.refresh_docs())

    async def refresh_docs(self) -> None:
        """Fetch docs for the candidate under the completion pointer."""
        self._docs_view.set_docs(await self._router.lookup_docs_async())
        if self._request_render is not None:
            self._request_render()

    async def refresh_completions(self) -> None:
        """Fetch completions (and docs) for the word at the cursor."""
        await self._router.refresh_async(self._buffer)
        docs = await self._router.lookup_docs_async()
        self._completion_list.set_state(self._router.state)
        self._docs_view.set_docs(docs)
        if self._request_render is not None:
            self._request_render()

    # -- Rendering -------------------------------------------------------------

    def invalidate(self) -> None:
        self._completion_list.invalidate()
        self._docs_view.invalidate()

    def _prompt_text(self) -> str:
        return self._prompt() if callable(self._prompt) else self._prompt

    def render(self, width: int) -> list[str]:
        prompt = self._prompt_text()
        if prompt and not prompt.endswith(" "):
            prompt += " "
        indent = " " * visible_width(prompt)
        cursor = self._buffer.get_cursor()

        lines: list[str] = []
        for i, line in enumerate(self._buffer.get_lines()):
            if self.focused and i == cursor.line:
                at = line[cursor.ch : cursor.ch + 1] or " "
                line = line[: cursor.ch] + _cursor_block(at) + line[cursor.ch + 1 :]
            lines.append((prompt if i == 0 else indent) + line)

        content_width = max(1, width)
        if self._show_completions:
            lines.extend(self._completion_list.render(content_width))
        if self._show_docs:
            lines.extend(self._docs_view.render(content_width))
        return lines


def create_session_editor(
    session: ReplSession,
    options: ReplEditorOptions | None = None,
    **kwargs: Any,
) -> ReplEditor:
    """Build a ``ReplEditor`` wired to *session*'s history and evaluator.

    Any ``on_eval``/``on_up``/``on_down``/``on_change`` already set on
    *options* are replaced.
    """
    opts = options if options is not None else ReplEditorOptions()
    editor_ref: list[ReplEditor] = []

    def show_current() -> None:
        editor_ref[0].set_value(session.text)

    def on_eval(text: str) -> None:
        session.submit(text)
        show_current()

    def on_up() -> None:
        session.go_up()
        show_current()

    def on_down() -> None:
        session.go_down()
        show_current()

    def on_change(text: str) -> None:
        session.set_text(text)
        show_current()

    opts.on_eval = on_eval
    opts.on_up = on_up
    opts.on_down = on_down
    opts.on_change = on_change

    editor = ReplEditor(opts, session.text, prompt=session.prompt, **kwargs)
    editor_ref.append(editor)
    return editor
