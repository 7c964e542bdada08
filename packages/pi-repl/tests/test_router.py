"""Tests for pi.repl.router -- key routing against a text buffer."""

from __future__ import annotations

import logging

import pytest

from pi.repl.completion import Symbol
from pi.repl.document import Position, TextBuffer
from pi.repl.events import Cancel, Down, Enter, OtherKey, ShowAllModifier, Tab, Up
from pi.repl.options import ReplEditorOptions
from pi.repl.router import EventRouter
from pi.repl.validators import is_valid_python

WORDS = ["map", "mapcat", "mapv", "max", "min"]


def prefix_source(text: str) -> list[str]:
    return [w for w in WORDS if w.startswith(text)]


def make_router(**kwargs) -> EventRouter:
    kwargs.setdefault("complete_word", prefix_source)
    return EventRouter(ReplEditorOptions(**kwargs))


def typed(router: EventRouter, text: str) -> TextBuffer:
    """Buffer holding *text* after the router saw the last keystroke."""
    buf = TextBuffer(text)
    router.handle(OtherKey(text[-1:] or "x"), buf)
    return buf


class TestCompletionLifecycle:
    def test_typing_starts_completion(self) -> None:
        router = make_router()
        typed(router, "(ma")
        assert router.is_completing
        assert router.state is not None
        assert [c.match_text for c in router.state.candidates] == ["map", "mapcat", "mapv", "max"]

    def test_tab_cycles_and_wraps_to_typed_text(self) -> None:
        router = make_router(complete_word=lambda t: ["map", "mapcat"])
        buf = typed(router, "(ma")

        seen = []
        for _ in range(3):
            result = router.handle(Tab(), buf)
            assert result.consumed
            seen.append(buf.get_value())
        assert seen == ["(map", "(mapcat", "(ma"]

    def test_shift_tab_cycles_backwards(self) -> None:
        router = make_router(complete_word=lambda t: ["map", "mapcat"])
        buf = typed(router, "(ma")
        router.handle(Tab(shift=True), buf)
        assert buf.get_value() == "(mapcat"

    def test_tab_without_state_is_not_consumed(self) -> None:
        router = make_router()
        buf = TextBuffer("(")
        inserted = []
        result = router.handle(Tab(), buf, lambda: inserted.append("tab"))
        assert not result.consumed
        assert inserted == ["tab"]

    def test_noop_tab_keeps_state(self) -> None:
        router = make_router(complete_word=lambda t: [t])
        buf = typed(router, "(inc")
        state = router.state
        result = router.handle(Tab(), buf)
        assert not result.consumed
        assert router.state is state
        assert buf.get_value() == "(inc"

    def test_cancel_clears_without_touching_document(self) -> None:
        router = make_router()
        buf = typed(router, "(ma")
        router.handle(Tab(), buf)
        result = router.handle(Cancel(), buf)
        assert not result.consumed
        assert result.state is None
        assert buf.get_value() == "(map"

    def test_typing_after_cycle_restarts_from_new_word(self) -> None:
        router = make_router()
        buf = typed(router, "(ma")
        router.handle(Tab(), buf)
        buf.insert_text("v")
        router.handle(OtherKey("v"), buf)
        assert router.state is not None
        assert router.state.initial_text == "mapv"
        assert router.state.active

    def test_cursor_after_delimiter_clears_state(self) -> None:
        router = make_router()
        buf = typed(router, "(ma")
        buf.insert_text(" ")
        router.handle(OtherKey(" "), buf)
        assert router.state is None


class TestShowAll:
    def test_modifier_press_and_release(self) -> None:
        router = make_router()
        buf = typed(router, "(ma")
        router.handle(ShowAllModifier(18), buf)
        assert router.state is not None and router.state.show_all
        router.handle(ShowAllModifier(18, released=True), buf)
        assert router.state is not None and not router.state.show_all

    def test_shift_does_not_show_all(self) -> None:
        router = make_router()
        buf = typed(router, "(ma")
        router.handle(ShowAllModifier(16), buf)
        assert router.state is not None and not router.state.show_all

    def test_modifier_without_state_is_ignored(self) -> None:
        router = make_router()
        result = router.handle(ShowAllModifier(17), TextBuffer(""))
        assert result.state is None
        assert not result.consumed


class TestEnter:
    def test_complete_form_submits(self) -> None:
        submitted: list[str] = []
        router = make_router(on_eval=submitted.append)
        buf = typed(router, "(max 1 2)")
        fallback: list[str] = []
        result = router.handle(Enter(), buf, lambda: fallback.append("newline"))
        assert result.consumed
        assert submitted == ["(max 1 2)"]
        assert fallback == []
        assert router.state is None

    def test_shift_enter_falls_through(self) -> None:
        submitted: list[str] = []
        router = make_router(on_eval=submitted.append)
        buf = TextBuffer("(max 1 2)")
        result = router.handle(Enter(shift_key=True), buf, buf.insert_newline)
        assert not result.consumed
        assert submitted == []
        assert buf.get_value() == "(max 1 2)\n"

    def test_incomplete_form_falls_through(self) -> None:
        submitted: list[str] = []
        router = make_router(on_eval=submitted.append)
        buf = TextBuffer("(max 1")
        assert not router.handle(Enter(), buf).consumed
        assert submitted == []

    def test_meta_enter_submits_incomplete_form(self) -> None:
        submitted: list[str] = []
        router = make_router(on_eval=submitted.append)
        assert router.handle(Enter(meta_key=True), TextBuffer("(max 1")).consumed
        assert submitted == ["(max 1"]

    def test_enter_clears_completion_even_when_not_submitting(self) -> None:
        router = make_router()
        buf = typed(router, "(ma")
        router.handle(Enter(shift_key=True), buf, buf.insert_newline)
        assert router.state is None

    def test_custom_validator(self) -> None:
        submitted: list[str] = []
        router = make_router(on_eval=submitted.append, is_valid_source=is_valid_python)
        assert router.handle(Enter(), TextBuffer("x = [1, 2]")).consumed
        assert not router.handle(Enter(), TextBuffer("x = [1,")).consumed
        assert submitted == ["x = [1, 2]"]

    def test_custom_should_eval(self) -> None:
        submitted: list[str] = []
        router = make_router(on_eval=submitted.append, should_eval=lambda src, doc, ev: True)
        assert router.handle(Enter(), TextBuffer("((")).consumed
        assert submitted == ["(("]


class TestHistoryKeys:
    def test_up_on_first_line(self) -> None:
        calls: list[str] = []
        router = make_router(on_up=lambda: calls.append("up"))
        buf = TextBuffer("a\nb")
        buf.set_cursor(Position(0, 0))
        moved: list[str] = []
        assert router.handle(Up(), buf, lambda: moved.append("cursor")).consumed
        assert calls == ["up"]
        assert moved == []

    def test_up_off_first_line_moves_cursor(self) -> None:
        calls: list[str] = []
        router = make_router(on_up=lambda: calls.append("up"))
        buf = TextBuffer("a\nb")
        assert not router.handle(Up(), buf, lambda: buf.move_vertical(-1)).consumed
        assert calls == []
        assert buf.get_cursor().line == 0

    def test_down_on_last_line(self) -> None:
        calls: list[str] = []
        router = make_router(on_down=lambda: calls.append("down"))
        assert router.handle(Down(), TextBuffer("a\nb")).consumed
        assert calls == ["down"]

    def test_shift_suppresses_history(self) -> None:
        calls: list[str] = []
        router = make_router(on_up=lambda: calls.append("up"), on_down=lambda: calls.append("down"))
        buf = TextBuffer("abc")
        assert not router.handle(Up(shift_key=True), buf).consumed
        assert not router.handle(Down(shift_key=True), buf).consumed
        assert calls == []

    def test_custom_should_go_up(self) -> None:
        calls: list[str] = []
        router = make_router(on_up=lambda: calls.append("up"), should_go_up=lambda src, doc: False)
        assert not router.handle(Up(), TextBuffer("abc")).consumed
        assert calls == []

    def test_missing_callback_still_consumes(self) -> None:
        router = make_router()
        assert router.handle(Up(), TextBuffer("abc")).consumed


class TestFailSoft:
    def test_failing_source_gives_no_state(self, caplog: pytest.LogCaptureFixture) -> None:
        def source(text: str) -> list[str]:
            raise KeyError(text)

        router = make_router(complete_word=source)
        with caplog.at_level(logging.ERROR, logger="pi.repl.completion"):
            typed(router, "(ma")
        assert router.state is None
        assert "Completion source failed" in caplog.text

    def test_empty_fragment_is_not_queried(self) -> None:
        calls: list[str] = []

        def source(text: str) -> list[str]:
            calls.append(text)
            return ["x"]

        router = make_router(complete_word=source)
        typed(router, "(")
        typed(router, "(foo ")
        assert calls == []
        assert router.state is None

    def test_no_source(self) -> None:
        router = EventRouter()
        typed(router, "(ma")
        assert router.state is None


class TestDocs:
    def test_docs_only_for_symbols(self) -> None:
        docs_for: list[object] = []

        def get_docs(value: object) -> str:
            docs_for.append(value)
            return f"docs for {value}"

        router = make_router(
            complete_word=lambda t: [(Symbol("map"), "map", "map"), ("mapx", "mapx", "mapx")],
            get_docs=get_docs,
        )
        buf = typed(router, "(ma")
        assert router.lookup_docs() == "docs for map"

        router.handle(Tab(), buf)
        router.handle(Tab(), buf)
        assert router.lookup_docs() is None
        assert docs_for == [Symbol("map")]

    def test_no_state_no_docs(self) -> None:
        router = make_router(get_docs=lambda v: "never")
        assert router.lookup_docs() is None

    def test_raising_get_docs(self, caplog: pytest.LogCaptureFixture) -> None:
        def get_docs(value: object) -> str:
            raise RuntimeError("no docs")

        router = make_router(
            complete_word=lambda t: [(Symbol("map"), "map", "map")], get_docs=get_docs
        )
        typed(router, "(ma")
        with caplog.at_level(logging.ERROR, logger="pi.repl.router"):
            assert router.lookup_docs() is None
        assert "Documentation source failed" in caplog.text

    def test_custom_symbol_predicate(self) -> None:
        router = make_router(
            complete_word=lambda t: ["map"],
            get_docs=lambda v: f"docs for {v}",
            is_symbol=lambda v: isinstance(v, str),
        )
        typed(router, "(ma")
        assert router.lookup_docs() == "docs for map"


class TestBookkeeping:
    def test_generation_increments_per_event(self) -> None:
        router = make_router()
        buf = TextBuffer("")
        start = router.generation
        router.handle(OtherKey("a"), buf)
        router.handle(Tab(), buf)
        assert router.generation == start + 2

    def test_notify_change(self) -> None:
        changes: list[str] = []
        router = make_router(on_change=changes.append)
        buf = TextBuffer("abc")
        assert router.notify_change(buf, "abc") is False
        assert router.notify_change(buf, "ab") is True
        assert changes == ["abc"]

    def test_clear(self) -> None:
        router = make_router()
        typed(router, "(ma")
        router.clear()
        assert not router.is_completing


class TestOptions:
    def test_max_visible_is_clamped(self) -> None:
        assert ReplEditorOptions(completion_max_visible=1).completion_max_visible == 3
        assert ReplEditorOptions(completion_max_visible=50).completion_max_visible == 20
        assert ReplEditorOptions(completion_max_visible=float("inf")).completion_max_visible == 8

    def test_default_hooks_are_filled(self) -> None:
        opts = ReplEditorOptions()
        assert opts.should_eval is not None
        assert opts.should_go_up is not None
        assert opts.should_go_down is not None
