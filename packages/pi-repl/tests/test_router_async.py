"""Tests for coroutine completion and documentation sources."""

from __future__ import annotations

import asyncio

import pytest

from pi.repl.completion import Symbol
from pi.repl.document import TextBuffer
from pi.repl.events import OtherKey
from pi.repl.options import ReplEditorOptions
from pi.repl.router import EventRouter


class TestAsyncCompletions:
    @pytest.mark.asyncio
    async def test_results_are_applied(self) -> None:
        async def source(text: str) -> list[str]:
            return [text + "a", text + "b"]

        router = EventRouter(ReplEditorOptions(complete_word=source))
        assert router.has_async_completions
        state = await router.refresh_async(TextBuffer("(ma"))
        assert state is not None
        assert [c.match_text for c in state.candidates] == ["maa", "mab"]
        assert router.state is state

    @pytest.mark.asyncio
    async def test_sync_refresh_only_clears(self) -> None:
        async def source(text: str) -> list[str]:
            return [text]

        router = EventRouter(ReplEditorOptions(complete_word=source))
        buf = TextBuffer("(ma")
        await router.refresh_async(buf)
        router.handle(OtherKey("a"), buf)
        assert router.state is None

    @pytest.mark.asyncio
    async def test_keystroke_while_in_flight_discards_result(self) -> None:
        gate = asyncio.Event()

        async def source(text: str) -> list[str]:
            await gate.wait()
            return ["map"]

        router = EventRouter(ReplEditorOptions(complete_word=source))
        buf = TextBuffer("(ma")
        task = asyncio.create_task(router.refresh_async(buf))
        await asyncio.sleep(0)

        router.handle(OtherKey("x"), buf)
        gate.set()
        assert await task is None
        assert router.state is None

    @pytest.mark.asyncio
    async def test_latest_request_wins(self) -> None:
        gates = {"ma": asyncio.Event()}

        async def source(text: str) -> list[str]:
            if text in gates:
                await gates[text].wait()
            return [text + "x", text + "y"]

        router = EventRouter(ReplEditorOptions(complete_word=source))
        buf = TextBuffer("(ma")
        slow = asyncio.create_task(router.refresh_async(buf))
        await asyncio.sleep(0)

        buf.insert_text("p")
        fast = await router.refresh_async(buf)
        gates["ma"].set()
        stale = await slow

        assert fast is not None
        assert fast.initial_text == "map"
        assert stale is fast
        assert router.state is fast

    @pytest.mark.asyncio
    async def test_sync_source_through_async_refresh(self) -> None:
        router = EventRouter(ReplEditorOptions(complete_word=lambda t: ["map"]))
        state = await router.refresh_async(TextBuffer("(ma"))
        assert state is not None
        assert state.current.match_text == "map"

    @pytest.mark.asyncio
    async def test_failing_async_source(self) -> None:
        async def source(text: str) -> list[str]:
            raise ConnectionError("nrepl gone")

        router = EventRouter(ReplEditorOptions(complete_word=source))
        assert await router.refresh_async(TextBuffer("(ma")) is None

    @pytest.mark.asyncio
    async def test_empty_fragment(self) -> None:
        calls: list[str] = []

        async def source(text: str) -> list[str]:
            calls.append(text)
            return ["x"]

        router = EventRouter(ReplEditorOptions(complete_word=source))
        assert await router.refresh_async(TextBuffer("(")) is None
        assert calls == []


class TestAsyncDocs:
    @staticmethod
    def _router(get_docs) -> EventRouter:
        return EventRouter(
            ReplEditorOptions(
                complete_word=lambda t: [(Symbol("map"), "map", "map")],
                get_docs=get_docs,
            )
        )

    @pytest.mark.asyncio
    async def test_async_docs(self) -> None:
        async def get_docs(value: object) -> str:
            return f"# {value}"

        router = self._router(get_docs)
        router.refresh(TextBuffer("(ma"))
        assert await router.lookup_docs_async() == "# map"

    @pytest.mark.asyncio
    async def test_sync_docs_through_async_lookup(self) -> None:
        router = self._router(lambda v: "plain")
        router.refresh(TextBuffer("(ma"))
        assert await router.lookup_docs_async() == "plain"

    @pytest.mark.asyncio
    async def test_stale_docs_are_discarded(self) -> None:
        gate = asyncio.Event()

        async def get_docs(value: object) -> str:
            await gate.wait()
            return "late"

        router = self._router(get_docs)
        buf = TextBuffer("(ma")
        router.refresh(buf)
        task = asyncio.create_task(router.lookup_docs_async())
        await asyncio.sleep(0)

        router.handle(OtherKey("a"), buf)
        gate.set()
        assert await task is None

    def test_sync_lookup_with_async_source_gives_none(self) -> None:
        async def get_docs(value: object) -> str:
            return "never awaited"

        router = self._router(get_docs)
        router.refresh(TextBuffer("(ma"))
        assert router.lookup_docs() is None
