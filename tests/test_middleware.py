"""Tests for the middleware pipeline."""

import sys
import os
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tehbot.context import build_context
from tehbot.middleware import MiddlewarePipeline
from tehsdk.exceptions import DoubleAdvanceError
from tehsdk.models import Update


@pytest.fixture()
def ctx():
    update = Update.model_validate({
        "update_id": 1,
        "message": {"message_id": 1, "date": 0, "chat": {"id": 1, "type": "private"}, "text": "hi"},
    })
    return build_context(update, MagicMock())


def _recorder(log: list, name: str, advance_times: int = 1):
    async def middleware(ctx, advance):
        log.append(f"{name}:before")
        for _ in range(advance_times):
            await advance()
        log.append(f"{name}:after")
    return middleware


class TestMiddlewarePipeline:
    @pytest.mark.asyncio
    async def test_empty_chain_completes(self, ctx) -> None:
        assert await MiddlewarePipeline().run(ctx) is True

    @pytest.mark.asyncio
    async def test_onion_order(self, ctx) -> None:
        log: list[str] = []
        pipeline = MiddlewarePipeline().use(_recorder(log, "a")).use(_recorder(log, "b"))

        assert await pipeline.run(ctx) is True
        assert log == ["a:before", "b:before", "b:after", "a:after"]

    @pytest.mark.asyncio
    async def test_short_circuit(self, ctx) -> None:
        log: list[str] = []
        pipeline = MiddlewarePipeline()
        pipeline.use(_recorder(log, "a"))
        pipeline.use(_recorder(log, "gate", advance_times=0))
        pipeline.use(_recorder(log, "c"))

        assert await pipeline.run(ctx) is False
        assert "c:before" not in log
        assert log == ["a:before", "gate:before", "gate:after", "a:after"]

    @pytest.mark.asyncio
    async def test_double_advance_raises_before_rerun(self, ctx) -> None:
        log: list[str] = []
        pipeline = MiddlewarePipeline().use(_recorder(log, "a", advance_times=2)).use(_recorder(log, "b"))

        with pytest.raises(DoubleAdvanceError):
            await pipeline.run(ctx)
        assert log.count("b:before") == 1

    @pytest.mark.asyncio
    async def test_state_is_shared_downstream(self, ctx) -> None:
        async def set_user(ctx, advance):
            ctx.state["user"] = "alice"
            await advance()

        seen = {}

        async def read_user(ctx, advance):
            seen["user"] = ctx.state.get("user")
            await advance()

        pipeline = MiddlewarePipeline().use(set_user).use(read_user)
        await pipeline.run(ctx)
        assert seen == {"user": "alice"}

    @pytest.mark.asyncio
    async def test_added_during_run_applies_next_time(self, ctx) -> None:
        log: list[str] = []
        pipeline = MiddlewarePipeline()

        async def adder(ctx, advance):
            pipeline.use(_recorder(log, "late"))
            await advance()

        pipeline.use(adder)
        await pipeline.run(ctx)
        assert log == []

        await pipeline.run(ctx)
        assert log == ["late:before", "late:after"]

    @pytest.mark.asyncio
    async def test_exception_propagates(self, ctx) -> None:
        async def broken(ctx, advance):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await MiddlewarePipeline().use(broken).run(ctx)

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(TypeError):
            MiddlewarePipeline().use("not a function")
