"""Middleware pipeline — an ordered chain of interceptors over a context.

An interceptor is ``async def mw(ctx, advance)``.  Awaiting ``advance()``
runs the rest of the chain and returns once it has completed; advancing
past the last interceptor is a no-op.  An interceptor that never calls
``advance()`` short-circuits the chain, which is how auth or filtering
middleware drops an update::

    async def only_private(ctx, advance):
        if ctx.chat is not None and ctx.chat.type == "private":
            await advance()

Calling ``advance()`` twice in one invocation raises
:class:`~tehsdk.exceptions.DoubleAdvanceError` before anything downstream
runs again.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from tehsdk.exceptions import DoubleAdvanceError

from tehbot.context import Context

Advance = Callable[[], Awaitable[None]]
Middleware = Callable[[Context, Advance], Awaitable[Any]]


class MiddlewarePipeline:
    """Ordered interceptors; registration order is execution order."""

    def __init__(self) -> None:
        self._chain: list[Middleware] = []

    def use(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append *middleware* to the chain."""
        if not callable(middleware):
            raise TypeError("Middleware must be callable")
        self._chain.append(middleware)
        return self

    def __len__(self) -> int:
        return len(self._chain)

    async def run(self, ctx: Context) -> bool:
        """Run the chain over *ctx*.

        The chain is snapshotted first: interceptors added while this run is
        in flight only apply to later runs.

        Returns:
            ``True`` if every interceptor advanced (the chain was fully
            traversed), ``False`` if one short-circuited it.
        """
        chain = tuple(self._chain)
        completed = False

        async def invoke(index: int) -> None:
            nonlocal completed
            if index >= len(chain):
                completed = True
                return

            advanced = False

            async def advance() -> None:
                nonlocal advanced
                if advanced:
                    raise DoubleAdvanceError(
                        f"advance() called more than once by middleware #{index} ({getattr(chain[index], '__name__', chain[index])!r})"
                    )
                advanced = True
                await invoke(index + 1)

            await chain[index](ctx, advance)

        await invoke(0)
        return completed
