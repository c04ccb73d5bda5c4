"""Observable signals — a small event emitter for dispatch listeners.

Listeners are plain callables or coroutine functions.  :meth:`EventEmitter.emit`
calls them in registration order and awaits the awaitable ones, so a
listener's exception propagates to the caller of ``emit`` (the dispatcher's
per-update failure boundary).
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional


Listener = Callable[..., Any]


class EventEmitter:
    """Per-instance registry of ``event name -> listeners``."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Optional[Listener] = None) -> Any:
        """Subscribe *listener* to *event*.

        Works directly or as a decorator::

            bot.on("error", log_error)

            @bot.on("text")
            async def echo(message, ctx): ...
        """
        def decorator(func: Listener) -> Listener:
            if not callable(func):
                raise TypeError("Event listener must be callable")
            self._listeners.setdefault(event, []).append(func)
            return func

        if listener is None:
            return decorator
        decorator(listener)
        return self

    def off(self, event: str, listener: Listener) -> bool:
        """Unsubscribe *listener*.  Returns ``False`` if it was not subscribed."""
        listeners = self._listeners.get(event, [])
        if listener not in listeners:
            return False
        listeners.remove(listener)
        return True

    def listeners(self, event: str) -> list[Listener]:
        """Return a copy of the listeners subscribed to *event*."""
        return list(self._listeners.get(event, []))

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    async def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of *event* with *args*.

        The listener list is copied first, so subscriptions made while
        emitting take effect on the next emit.  Returns ``True`` if at least
        one listener was called.
        """
        listeners = self.listeners(event)
        for listener in listeners:
            result = listener(*args)
            if inspect.isawaitable(result):
                await result
        return bool(listeners)
