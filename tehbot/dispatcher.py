"""Update dispatcher — polling loop, webhook lifecycle and per-update dispatch.

Each :class:`Dispatcher` owns its offset, middleware chain, command registry
and listeners; nothing is shared between instances.  Every update, whether
it arrives through ``getUpdates`` or the webhook, goes through
:meth:`Dispatcher.handle_update`:

1. validate the raw dict into an :class:`~tehsdk.models.Update`;
2. build the :class:`~tehbot.context.Context`;
3. run the middleware chain (a short-circuit ends dispatch here);
4. route a leading ``/command`` to its handler;
5. emit ``update``, then the signal for the update's kind, then (for
   ``message`` updates) one signal per content kind present.

All of it runs inside one failure boundary: an exception is logged, emitted
once as ``error`` and never propagates to the polling loop or the webhook
server.

In polling mode every update is dispatched as its own
:func:`asyncio.create_task`, so the loop goes straight back to
``getUpdates``; dispatch starts in update order but may finish in any order.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union

import uvicorn

from tehcore.config import BotOptions
from tehcore.logger import TehLogger
from tehsdk.client import TehClient
from tehsdk.exceptions import ConfigurationError, ParseError, TehError
from tehsdk.models import MESSAGE_CONTENT_KINDS, Update, UpdateKind

from tehbot.context import Context, build_context
from tehbot.events import EventEmitter, Listener
from tehbot.middleware import Middleware, MiddlewarePipeline
from tehbot.registry import CommandHandler, CommandRegistry
from tehbot.webhook import create_webhook_app

logger = TehLogger.get_logger()

RawUpdate = Union[Update, Mapping[str, Any]]


class Dispatcher:
    """Receives updates and drives them through middleware, commands and listeners.

    Usage::

        bot = Dispatcher.from_token(token, BotOptions(polling=True))

        @bot.command("start")
        async def start(ctx):
            await ctx.reply("Hello!")

        @bot.on("photo")
        async def on_photo(message, ctx): ...

        await bot.run()
    """

    def __init__(self, client: TehClient, options: Optional[BotOptions] = None) -> None:
        self.client = client
        self.options = options or BotOptions()
        self.middleware = MiddlewarePipeline()
        self.commands = CommandRegistry()
        self.events = EventEmitter()

        self._offset = 0
        self._polling = False
        self._polling_task: Optional[asyncio.Task] = None
        self._poll_stop: Optional[asyncio.Event] = None
        self._pending: set[asyncio.Task] = set()
        self._webhook_server: Optional[uvicorn.Server] = None
        self._webhook_task: Optional[asyncio.Task] = None

    @classmethod
    def from_token(cls, token: Optional[str], options: Optional[BotOptions] = None) -> "Dispatcher":
        """Build a dispatcher together with its :class:`TehClient`.

        Raises:
            ConfigurationError: If *token* is empty.
        """
        options = options or BotOptions()
        return cls(TehClient.from_options(token, options), options)

    # ── registration ─────────────────────────────────────────────────────

    def use(self, middleware: Middleware) -> "Dispatcher":
        """Append *middleware* to the chain.  See :mod:`tehbot.middleware`."""
        self.middleware.use(middleware)
        return self

    def command(self, tokens: Any, handler: Optional[CommandHandler] = None, *, description: str = "") -> Any:
        """Register a command handler; usable as a decorator."""
        return self.commands.register(tokens, handler, description=description)

    def on(self, event: str, listener: Optional[Listener] = None) -> Any:
        """Subscribe to a signal; usable as a decorator."""
        result = self.events.on(event, listener)
        return self if listener is not None else result

    def off(self, event: str, listener: Listener) -> bool:
        return self.events.off(event, listener)

    @property
    def offset(self) -> int:
        """Next ``update_id`` to request from ``getUpdates``."""
        return self._offset

    @property
    def is_polling(self) -> bool:
        return self._polling

    @property
    def is_webhook_running(self) -> bool:
        return self._webhook_task is not None and not self._webhook_task.done()

    # ── per-update dispatch ──────────────────────────────────────────────

    async def handle_update(self, update: RawUpdate) -> Optional[Exception]:
        """Dispatch one update inside the failure boundary.

        Returns:
            ``None`` on success (including a middleware short-circuit), or
            the exception that ended dispatch.  The exception has already
            been logged and emitted as ``error``.
        """
        update_id = update.get("update_id") if isinstance(update, Mapping) else getattr(update, "update_id", None)
        try:
            await self._dispatch(update)
        except Exception as exc:
            logger.error(
                "Error processing update",
                extra={"update_id": update_id, "error": str(exc)},
                exc_info=True,
            )
            await self.notify("error", exc)
            return exc
        return None

    async def process_update(self, update: RawUpdate) -> bool:
        """Dispatch one update; ``True`` if it completed without error."""
        return await self.handle_update(update) is None

    async def _dispatch(self, update: RawUpdate) -> None:
        if not isinstance(update, Update):
            update = Update.model_validate(update)

        ctx = build_context(update, self.client)
        if not await self.middleware.run(ctx):
            logger.debug("Update stopped by middleware", extra={"update_id": update.update_id})
            return

        await self.commands.route(ctx)
        await self.events.emit("update", update)

        kind = update.kind
        if kind is None:
            logger.debug("Update carries no known payload", extra={"update_id": update.update_id})
            return
        await self.events.emit(kind.value, update.payload, ctx)

        if kind is UpdateKind.MESSAGE:
            await self._emit_content_signals(update, ctx)

    async def _emit_content_signals(self, update: Update, ctx: Context) -> None:
        message = update.message
        for content_kind in MESSAGE_CONTENT_KINDS:
            if getattr(message, content_kind, None) is not None:
                await self.events.emit(content_kind, message, ctx)

    async def notify(self, event: str, *args: Any) -> None:
        """Emit a lifecycle or failure signal; listener errors are only logged."""
        if not self.events.has_listeners(event):
            if event == "error":
                logger.error("Unhandled error (no 'error' listener registered)", extra={"event": event})
            return
        try:
            await self.events.emit(event, *args)
        except Exception:
            logger.exception("Listener failed", extra={"event": event})

    def _spawn(self, update: RawUpdate) -> asyncio.Task:
        task = asyncio.create_task(self.handle_update(update))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait until every dispatch task spawned by the polling loop has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ── polling ──────────────────────────────────────────────────────────

    async def start_polling(self) -> asyncio.Task:
        """Start the long-polling loop and return its task.

        Calling this while already polling returns the running loop.  Any
        configured webhook is deleted first (best effort) because the Bot
        API refuses ``getUpdates`` while a webhook is set.  A loop left over
        from an earlier :meth:`stop_polling` is cancelled before the new one
        starts, so only one ``getUpdates`` stream runs at a time.
        """
        if self._polling and self._polling_task is not None:
            return self._polling_task

        previous = self._polling_task
        if previous is not None and not previous.done() and previous is not asyncio.current_task():
            previous.cancel()
            try:
                await previous
            except asyncio.CancelledError:
                pass

        try:
            await self.client.delete_webhook()
        except TehError as exc:
            logger.warning("Could not delete webhook before polling", extra={"error": str(exc)})

        stop = asyncio.Event()
        self._poll_stop = stop
        self._polling = True
        logger.info("Polling started", extra={"offset": self._offset})
        await self.notify("polling_start")
        self._polling_task = asyncio.create_task(self._poll(stop))
        return self._polling_task

    async def stop_polling(self) -> None:
        """Stop the loop after the in-flight ``getUpdates`` call completes."""
        if not self._polling:
            return
        self._polling = False
        if self._poll_stop is not None:
            self._poll_stop.set()
        logger.info("Polling stopped", extra={"offset": self._offset})
        await self.notify("polling_stop")

    async def _poll(self, stop: asyncio.Event) -> None:
        # *stop* belongs to this run only; a restart hands the next loop a new one.
        interval = self.options.polling_interval
        while not stop.is_set():
            try:
                updates = await self.client.get_updates(
                    offset=self._offset,
                    limit=self.options.polling_limit,
                    timeout=self.options.polling_timeout,
                    allowed_updates=list(self.options.allowed_updates),
                )
                if not isinstance(updates, list):
                    raise ParseError("getUpdates", 200, repr(updates))
            except TehError as exc:
                logger.warning("getUpdates failed", extra={"offset": self._offset, "error": str(exc)})
                await self.notify("polling_error", exc)
                await asyncio.sleep(interval * 2)
                continue
            except Exception as exc:
                logger.error("Unexpected getUpdates failure", extra={"offset": self._offset}, exc_info=True)
                await self.notify("polling_error", exc)
                await asyncio.sleep(interval * 2)
                continue

            if updates:
                logger.debug("Received updates", extra={"count": len(updates), "offset": self._offset})
            for update in updates:
                update_id = update.get("update_id") if isinstance(update, Mapping) else None
                if isinstance(update_id, int):
                    self._offset = max(self._offset, update_id + 1)
                self._spawn(update)

            await asyncio.sleep(interval)

    # ── webhook ──────────────────────────────────────────────────────────

    async def set_webhook(self, url: str, **kwargs: Any) -> bool:
        """Register *url* as the bot's public webhook.

        ``max_connections`` and ``allowed_updates`` default to the dispatcher's
        options; every keyword is passed on to :meth:`TehClient.set_webhook`.
        """
        kwargs.setdefault("max_connections", self.options.max_connections)
        kwargs.setdefault("allowed_updates", list(self.options.allowed_updates))
        logger.info("Registering webhook", extra={"max_connections": kwargs["max_connections"]})
        return await self.client.set_webhook(url, **kwargs)

    async def start_webhook(self) -> asyncio.Task:
        """Serve the webhook app on ``webhook_host:webhook_port`` and return the server task.

        Only the local HTTP endpoint is started; registering the public URL
        is done with :meth:`set_webhook`.  The socket is bound inside the
        returned task, so a bind failure shows up afterwards as a
        ``webhook_error`` signal and the task ends without raising.
        """
        if self.is_webhook_running:
            return self._webhook_task

        app = create_webhook_app(self, self.options.webhook_path)
        config = uvicorn.Config(
            app,
            host=self.options.webhook_host,
            port=self.options.webhook_port,
            log_config=None,
            lifespan="off",
        )
        self._webhook_server = uvicorn.Server(config)
        self._webhook_task = asyncio.create_task(self._serve_webhook(self._webhook_server))
        logger.info(
            "Webhook server started",
            extra={"port": self.options.webhook_port, "path": self.options.webhook_path},
        )
        await self.notify("webhook_start", self.options.webhook_port)
        return self._webhook_task

    async def _serve_webhook(self, server: uvicorn.Server) -> None:
        # uvicorn calls sys.exit(1) when it cannot bind the socket.
        try:
            await server.serve()
        except (OSError, SystemExit) as exc:
            logger.error(
                "Webhook server failed",
                extra={"host": self.options.webhook_host, "port": self.options.webhook_port, "error": repr(exc)},
            )
            if self._webhook_server is server:
                self._webhook_server = None
            await self.notify("webhook_error", exc)

    async def stop_webhook(self) -> None:
        """Shut the webhook server down and wait for it to exit."""
        if self._webhook_server is None:
            return
        self._webhook_server.should_exit = True
        task = self._webhook_task
        self._webhook_server = None
        self._webhook_task = None
        if task is not None and not task.done():
            await task
        logger.info("Webhook server stopped")
        await self.notify("webhook_stop")

    # ── lifecycle ────────────────────────────────────────────────────────

    async def run(self) -> None:
        """Start every mode enabled in the options and wait until they end.

        Raises:
            ConfigurationError: If neither polling nor webhook is enabled.
        """
        tasks = []
        if self.options.polling:
            tasks.append(await self.start_polling())
        if self.options.webhook:
            tasks.append(await self.start_webhook())
        if not tasks:
            raise ConfigurationError("Enable polling or webhook in BotOptions before calling run()")

        await asyncio.gather(*tasks)
        await self.drain()

    async def stop(self) -> None:
        """Stop polling and the webhook server, then wait for pending dispatches."""
        await self.stop_polling()
        await self.stop_webhook()
        await self.drain()
