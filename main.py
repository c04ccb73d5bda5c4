"""Example bot — long polling (or webhook) with a few commands and listeners.

Run with ``BOT_TOKEN`` set (a ``.env`` file works too)::

    BOT_TOKEN=123:abc TEH_POLLING=true python main.py

Set ``TEH_WEBHOOK=true`` instead to receive updates on
``TEH_WEBHOOK_HOST:TEH_WEBHOOK_PORT`` + ``TEH_WEBHOOK_PATH``; with
``WEBHOOK_URL`` set, that public URL is registered with the Bot API first.
"""

import asyncio
import os
import time

from tehbot import Context, Dispatcher
from tehcore.config import BotOptions, load_token
from tehcore.logger import TehLogger
from tehsdk.keyboards import InlineKeyboardBuilder
from tehsdk.models import CallbackQuery, Message

logger = TehLogger.get_logger()


def build_bot(token: str | None, options: BotOptions) -> Dispatcher:
    """Create the dispatcher and register middleware, commands and listeners."""
    bot = Dispatcher.from_token(token, options)

    # ── Middleware ───────────────────────────────────────────────────────

    async def timing(ctx: Context, advance) -> None:
        started = time.monotonic()
        await advance()
        logger.info(
            "Update handled",
            extra={
                "update_id": ctx.update.update_id,
                "kind": ctx.update.kind.value if ctx.update.kind else None,
                "user_id": ctx.from_user.id if ctx.from_user else None,
                "elapsed_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )

    bot.use(timing)

    # ── Commands ─────────────────────────────────────────────────────────

    @bot.command("start", description="Say hello")
    async def handle_start(ctx: Context) -> None:
        name = ctx.from_user.first_name if ctx.from_user else "there"
        await ctx.reply(f"👋 Hello, {name}! Send /help to see what I can do.")

    @bot.command("help", description="Show available commands")
    async def handle_help(ctx: Context) -> None:
        keyboard = InlineKeyboardBuilder()
        for command, entry in bot.commands.entries().items():
            keyboard.text(f"{command} — {entry.description}", command).row()
        await ctx.reply("📖 Available commands (tap to use):", reply_markup=keyboard.build())

    @bot.command("ping", description="Check that the bot is alive")
    async def handle_ping(ctx: Context) -> None:
        await ctx.reply("🏓 pong")

    @bot.command("echo", description="Repeat your text")
    async def handle_echo(ctx: Context) -> None:
        await ctx.reply(ctx.args or "Usage: /echo <text>")

    # ── Listeners ────────────────────────────────────────────────────────

    @bot.on("callback_query")
    async def on_callback(query: CallbackQuery, ctx: Context) -> None:
        await ctx.answer_callback()
        entry = bot.commands.get(query.data) if query.data else None
        if entry is None:
            await ctx.edit_text("⚠️ Unknown action.")
            return
        ctx.command = entry.command
        await entry.handler(ctx)

    @bot.on("photo")
    async def on_photo(message: Message, ctx: Context) -> None:
        largest = message.photo[-1]
        await ctx.reply(f"📷 Nice photo ({largest.width}×{largest.height}).")

    @bot.on("error")
    def on_error(exc: Exception) -> None:
        logger.error("Dispatch failed", extra={"error": str(exc), "error_type": type(exc).__name__})

    return bot


async def serve(bot: Dispatcher, webhook_url: str | None) -> None:
    """Register *webhook_url* when given, then run until every mode stops."""
    if webhook_url:
        await bot.set_webhook(webhook_url)
    await bot.run()


def main() -> None:
    token = load_token()
    if not token:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    options = BotOptions.from_env()
    if not options.polling and not options.webhook:
        options = options.model_copy(update={"polling": True})

    bot = build_bot(token, options)
    webhook_url = os.environ.get("WEBHOOK_URL") if options.webhook else None
    logger.info("Bot is running", extra={"polling": options.polling, "webhook": options.webhook})
    try:
        asyncio.run(serve(bot, webhook_url))
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")


if __name__ == "__main__":
    main()
