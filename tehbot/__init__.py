"""Bot application layer — dispatcher, context, middleware, commands and webhook.

This package may import from ``tehsdk/`` and ``tehcore/``.

Usage::

    from tehbot import Dispatcher
    from tehcore import BotOptions, load_token

    bot = Dispatcher.from_token(load_token(), BotOptions(polling=True))
"""

from tehbot.context import Context, build_context
from tehbot.dispatcher import Dispatcher
from tehbot.events import EventEmitter
from tehbot.middleware import MiddlewarePipeline
from tehbot.registry import CommandEntry, CommandRegistry
from tehbot.webhook import create_webhook_app

__all__ = [
    # Dispatcher
    "Dispatcher",
    "create_webhook_app",
    # Per-update context
    "Context",
    "build_context",
    # Building blocks
    "MiddlewarePipeline",
    "CommandRegistry",
    "CommandEntry",
    "EventEmitter",
]
