"""Telegram Bot API SDK — transport client, Pydantic models, file resolution and keyboards.

The :class:`TehClient` class wraps the Bot API endpoints with coroutine
methods; blocking ``requests`` calls run in worker threads.

Usage::

    from tehsdk import TehClient, RemoteAPIError
    from tehsdk.models import Update, Message
    from tehsdk.keyboards import InlineKeyboardBuilder
"""

from tehsdk.client import TehClient
from tehsdk.exceptions import (
    ConfigurationError,
    DoubleAdvanceError,
    ParseError,
    RemoteAPIError,
    TehError,
    TransportError,
    UnresolvableChatError,
)
from tehsdk.files import InputFile, resolve_file
from tehsdk.keyboards import InlineKeyboardBuilder, ReplyKeyboardBuilder, force_reply, remove_keyboard
from tehsdk.retry import call_with_retry

__all__ = [
    "TehClient",
    "TehError",
    "ConfigurationError",
    "TransportError",
    "ParseError",
    "RemoteAPIError",
    "UnresolvableChatError",
    "DoubleAdvanceError",
    "InputFile",
    "resolve_file",
    "InlineKeyboardBuilder",
    "ReplyKeyboardBuilder",
    "remove_keyboard",
    "force_reply",
    "call_with_retry",
]
