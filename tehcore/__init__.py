"""Ambient layer — JSON logging and configuration.

This package is framework-agnostic. It must NEVER import from ``tehbot/`` or ``tehsdk/``.
"""

from tehcore.config import BotOptions, load_token
from tehcore.logger import TehLogger

__all__ = [
    "BotOptions",
    "TehLogger",
    "load_token",
]
