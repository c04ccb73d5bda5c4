"""Command registry — maps a leading ``/token`` in message text to a handler.

Every dispatcher owns its own :class:`CommandRegistry`; there is no
module-level singleton, so independent bots in one process never share
commands.

Tokens are normalised to carry exactly one leading ``/`` (``"ping"``,
``"/ping"`` and ``"//ping"`` all register ``"/ping"``).  Lookups are
case-sensitive and the last registration for a token wins.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from tehcore.logger import TehLogger

from tehbot.context import Context

logger = TehLogger.get_logger()

COMMAND_MARKER = "/"

CommandHandler = Callable[[Context], Awaitable[Any]]


@dataclasses.dataclass(frozen=True, slots=True)
class CommandEntry:
    """Metadata for a single registered command."""
    command: str                # e.g. "/ping"
    handler: CommandHandler     # the async callable
    description: str = ""       # shown by set_my_commands helpers


def normalize(token: str) -> str:
    """Return *token* with exactly one leading marker (idempotent)."""
    name = token.strip().lstrip(COMMAND_MARKER)
    if not name:
        raise ValueError(f"Invalid command token: {token!r}")
    return f"{COMMAND_MARKER}{name}"


def parse_command(text: Optional[str]) -> tuple[Optional[str], str]:
    """Split message *text* into ``(token, args)``.

    ``token`` is the text up to the first whitespace when the text starts
    with the marker, else ``None``.
    """
    if not text or not text.startswith(COMMAND_MARKER):
        return None, ""
    parts = text.split(maxsplit=1)
    return parts[0], parts[1].strip() if len(parts) > 1 else ""


class CommandRegistry:
    """Command → handler table for one dispatcher.

    Usage::

        commands = CommandRegistry()

        @commands.register(["start", "help"], description="Say hello")
        async def handle_start(ctx): ...

        # In the dispatcher:
        handled = await commands.route(ctx)
    """

    def __init__(self) -> None:
        self._entries: dict[str, CommandEntry] = {}

    def register(
        self,
        tokens: Union[str, Iterable[str]],
        handler: Optional[CommandHandler] = None,
        *,
        description: str = "",
    ) -> Any:
        """Register *handler* for one token or several.

        Without *handler* this returns a decorator.
        """
        names = [tokens] if isinstance(tokens, str) else list(tokens)
        commands = [normalize(name) for name in names]

        def decorator(func: CommandHandler) -> CommandHandler:
            if not callable(func):
                raise TypeError("Command handler must be callable")
            for command in commands:
                if command in self._entries:
                    logger.debug("Replacing command handler", extra={"command": command})
                self._entries[command] = CommandEntry(command=command, handler=func, description=description)
            return func

        if handler is None:
            return decorator
        return decorator(handler)

    def unregister(self, token: str) -> bool:
        """Remove *token*.  Returns ``False`` if it was not registered."""
        return self._entries.pop(normalize(token), None) is not None

    # ── lookup helpers ───────────────────────────────────────────────────

    def get(self, token: str) -> Optional[CommandEntry]:
        """Return the entry for *token* (normalised), or ``None``."""
        return self._entries.get(normalize(token))

    def entries(self) -> dict[str, CommandEntry]:
        """Return a copy of all registered commands."""
        return dict(self._entries)

    def __contains__(self, token: str) -> bool:
        return self.get(token) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, token: str) -> Optional[CommandEntry]:
        entry = self._entries.get(token)
        if entry is None and "@" in token:
            # "/ping@my_bot" in group chats
            entry = self._entries.get(token.split("@", 1)[0])
        return entry

    async def route(self, ctx: Context) -> bool:
        """Invoke the handler for the command in *ctx*'s message text.

        Returns ``True`` if a handler was found and awaited.  Text without a
        command, or with an unknown one, is left unhandled.  Handler
        exceptions propagate to the caller.
        """
        text = ctx.message.text if ctx.message is not None else None
        token, args = parse_command(text)
        if token is None:
            return False

        entry = self._lookup(token)
        if entry is None:
            logger.debug("No command matched", extra={"update_id": ctx.update.update_id, "command": token})
            return False

        ctx.command = entry.command
        ctx.args = args
        logger.debug("Routing command", extra={"update_id": ctx.update.update_id, "command": entry.command})
        await entry.handler(ctx)
        return True
