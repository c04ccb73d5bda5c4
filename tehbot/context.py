"""Per-update context — resolved facets plus bound reply operations.

:func:`build_context` is a pure function of the update: it resolves which
chat, user and message the update is about and returns a :class:`Context`
whose coroutine methods (``send``, ``reply``, ``answer_callback``,
``edit_text``) talk back to the right place through the owning client.

Different update kinds attach chat information at different depths, so the
facets are resolved in a fixed, documented precedence (first present value
wins):

chat
    ``message.chat`` → ``callback_query.message.chat`` →
    ``my_chat_member.chat`` → ``chat_member.chat`` →
    ``chat_join_request.chat`` → ``edited_message.chat`` →
    ``channel_post.chat`` → ``edited_channel_post.chat``

from_user
    ``message.from`` → ``edited_message.from`` → ``callback_query.from`` →
    ``inline_query.from`` → ``chosen_inline_result.from`` →
    ``shipping_query.from`` → ``pre_checkout_query.from`` →
    ``poll_answer.user`` → ``my_chat_member.from`` → ``chat_member.from`` →
    ``chat_join_request.from``

message
    ``message`` → ``edited_message`` → ``channel_post`` →
    ``edited_channel_post`` → ``callback_query.message``

A context is created at dispatch start and discarded afterwards; it is never
reused for another update.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from tehcore.logger import TehLogger
from tehsdk.exceptions import UnresolvableChatError
from tehsdk.models import (
    CallbackQuery,
    Chat,
    ChatJoinRequest,
    ChatMemberUpdated,
    ChosenInlineResult,
    InlineQuery,
    Message,
    Poll,
    PollAnswer,
    PreCheckoutQuery,
    ShippingQuery,
    Update,
    User,
)

if TYPE_CHECKING:
    from tehsdk.client import TehClient

logger = TehLogger.get_logger()


def _chat_of(obj: Any) -> Optional[Chat]:
    return obj.chat if obj is not None else None


def _from_of(obj: Any) -> Optional[User]:
    return obj.from_field if obj is not None else None


def _callback_message(update: Update) -> Optional[Message]:
    return update.callback_query.message if update.callback_query else None


def resolve_chat(update: Update) -> Optional[Chat]:
    """Return the chat *update* is about, or ``None`` (e.g. inline queries)."""
    return (
        _chat_of(update.message)
        or _chat_of(_callback_message(update))
        or _chat_of(update.my_chat_member)
        or _chat_of(update.chat_member)
        or _chat_of(update.chat_join_request)
        or _chat_of(update.edited_message)
        or _chat_of(update.channel_post)
        or _chat_of(update.edited_channel_post)
    )


def resolve_from(update: Update) -> Optional[User]:
    """Return the user who triggered *update*, or ``None`` (e.g. channel posts)."""
    return (
        _from_of(update.message)
        or _from_of(update.edited_message)
        or _from_of(update.callback_query)
        or _from_of(update.inline_query)
        or _from_of(update.chosen_inline_result)
        or _from_of(update.shipping_query)
        or _from_of(update.pre_checkout_query)
        or (update.poll_answer.user if update.poll_answer else None)
        or _from_of(update.my_chat_member)
        or _from_of(update.chat_member)
        or _from_of(update.chat_join_request)
    )


def resolve_message(update: Update) -> Optional[Message]:
    """Return the message *update* carries or refers to."""
    return (
        update.message
        or update.edited_message
        or update.channel_post
        or update.edited_channel_post
        or _callback_message(update)
    )


@dataclasses.dataclass(eq=False)
class Context:
    """Working value for one update.

    Facets may be ``None`` depending on the update kind; never assume all of
    them are populated.  ``state`` is free for middleware to stash data for
    later stages of the same dispatch.  ``command``/``args`` are filled in by
    the command router when a command matches.
    """

    update: Update
    client: "TehClient"
    message: Optional[Message] = None
    chat: Optional[Chat] = None
    from_user: Optional[User] = None
    callback_query: Optional[CallbackQuery] = None
    inline_query: Optional[InlineQuery] = None
    chosen_inline_result: Optional[ChosenInlineResult] = None
    shipping_query: Optional[ShippingQuery] = None
    pre_checkout_query: Optional[PreCheckoutQuery] = None
    poll: Optional[Poll] = None
    poll_answer: Optional[PollAnswer] = None
    my_chat_member: Optional[ChatMemberUpdated] = None
    chat_member: Optional[ChatMemberUpdated] = None
    chat_join_request: Optional[ChatJoinRequest] = None
    command: Optional[str] = None
    args: str = ""
    state: Dict[str, Any] = dataclasses.field(default_factory=dict)

    # ------------------------------------------------------------------
    # Destination
    # ------------------------------------------------------------------

    @property
    def chat_id(self) -> Optional[int]:
        """Destination for sends: the chat, else the triggering user's private chat."""
        if self.chat is not None:
            return self.chat.id
        if self.from_user is not None:
            return self.from_user.id
        return None

    def _require_chat_id(self, operation: str) -> int:
        chat_id = self.chat_id
        if chat_id is None:
            logger.warning(
                "No destination for context operation",
                extra={"update_id": self.update.update_id, "operation": operation},
            )
            raise UnresolvableChatError(
                f"Cannot {operation}: chat_id could not be resolved from update {self.update.update_id}"
            )
        return chat_id

    # ------------------------------------------------------------------
    # Bound operations
    # ------------------------------------------------------------------

    async def send(self, content: Union[str, Mapping[str, Any]], **options: Any) -> Any:
        """Send *content* (text or a media mapping) to the resolved destination.

        Raises:
            UnresolvableChatError: If the update carries neither a chat nor a sender.
        """
        chat_id = self._require_chat_id("send")
        return await self.client.send_content(chat_id, content, **options)

    async def reply(self, text: str, **options: Any) -> Any:
        """Send *text* as a reply to the current message when there is one."""
        chat_id = self._require_chat_id("reply")
        if self.message is not None:
            options.setdefault("reply_to_message_id", self.message.message_id)
        return await self.client.send_message(chat_id, text, **options)

    async def reply_with_photo(self, photo: Any, **options: Any) -> Any:
        return await self.send({"photo": photo}, **options)

    async def reply_with_video(self, video: Any, **options: Any) -> Any:
        return await self.send({"video": video}, **options)

    async def reply_with_audio(self, audio: Any, **options: Any) -> Any:
        return await self.send({"audio": audio}, **options)

    async def reply_with_document(self, document: Any, **options: Any) -> Any:
        return await self.send({"document": document}, **options)

    async def answer_callback(self, **options: Any) -> Any:
        """Answer the originating callback query; ``False`` if there is none."""
        if self.callback_query is None:
            return False
        return await self.client.answer_callback_query(self.callback_query.id, **options)

    async def edit_text(self, text: str, **options: Any) -> Any:
        """Edit the message the callback button was attached to.

        Edits by chat + message id when the callback carries its message, by
        ``inline_message_id`` for inline-mode messages, and returns ``False``
        when neither is available.
        """
        callback = self.callback_query
        if callback is None:
            return False
        if callback.message is not None:
            return await self.client.edit_message_text(
                text,
                chat_id=callback.message.chat.id,
                message_id=callback.message.message_id,
                **options,
            )
        if callback.inline_message_id:
            return await self.client.edit_message_text(
                text,
                inline_message_id=callback.inline_message_id,
                **options,
            )
        return False


def build_context(update: Update, client: "TehClient") -> Context:
    """Derive the facets of *update* and bind them to *client*."""
    return Context(
        update=update,
        client=client,
        message=resolve_message(update),
        chat=resolve_chat(update),
        from_user=resolve_from(update),
        callback_query=update.callback_query,
        inline_query=update.inline_query,
        chosen_inline_result=update.chosen_inline_result,
        shipping_query=update.shipping_query,
        pre_checkout_query=update.pre_checkout_query,
        poll=update.poll,
        poll_answer=update.poll_answer,
        my_chat_member=update.my_chat_member,
        chat_member=update.chat_member,
        chat_join_request=update.chat_join_request,
    )
