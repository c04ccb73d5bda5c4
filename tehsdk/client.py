"""TehClient — transport and endpoint wrappers for the Telegram Bot API.

Every call is an HTTP POST to ``{base_api_url}/bot{token}/{method}`` made
with the ``requests`` library.  The blocking call runs in a worker thread
via :func:`asyncio.to_thread`, so the endpoint wrappers are coroutines and
never block the event loop the dispatcher runs on.

Failures are classified before they reach the caller:

* :class:`~tehsdk.exceptions.TransportError` — network failure or timeout;
* :class:`~tehsdk.exceptions.ParseError` — the body is not JSON;
* :class:`~tehsdk.exceptions.RemoteAPIError` — ``{"ok": false}`` with
  ``error_code`` and ``description``.

Endpoint wrappers are thin: they take the method's parameters as explicit
keyword arguments (so a misspelt option is a ``TypeError``, not a silently
ignored key), drop the ones left as ``None`` and return the ``result``
field of the response.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Dict, List, Mapping, Optional, Union

import requests
from pydantic import BaseModel

from tehcore.config import DEFAULT_API_URL, BotOptions
from tehcore.logger import TehLogger
from tehsdk.exceptions import ConfigurationError, ParseError, RemoteAPIError, TransportError
from tehsdk.files import InputFile, resolve_file
from tehsdk.models import File, User, WebhookInfo

logger = TehLogger.get_logger()

ChatId = Union[int, str]

USER_AGENT = "tehbot/0.1"

# Keys accepted by :meth:`TehClient.send_content` to pick a media method.
# ``image`` is an alias of ``photo``.
_CONTENT_MEDIA_KEYS: tuple[tuple[str, str], ...] = (
    ("photo", "photo"),
    ("image", "photo"),
    ("video", "video"),
    ("audio", "audio"),
    ("document", "document"),
    ("sticker", "sticker"),
    ("animation", "animation"),
    ("voice", "voice"),
)


def _jsonable(value: Any) -> Any:
    """Convert pydantic models (possibly nested in lists/dicts) to plain JSON data."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items() if item is not None}
    return value


def _clean(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop ``None`` values and serialise models."""
    if not payload:
        return {}
    return {key: _jsonable(value) for key, value in payload.items() if value is not None}


def _form_value(value: Any) -> str:
    """Encode one non-file multipart field.  Structured values go as JSON."""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_multipart(
    payload: Optional[Mapping[str, Any]],
    files: Mapping[str, InputFile],
) -> tuple[bytes, str]:
    """Encode *payload* and *files* as ``multipart/form-data``.

    Each file becomes one part with ``Content-Disposition: form-data;
    name="<field>"; filename="<name>"`` and its own ``Content-Type``.

    Returns:
        The encoded body and the ``Content-Type`` header value carrying the
        generated boundary.
    """
    fields = {key: _form_value(value) for key, value in _clean(payload).items()}
    prepared = requests.Request(
        "POST",
        "http://multipart.invalid/",
        data=fields,
        files={field: input_file.as_part() for field, input_file in files.items()},
    ).prepare()
    return prepared.body, prepared.headers["Content-Type"]


class TehClient:
    """Client-side service layer for the Telegram Bot API.

    Each public coroutine corresponds to a Bot API method.  The client keeps
    no per-update state, so one instance can be shared by any number of
    concurrent dispatch tasks.
    """

    _DEFAULT_TIMEOUT: float = 30.0

    def __init__(
        self,
        token: Optional[str],
        base_api_url: str = DEFAULT_API_URL,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        """Create a new client for the bot identified by *token*.

        Args:
            token: Bot token issued by BotFather.
            base_api_url: Bot API server root (override for a local server).
            timeout: Default request timeout in seconds.

        Raises:
            ConfigurationError: If *token* is empty.
        """
        if not token:
            raise ConfigurationError("Bot token is required")
        self._token = token
        self._api_root = base_api_url.rstrip("/")
        self._base_url = f"{self._api_root}/bot{token}"
        self._timeout = timeout

    @classmethod
    def from_options(cls, token: Optional[str], options: BotOptions) -> "TehClient":
        """Build a client using the transport-related fields of *options*."""
        return cls(token, base_api_url=options.base_api_url, timeout=options.request_timeout)

    @property
    def timeout(self) -> float:
        """Default request timeout in seconds."""
        return self._timeout

    # ------------------------------------------------------------------
    #  Transport
    # ------------------------------------------------------------------

    def _post(
        self,
        method: str,
        payload: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, InputFile]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send one POST request and return the ``result`` of the response.

        Raises:
            TransportError: On network failures and timeouts.
            ParseError: If the body is not a JSON object.
            RemoteAPIError: If the response has ``ok: false``.
        """
        url = f"{self._base_url}/{method}"
        timeout = timeout if timeout is not None else self._timeout
        headers = {"User-Agent": USER_AGENT}
        try:
            if files:
                form_body, content_type = encode_multipart(payload, files)
                headers["Content-Type"] = content_type
                response = requests.post(url, data=form_body, headers=headers, timeout=timeout)
            else:
                response = requests.post(url, json=_clean(payload), headers=headers, timeout=timeout)
        except requests.RequestException as exc:
            logger.error("Request failed", extra={"api_method": method, "error": str(exc)})
            raise TransportError(method, exc) from exc
        finally:
            for input_file in (files or {}).values():
                input_file.close()

        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Response is not JSON", extra={"api_method": method, "status_code": response.status_code})
            raise ParseError(method, response.status_code, response.text) from exc
        if not isinstance(body, dict):
            raise ParseError(method, response.status_code, response.text)

        if not body.get("ok"):
            logger.warning(
                "Bot API returned an error",
                extra={"api_method": method, "error_code": body.get("error_code"), "description": body.get("description")},
            )
            raise RemoteAPIError(
                body.get("error_code", response.status_code),
                body.get("description"),
                body.get("parameters"),
                method=method,
            )
        return body.get("result")

    async def request(
        self,
        method: str,
        payload: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, InputFile]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Call *method* without blocking the event loop.  See :meth:`_post`."""
        return await asyncio.to_thread(self._post, method, payload, files, timeout)

    async def call(self, method: str, **params: Any) -> Any:
        """Call any Bot API *method* with keyword *params*.

        Values resolving to an :class:`InputFile` are uploaded as multipart
        parts; everything else goes in the body.
        """
        payload: Dict[str, Any] = {}
        files: Dict[str, InputFile] = {}
        for key, value in params.items():
            if isinstance(value, InputFile):
                files[key] = value
            else:
                payload[key] = value
        return await self.request(method, payload, files or None)

    async def _send_media(
        self,
        method: str,
        field: str,
        media: Any,
        payload: Dict[str, Any],
    ) -> Any:
        """Resolve *media* and send it under *field*, uploading when needed."""
        resolved = resolve_file(media, field)
        if isinstance(resolved, InputFile):
            return await self.request(method, payload, {field: resolved})
        payload[field] = resolved
        return await self.request(method, payload)

    # ------------------------------------------------------------------
    #  Updates & webhooks
    # ------------------------------------------------------------------

    async def get_updates(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        timeout: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Receive incoming updates using long polling.

        The transport timeout is extended by the long-poll *timeout* so the
        server can hold the request open for its full duration.

        Raises:
            ParseError: If ``result`` is missing or not a list.
        """
        payload = {"offset": offset, "limit": limit, "timeout": timeout, "allowed_updates": allowed_updates}
        transport_timeout = self._timeout + (timeout or 0)
        result = await self.request("getUpdates", payload, timeout=transport_timeout)
        if not isinstance(result, list):
            raise ParseError("getUpdates", 200, repr(result))
        return result

    async def set_webhook(
        self,
        url: str,
        certificate: Any = None,
        ip_address: Optional[str] = None,
        max_connections: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
        drop_pending_updates: Optional[bool] = None,
        secret_token: Optional[str] = None,
    ) -> bool:
        """Specify a URL and receive incoming updates via an outgoing webhook."""
        payload = {
            "url": url,
            "ip_address": ip_address,
            "max_connections": max_connections,
            "allowed_updates": allowed_updates,
            "drop_pending_updates": drop_pending_updates,
            "secret_token": secret_token,
        }
        if certificate is None:
            return await self.request("setWebhook", payload)
        return await self._send_media("setWebhook", "certificate", certificate, payload)

    async def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> bool:
        """Remove webhook integration so that ``getUpdates`` can be used."""
        return await self.request("deleteWebhook", {"drop_pending_updates": drop_pending_updates})

    async def get_webhook_info(self) -> WebhookInfo:
        """Get current webhook status."""
        return WebhookInfo.model_validate(await self.request("getWebhookInfo"))

    async def get_me(self) -> User:
        """Return basic information about the bot."""
        return User.model_validate(await self.request("getMe"))

    # ------------------------------------------------------------------
    #  Sending messages
    # ------------------------------------------------------------------

    async def send_message(
        self,
        chat_id: ChatId,
        text: str,
        parse_mode: Optional[str] = None,
        entities: Optional[List[Any]] = None,
        disable_web_page_preview: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        protect_content: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        allow_sending_without_reply: Optional[bool] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a text message.  Returns the sent Message."""
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "entities": entities,
            "disable_web_page_preview": disable_web_page_preview,
            "disable_notification": disable_notification,
            "protect_content": protect_content,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "allow_sending_without_reply": allow_sending_without_reply,
            "reply_markup": reply_markup,
        }
        logger.debug("Sending message", extra={"chat_id": chat_id, "api_method": "sendMessage", "text_preview": text[:80]})
        return await self.request("sendMessage", payload)

    async def send_content(self, chat_id: ChatId, content: Union[str, Mapping[str, Any]], **options: Any) -> Dict[str, Any]:
        """Send *content*, picking the method from its shape.

        A ``str`` is sent with ``sendMessage``.  A mapping holding one of the
        keys ``photo``/``image``, ``video``, ``audio``, ``document``,
        ``sticker``, ``animation``, ``voice`` is sent with the matching media
        method, the mapping's other keys becoming options; a mapping without
        media is sent as text from its ``text`` key.
        """
        if isinstance(content, str):
            return await self.send_message(chat_id, content, **options)

        rest = dict(content)
        for key, field in _CONTENT_MEDIA_KEYS:
            if rest.get(key) is not None:
                media = rest.pop(key)
                sender = getattr(self, f"send_{field}")
                return await sender(chat_id, media, **{**rest, **options})

        text = rest.pop("text", None)
        if text is None:
            raise ValueError("content mapping has neither media nor text")
        return await self.send_message(chat_id, text, **{**rest, **options})

    async def forward_message(
        self,
        chat_id: ChatId,
        from_chat_id: ChatId,
        message_id: int,
        disable_notification: Optional[bool] = None,
        protect_content: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Forward a message of any kind."""
        payload = {
            "chat_id": chat_id,
            "from_chat_id": from_chat_id,
            "message_id": message_id,
            "disable_notification": disable_notification,
            "protect_content": protect_content,
            "message_thread_id": message_thread_id,
        }
        return await self.request("forwardMessage", payload)

    async def copy_message(
        self,
        chat_id: ChatId,
        from_chat_id: ChatId,
        message_id: int,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Copy a message without a link to the original.  Returns the MessageId."""
        payload = {
            "chat_id": chat_id,
            "from_chat_id": from_chat_id,
            "message_id": message_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("copyMessage", payload)

    async def send_photo(
        self,
        chat_id: ChatId,
        photo: Any,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        has_spoiler: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a photo (path, URL, ``file_id``, bytes or stream)."""
        payload = {
            "chat_id": chat_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "has_spoiler": has_spoiler,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendPhoto", "photo", photo, payload)

    async def send_audio(
        self,
        chat_id: ChatId,
        audio: Any,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        duration: Optional[int] = None,
        performer: Optional[str] = None,
        title: Optional[str] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send an audio file to be displayed in the music player."""
        payload = {
            "chat_id": chat_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "duration": duration,
            "performer": performer,
            "title": title,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendAudio", "audio", audio, payload)

    async def send_document(
        self,
        chat_id: ChatId,
        document: Any,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        disable_content_type_detection: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a general file."""
        payload = {
            "chat_id": chat_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "disable_content_type_detection": disable_content_type_detection,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendDocument", "document", document, payload)

    async def send_video(
        self,
        chat_id: ChatId,
        video: Any,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        duration: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        supports_streaming: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a video file."""
        payload = {
            "chat_id": chat_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "duration": duration,
            "width": width,
            "height": height,
            "supports_streaming": supports_streaming,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendVideo", "video", video, payload)

    async def send_animation(
        self,
        chat_id: ChatId,
        animation: Any,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send an animation (GIF or H.264/MPEG-4 AVC video without sound)."""
        payload = {
            "chat_id": chat_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendAnimation", "animation", animation, payload)

    async def send_voice(
        self,
        chat_id: ChatId,
        voice: Any,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        duration: Optional[int] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send an audio file to be displayed as a playable voice message."""
        payload = {
            "chat_id": chat_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "duration": duration,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendVoice", "voice", voice, payload)

    async def send_video_note(
        self,
        chat_id: ChatId,
        video_note: Any,
        duration: Optional[int] = None,
        length: Optional[int] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a rounded square video message."""
        payload = {
            "chat_id": chat_id,
            "duration": duration,
            "length": length,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendVideoNote", "video_note", video_note, payload)

    async def send_sticker(
        self,
        chat_id: ChatId,
        sticker: Any,
        emoji: Optional[str] = None,
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a static, animated or video sticker."""
        payload = {
            "chat_id": chat_id,
            "emoji": emoji,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self._send_media("sendSticker", "sticker", sticker, payload)

    async def send_media_group(
        self,
        chat_id: ChatId,
        media: List[Any],
        disable_notification: Optional[bool] = None,
        message_thread_id: Optional[int] = None,
        reply_to_message_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Send a group of photos, videos, documents or audios as an album."""
        payload = {
            "chat_id": chat_id,
            "media": media,
            "disable_notification": disable_notification,
            "message_thread_id": message_thread_id,
            "reply_to_message_id": reply_to_message_id,
        }
        return await self.request("sendMediaGroup", payload)

    async def send_location(
        self,
        chat_id: ChatId,
        latitude: float,
        longitude: float,
        horizontal_accuracy: Optional[float] = None,
        live_period: Optional[int] = None,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a point on the map."""
        payload = {
            "chat_id": chat_id,
            "latitude": latitude,
            "longitude": longitude,
            "horizontal_accuracy": horizontal_accuracy,
            "live_period": live_period,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("sendLocation", payload)

    async def send_venue(
        self,
        chat_id: ChatId,
        latitude: float,
        longitude: float,
        title: str,
        address: str,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send information about a venue."""
        payload = {
            "chat_id": chat_id,
            "latitude": latitude,
            "longitude": longitude,
            "title": title,
            "address": address,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("sendVenue", payload)

    async def send_contact(
        self,
        chat_id: ChatId,
        phone_number: str,
        first_name: str,
        last_name: Optional[str] = None,
        vcard: Optional[str] = None,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a phone contact."""
        payload = {
            "chat_id": chat_id,
            "phone_number": phone_number,
            "first_name": first_name,
            "last_name": last_name,
            "vcard": vcard,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("sendContact", payload)

    async def send_poll(
        self,
        chat_id: ChatId,
        question: str,
        options: List[str],
        is_anonymous: Optional[bool] = None,
        type: Optional[str] = None,
        allows_multiple_answers: Optional[bool] = None,
        correct_option_id: Optional[int] = None,
        open_period: Optional[int] = None,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send a native poll."""
        payload = {
            "chat_id": chat_id,
            "question": question,
            "options": options,
            "is_anonymous": is_anonymous,
            "type": type,
            "allows_multiple_answers": allows_multiple_answers,
            "correct_option_id": correct_option_id,
            "open_period": open_period,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("sendPoll", payload)

    async def send_dice(
        self,
        chat_id: ChatId,
        emoji: Optional[str] = None,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Any = None,
    ) -> Dict[str, Any]:
        """Send an animated emoji that will display a random value."""
        payload = {
            "chat_id": chat_id,
            "emoji": emoji,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("sendDice", payload)

    async def send_chat_action(self, chat_id: ChatId, action: str, message_thread_id: Optional[int] = None) -> bool:
        """Tell the user that something is happening on the bot's side."""
        payload = {"chat_id": chat_id, "action": action, "message_thread_id": message_thread_id}
        return await self.request("sendChatAction", payload)

    # ------------------------------------------------------------------
    #  Editing & deleting
    # ------------------------------------------------------------------

    async def edit_message_text(
        self,
        text: str,
        chat_id: Optional[ChatId] = None,
        message_id: Optional[int] = None,
        inline_message_id: Optional[str] = None,
        parse_mode: Optional[str] = None,
        entities: Optional[List[Any]] = None,
        disable_web_page_preview: Optional[bool] = None,
        reply_markup: Any = None,
    ) -> Union[Dict[str, Any], bool]:
        """Edit text messages.  Identify the message by chat+message id or by inline id."""
        payload = {
            "text": text,
            "chat_id": chat_id,
            "message_id": message_id,
            "inline_message_id": inline_message_id,
            "parse_mode": parse_mode,
            "entities": entities,
            "disable_web_page_preview": disable_web_page_preview,
            "reply_markup": reply_markup,
        }
        return await self.request("editMessageText", payload)

    async def edit_message_caption(
        self,
        chat_id: Optional[ChatId] = None,
        message_id: Optional[int] = None,
        inline_message_id: Optional[str] = None,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        reply_markup: Any = None,
    ) -> Union[Dict[str, Any], bool]:
        """Edit captions of messages."""
        payload = {
            "chat_id": chat_id,
            "message_id": message_id,
            "inline_message_id": inline_message_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "reply_markup": reply_markup,
        }
        return await self.request("editMessageCaption", payload)

    async def edit_message_reply_markup(
        self,
        chat_id: Optional[ChatId] = None,
        message_id: Optional[int] = None,
        inline_message_id: Optional[str] = None,
        reply_markup: Any = None,
    ) -> Union[Dict[str, Any], bool]:
        """Edit only the reply markup of messages."""
        payload = {
            "chat_id": chat_id,
            "message_id": message_id,
            "inline_message_id": inline_message_id,
            "reply_markup": reply_markup,
        }
        return await self.request("editMessageReplyMarkup", payload)

    async def delete_message(self, chat_id: ChatId, message_id: int) -> bool:
        """Delete a message, including service messages."""
        return await self.request("deleteMessage", {"chat_id": chat_id, "message_id": message_id})

    # ------------------------------------------------------------------
    #  Queries
    # ------------------------------------------------------------------

    async def answer_callback_query(
        self,
        callback_query_id: str,
        text: Optional[str] = None,
        show_alert: Optional[bool] = None,
        url: Optional[str] = None,
        cache_time: Optional[int] = None,
    ) -> bool:
        """Send an answer to a callback query so the client stops its spinner."""
        payload = {
            "callback_query_id": callback_query_id,
            "text": text,
            "show_alert": show_alert,
            "url": url,
            "cache_time": cache_time,
        }
        return await self.request("answerCallbackQuery", payload)

    async def answer_inline_query(
        self,
        inline_query_id: str,
        results: List[Any],
        cache_time: Optional[int] = None,
        is_personal: Optional[bool] = None,
        next_offset: Optional[str] = None,
    ) -> bool:
        """Send answers to an inline query."""
        payload = {
            "inline_query_id": inline_query_id,
            "results": results,
            "cache_time": cache_time,
            "is_personal": is_personal,
            "next_offset": next_offset,
        }
        return await self.request("answerInlineQuery", payload)

    async def answer_shipping_query(
        self,
        shipping_query_id: str,
        ok: bool,
        shipping_options: Optional[List[Any]] = None,
        error_message: Optional[str] = None,
    ) -> bool:
        """Reply to a shipping query."""
        payload = {
            "shipping_query_id": shipping_query_id,
            "ok": ok,
            "shipping_options": shipping_options,
            "error_message": error_message,
        }
        return await self.request("answerShippingQuery", payload)

    async def answer_pre_checkout_query(
        self,
        pre_checkout_query_id: str,
        ok: bool,
        error_message: Optional[str] = None,
    ) -> bool:
        """Respond to a pre-checkout query."""
        payload = {"pre_checkout_query_id": pre_checkout_query_id, "ok": ok, "error_message": error_message}
        return await self.request("answerPreCheckoutQuery", payload)

    # ------------------------------------------------------------------
    #  Chats & members
    # ------------------------------------------------------------------

    async def get_chat(self, chat_id: ChatId) -> Dict[str, Any]:
        """Get up-to-date information about the chat."""
        return await self.request("getChat", {"chat_id": chat_id})

    async def get_chat_member(self, chat_id: ChatId, user_id: int) -> Dict[str, Any]:
        """Get information about a member of a chat."""
        return await self.request("getChatMember", {"chat_id": chat_id, "user_id": user_id})

    async def get_chat_administrators(self, chat_id: ChatId) -> List[Dict[str, Any]]:
        """Get a list of administrators in a chat."""
        return await self.request("getChatAdministrators", {"chat_id": chat_id})

    async def ban_chat_member(
        self,
        chat_id: ChatId,
        user_id: int,
        until_date: Optional[int] = None,
        revoke_messages: Optional[bool] = None,
    ) -> bool:
        """Ban a user in a group, a supergroup or a channel."""
        payload = {"chat_id": chat_id, "user_id": user_id, "until_date": until_date, "revoke_messages": revoke_messages}
        return await self.request("banChatMember", payload)

    async def unban_chat_member(self, chat_id: ChatId, user_id: int, only_if_banned: Optional[bool] = None) -> bool:
        """Unban a previously banned user."""
        payload = {"chat_id": chat_id, "user_id": user_id, "only_if_banned": only_if_banned}
        return await self.request("unbanChatMember", payload)

    async def leave_chat(self, chat_id: ChatId) -> bool:
        """Leave a group, supergroup or channel."""
        return await self.request("leaveChat", {"chat_id": chat_id})

    async def approve_chat_join_request(self, chat_id: ChatId, user_id: int) -> bool:
        """Approve a chat join request."""
        return await self.request("approveChatJoinRequest", {"chat_id": chat_id, "user_id": user_id})

    async def decline_chat_join_request(self, chat_id: ChatId, user_id: int) -> bool:
        """Decline a chat join request."""
        return await self.request("declineChatJoinRequest", {"chat_id": chat_id, "user_id": user_id})

    # ------------------------------------------------------------------
    #  Commands
    # ------------------------------------------------------------------

    async def set_my_commands(self, commands: List[Any], scope: Any = None, language_code: Optional[str] = None) -> bool:
        """Change the list of the bot's commands."""
        payload = {"commands": commands, "scope": scope, "language_code": language_code}
        return await self.request("setMyCommands", payload)

    async def get_my_commands(self, scope: Any = None, language_code: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get the current list of the bot's commands."""
        return await self.request("getMyCommands", {"scope": scope, "language_code": language_code})

    async def delete_my_commands(self, scope: Any = None, language_code: Optional[str] = None) -> bool:
        """Delete the list of the bot's commands."""
        return await self.request("deleteMyCommands", {"scope": scope, "language_code": language_code})

    # ------------------------------------------------------------------
    #  Files
    # ------------------------------------------------------------------

    async def get_file(self, file_id: str) -> File:
        """Resolve a ``file_id`` to a :class:`~tehsdk.models.File` with a download path."""
        return File.model_validate(await self.request("getFile", {"file_id": file_id}))

    def file_url(self, file_path: str) -> str:
        """Download URL for a ``file_path`` returned by :meth:`get_file`."""
        return f"{self._api_root}/file/bot{self._token}/{file_path}"

    def _download(self, url: str, destination: str) -> str:
        try:
            with requests.get(url, stream=True, timeout=self._timeout) as response:
                response.raise_for_status()
                with open(destination, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=64 * 1024):
                        fh.write(chunk)
        except requests.RequestException as exc:
            logger.error("File download failed", extra={"api_method": "download", "error": str(exc)})
            raise TransportError("download", exc) from exc
        return destination

    async def download_file(self, file_id: str, destination: Union[str, os.PathLike]) -> str:
        """Download the file behind *file_id* to *destination* and return its path.

        Raises:
            RemoteAPIError: If ``getFile`` fails or returns no ``file_path``.
            TransportError: If the download itself fails.
        """
        tg_file = await self.get_file(file_id)
        if not tg_file.file_path:
            raise RemoteAPIError(404, "File has no download path", method="getFile")
        url = self.file_url(tg_file.file_path)
        return await asyncio.to_thread(self._download, url, os.fspath(destination))
