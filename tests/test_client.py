"""Tests for TehClient transport, error classification and endpoint wrappers."""

import io
import json
import sys
import os
from unittest.mock import patch, MagicMock, AsyncMock

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tehcore.config import BotOptions
from tehsdk.client import TehClient, encode_multipart
from tehsdk.exceptions import (
    ConfigurationError,
    ParseError,
    RemoteAPIError,
    TehError,
    TransportError,
)
from tehsdk.files import InputFile, get_mime_type
from tehsdk.models import User

TOKEN = "123:abc"


def _response(body=None, status_code: int = 200, text: str = "") -> MagicMock:
    """Build a fake ``requests`` response returning *body* from ``.json()``."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text or json.dumps(body)
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


# ── Exceptions ───────────────────────────────────────────────────────────────


class TestExceptions:
    """Validate the exception hierarchy."""

    def test_remote_api_error_attributes(self) -> None:
        exc = RemoteAPIError(400, "Bad Request: chat not found", {"retry_after": 5}, method="sendMessage")
        assert exc.error_code == 400
        assert exc.description == "Bad Request: chat not found"
        assert exc.retry_after == 5
        assert exc.method == "sendMessage"
        assert str(exc) == "API error 400: Bad Request: chat not found"

    def test_remote_api_error_defaults(self) -> None:
        exc = RemoteAPIError(500)
        assert exc.description == "Unknown error"
        assert exc.parameters == {}
        assert exc.retry_after is None

    def test_parse_error_truncates_raw(self) -> None:
        exc = ParseError("getMe", 502, "x" * 500)
        assert len(exc.raw) == 100
        assert exc.status_code == 502

    def test_transport_error_mentions_method(self) -> None:
        exc = TransportError("getUpdates", ConnectionError("offline"))
        assert exc.method == "getUpdates"
        assert "getUpdates" in str(exc)
        assert "offline" in str(exc)

    @pytest.mark.parametrize("cls", [ConfigurationError, ParseError, RemoteAPIError, TransportError])
    def test_all_derive_from_base(self, cls) -> None:
        assert issubclass(cls, TehError)


# ── Construction ─────────────────────────────────────────────────────────────


class TestClientInit:
    """Validate client initialisation."""

    @pytest.mark.parametrize("token", ["", None])
    def test_empty_token_raises(self, token) -> None:
        with pytest.raises(ConfigurationError):
            TehClient(token)

    def test_base_url_strip(self) -> None:
        c = TehClient(TOKEN, base_api_url="http://localhost:8081/")
        assert c._base_url == "http://localhost:8081/bot123:abc"

    def test_default_timeout(self) -> None:
        assert TehClient(TOKEN).timeout == 30.0

    def test_from_options(self) -> None:
        options = BotOptions(request_timeout=5, base_api_url="http://local")
        c = TehClient.from_options(TOKEN, options)
        assert c.timeout == 5
        assert c._base_url == "http://local/bot123:abc"


# ── _post transport ──────────────────────────────────────────────────────────


class TestPostHelper:
    """Validate the synchronous transport and failure classification."""

    @patch("tehsdk.client.requests.post")
    def test_success_returns_result(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"id": 1}})

        c = TehClient(TOKEN)
        result = c._post("getMe", {"a": 1, "b": None})

        assert result == {"id": 1}
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.telegram.org/bot123:abc/getMe"
        assert kwargs["json"] == {"a": 1}
        assert kwargs["timeout"] == 30.0

    @patch("tehsdk.client.requests.post")
    def test_remote_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(
            {"ok": False, "error_code": 429, "description": "Too Many Requests", "parameters": {"retry_after": 3}},
            status_code=429,
        )

        c = TehClient(TOKEN)
        with pytest.raises(RemoteAPIError) as exc_info:
            c._post("sendMessage", {"chat_id": 1, "text": "hi"})
        assert exc_info.value.error_code == 429
        assert exc_info.value.retry_after == 3
        assert exc_info.value.method == "sendMessage"

    @patch("tehsdk.client.requests.post")
    def test_non_json_body_is_parse_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(ValueError("No JSON"), status_code=502, text="<html>Bad Gateway</html>")

        c = TehClient(TOKEN)
        with pytest.raises(ParseError) as exc_info:
            c._post("getMe")
        assert exc_info.value.status_code == 502
        assert exc_info.value.raw == "<html>Bad Gateway</html>"

    @patch("tehsdk.client.requests.post")
    def test_json_that_is_not_an_object_is_parse_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(["not", "an", "object"])

        with pytest.raises(ParseError):
            TehClient(TOKEN)._post("getMe")

    @patch("tehsdk.client.requests.post")
    def test_network_error_is_transport_error(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.ConnectionError("offline")

        c = TehClient(TOKEN)
        with pytest.raises(TransportError) as exc_info:
            c._post("getMe")
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    @patch("tehsdk.client.requests.post")
    def test_timeout_is_transport_error(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.Timeout("too slow")

        with pytest.raises(TransportError):
            TehClient(TOKEN)._post("getMe")

    @patch("tehsdk.client.requests.post")
    def test_multipart_upload(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"message_id": 3}})
        upload = InputFile(b"\x89PNG", "cat.png", get_mime_type("cat.png"))

        TehClient(TOKEN)._post("sendPhoto", {"chat_id": 1, "caption": "cat"}, {"photo": upload})

        kwargs = mock_post.call_args.kwargs
        assert "json" not in kwargs
        assert kwargs["headers"]["Content-Type"].startswith("multipart/form-data; boundary=")
        body = kwargs["data"]
        assert b'name="photo"; filename="cat.png"' in body
        assert b"Content-Type: image/png" in body
        assert b'name="caption"' in body

    @patch("tehsdk.client.requests.post")
    def test_multipart_closes_owned_stream(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.ConnectionError("offline")
        stream = io.BytesIO(b"%PDF-1.4")
        upload = InputFile(stream, "a.pdf", owns_stream=True)

        with pytest.raises(TransportError):
            TehClient(TOKEN)._post("sendDocument", {"chat_id": 1}, {"document": upload})
        assert stream.closed


# ── Multipart encoding ───────────────────────────────────────────────────────


class TestEncodeMultipart:
    """Validate non-file field encoding and per-part content types."""

    def test_unknown_extension_is_octet_stream(self) -> None:
        upload = InputFile(b"data", "blob.xyz", get_mime_type("blob.xyz"))
        body, content_type = encode_multipart({"chat_id": 1}, {"document": upload})
        assert content_type.startswith("multipart/form-data")
        assert b"Content-Type: application/octet-stream" in body

    def test_structured_fields_are_json(self) -> None:
        upload = InputFile(b"data", "a.txt", "text/plain")
        markup = {"inline_keyboard": [[{"text": "Go", "callback_data": "go"}]]}
        body, _ = encode_multipart(
            {"chat_id": 7, "reply_markup": markup, "disable_notification": True, "caption": None},
            {"document": upload},
        )
        assert json.dumps(markup).encode() in body
        assert b"true" in body
        assert b'name="caption"' not in body


# ── Endpoint wrappers ────────────────────────────────────────────────────────


class TestEndpointMethods:
    """Spot-check selected endpoint wrapper coroutines."""

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_get_me_returns_model(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"id": 1, "is_bot": True, "first_name": "Bot"}})

        me = await TehClient(TOKEN).get_me()

        assert isinstance(me, User)
        assert me.is_bot is True

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_send_message_payload(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"message_id": 1}})

        result = await TehClient(TOKEN).send_message(42, "hello", reply_to_message_id=7, parse_mode="HTML")

        assert result == {"message_id": 1}
        args, kwargs = mock_post.call_args
        assert args[0].endswith("/sendMessage")
        assert kwargs["json"] == {"chat_id": 42, "text": "hello", "parse_mode": "HTML", "reply_to_message_id": 7}

    @pytest.mark.asyncio
    async def test_send_message_rejects_unknown_option(self) -> None:
        with pytest.raises(TypeError):
            await TehClient(TOKEN).send_message(42, "hello", reply_to=7)

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_get_updates_extends_timeout(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": []})

        updates = await TehClient(TOKEN).get_updates(offset=5, limit=100, timeout=30, allowed_updates=[])

        assert updates == []
        kwargs = mock_post.call_args.kwargs
        assert kwargs["timeout"] == 60.0
        assert kwargs["json"] == {"offset": 5, "limit": 100, "timeout": 30, "allowed_updates": []}

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_get_updates_without_result_list(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True})

        with pytest.raises(ParseError) as exc_info:
            await TehClient(TOKEN).get_updates(offset=0)

        assert exc_info.value.method == "getUpdates"
        assert exc_info.value.raw == "None"

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_send_photo_by_url_is_json(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"message_id": 2}})

        await TehClient(TOKEN).send_photo(1, "https://example.com/cat.jpg", caption="cat")

        kwargs = mock_post.call_args.kwargs
        assert kwargs["json"] == {"chat_id": 1, "photo": "https://example.com/cat.jpg", "caption": "cat"}

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_send_document_from_path_uploads(self, mock_post: MagicMock, tmp_path) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"message_id": 2}})
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.4")

        await TehClient(TOKEN).send_document(1, str(path))

        body = mock_post.call_args.kwargs["data"]
        assert b'filename="report.pdf"' in body
        assert b"Content-Type: application/pdf" in body

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_answer_callback_query(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": True})

        assert await TehClient(TOKEN).answer_callback_query("cb1", text="Done") is True
        assert mock_post.call_args.kwargs["json"] == {"callback_query_id": "cb1", "text": "Done"}


class TestSendContent:
    """``send_content`` picks the Bot API method from the content's shape."""

    @pytest.mark.asyncio
    async def test_string_goes_to_send_message(self) -> None:
        c = TehClient(TOKEN)
        with patch.object(c, "send_message", new=AsyncMock(return_value={"message_id": 1})) as send:
            await c.send_content(5, "hi", parse_mode="HTML")
        send.assert_awaited_once_with(5, "hi", parse_mode="HTML")

    @pytest.mark.asyncio
    async def test_image_alias_goes_to_send_photo(self) -> None:
        c = TehClient(TOKEN)
        with patch.object(c, "send_photo", new=AsyncMock()) as send:
            await c.send_content(5, {"image": "file-id", "caption": "c"})
        send.assert_awaited_once_with(5, "file-id", caption="c")

    @pytest.mark.asyncio
    async def test_mapping_with_text(self) -> None:
        c = TehClient(TOKEN)
        with patch.object(c, "send_message", new=AsyncMock()) as send:
            await c.send_content(5, {"text": "hello"}, disable_notification=True)
        send.assert_awaited_once_with(5, "hello", disable_notification=True)

    @pytest.mark.asyncio
    async def test_empty_mapping_raises(self) -> None:
        with pytest.raises(ValueError):
            await TehClient(TOKEN).send_content(5, {})


# ── File download ────────────────────────────────────────────────────────────


class TestDownloadFile:
    """Validate ``download_file`` streaming to disk."""

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.get")
    @patch("tehsdk.client.requests.post")
    async def test_writes_chunks(self, mock_post: MagicMock, mock_get: MagicMock, tmp_path) -> None:
        mock_post.return_value = _response(
            {"ok": True, "result": {"file_id": "f1", "file_unique_id": "u1", "file_path": "photos/f1.jpg"}}
        )
        download = MagicMock()
        download.iter_content.return_value = [b"ab", b"cd"]
        mock_get.return_value.__enter__.return_value = download

        destination = tmp_path / "f1.jpg"
        result = await TehClient(TOKEN).download_file("f1", destination)

        assert result == str(destination)
        assert destination.read_bytes() == b"abcd"
        assert mock_get.call_args.args[0] == "https://api.telegram.org/file/bot123:abc/photos/f1.jpg"

    @pytest.mark.asyncio
    @patch("tehsdk.client.requests.post")
    async def test_missing_file_path(self, mock_post: MagicMock, tmp_path) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"file_id": "f1", "file_unique_id": "u1"}})

        with pytest.raises(RemoteAPIError):
            await TehClient(TOKEN).download_file("f1", tmp_path / "x")
