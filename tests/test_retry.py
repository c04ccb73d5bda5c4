"""Tests for the bounded retry helper."""

import sys
import os
from unittest.mock import patch, AsyncMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tehsdk.exceptions import ParseError, RemoteAPIError, TransportError
from tehsdk.retry import call_with_retry, is_retryable_error


class TestIsRetryable:
    @pytest.mark.parametrize("exc, expected", [
        (TransportError("getMe", ConnectionError("x")), True),
        (RemoteAPIError(429, "Too Many Requests"), True),
        (RemoteAPIError(502, "Bad Gateway"), True),
        (RemoteAPIError(400, "Bad Request"), False),
        (RemoteAPIError(403, "Forbidden"), False),
        (ParseError("getMe", 200, "<html>"), False),
        (ValueError("nope"), False),
    ])
    def test_classification(self, exc, expected) -> None:
        assert is_retryable_error(exc) is expected


class TestCallWithRetry:
    @pytest.mark.asyncio
    @patch("tehsdk.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_succeeds_after_transient_failures(self, mock_sleep: AsyncMock) -> None:
        func = AsyncMock(side_effect=[TransportError("getMe", OSError("x")), RemoteAPIError(500), "ok"])

        result = await call_with_retry(func, 1, max_attempts=3, base_delay=0.5, text="hi")

        assert result == "ok"
        assert func.await_count == 3
        func.assert_awaited_with(1, text="hi")
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    @patch("tehsdk.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_honours_retry_after(self, mock_sleep: AsyncMock) -> None:
        func = AsyncMock(side_effect=[RemoteAPIError(429, "Flood", {"retry_after": 7}), "ok"])

        assert await call_with_retry(func) == "ok"
        mock_sleep.assert_awaited_once_with(7.0)

    @pytest.mark.asyncio
    @patch("tehsdk.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_non_retryable_raises_immediately(self, mock_sleep: AsyncMock) -> None:
        func = AsyncMock(side_effect=RemoteAPIError(400, "Bad Request"))

        with pytest.raises(RemoteAPIError):
            await call_with_retry(func, max_attempts=5)
        assert func.await_count == 1
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("tehsdk.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_gives_up_after_max_attempts(self, mock_sleep: AsyncMock) -> None:
        func = AsyncMock(side_effect=TransportError("getMe", OSError("down")))

        with pytest.raises(TransportError):
            await call_with_retry(func, max_attempts=2)
        assert func.await_count == 2
        assert mock_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            await call_with_retry(AsyncMock(), max_attempts=0)
