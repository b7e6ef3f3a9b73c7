"""
Unit tests for ntfy notifications.
"""

import httpx
import pytest

from checker.errors import NotifyError
from checker.notifier import NtfyNotifier, compose_error_message
from utilities.config import CheckerConfig


class TestNtfyNotifier:
    """Test cases for NtfyNotifier."""

    @pytest.mark.asyncio
    async def test_send_posts_message_with_title(self, checker_config):
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"id": "abc"})

        notifier = NtfyNotifier(checker_config, transport=httpx.MockTransport(handler))
        await notifier.send("JLPT check complete - no changes detected.")

        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://ntfy.sh/jlpt-test"
        assert request.headers["Title"] == "JLPT Update"
        assert request.content == b"JLPT check complete - no changes detected."

    @pytest.mark.asyncio
    async def test_custom_server(self):
        config = CheckerConfig(_env_file=None, ntfy_topic="alerts", ntfy_base_url="https://ntfy.example.org/")
        urls = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200)

        await NtfyNotifier(config, transport=httpx.MockTransport(handler)).send("hi")

        assert urls == ["https://ntfy.example.org/alerts"]

    @pytest.mark.asyncio
    async def test_rejected_delivery_raises(self, checker_config):
        notifier = NtfyNotifier(
            checker_config,
            transport=httpx.MockTransport(lambda request: httpx.Response(429))
        )

        with pytest.raises(NotifyError) as exc_info:
            await notifier.send("hello")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_network_failure_raises(self, checker_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        notifier = NtfyNotifier(checker_config, transport=httpx.MockTransport(handler))

        with pytest.raises(NotifyError) as exc_info:
            await notifier.send("hello")

        assert exc_info.value.status_code is None


def test_compose_error_message():
    assert compose_error_message(ValueError("boom")) == "JLPT checker error: boom"
