"""
Tests for the Sendexa Notifier
==============================
HTTP payloads and failure mapping, using an httpx mock transport.
"""

import json
from base64 import b64encode

import httpx
import pytest

from sendexa_core.notifier import MessageStatus, SendexaNotifier

from conftest import PHONE


def _notifier(handler) -> SendexaNotifier:
    return SendexaNotifier(
        api_key="key",
        api_secret="secret",
        transport=httpx.MockTransport(handler),
    )


class TestSendexaNotifier:

    @pytest.mark.asyncio
    async def test_send_success(self):
        """Should post the message with Basic auth and bare digits."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "data": {"messageId": "m-1"}})

        notifier = _notifier(handler)
        await notifier.initialize()
        result = await notifier.send(PHONE, "Sendexa", "Your verification code is 483920")
        await notifier.close()

        assert result.success is True
        assert result.provider_message_id == "m-1"
        assert result.status == MessageStatus.SENT
        assert seen["url"] == "https://api.sendexa.co/v1/sms/send"
        assert seen["auth"] == "Basic " + b64encode(b"key:secret").decode()
        assert seen["body"] == {
            "to": "233244123456",
            "from": "Sendexa",
            "message": "Your verification code is 483920",
        }

    @pytest.mark.asyncio
    async def test_send_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Sender ID not approved"})

        result = await _notifier(handler).send(PHONE, "Unknown", "hi")

        assert result.success is False
        assert result.status == MessageStatus.REJECTED
        assert result.error_code == "400"
        assert result.error_message == "Sender ID not approved"

    @pytest.mark.asyncio
    async def test_send_server_error_without_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="upstream down")

        result = await _notifier(handler).send(PHONE, "Sendexa", "hi")

        assert result.success is False
        assert result.status == MessageStatus.FAILED
        assert result.error_message == "upstream down"

    @pytest.mark.asyncio
    async def test_send_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _notifier(handler).send(PHONE, "Sendexa", "hi")

        assert result.success is False
        assert result.status == MessageStatus.FAILED
        assert "connection refused" in result.error_message

    @pytest.mark.asyncio
    async def test_health_follows_lifecycle(self):
        notifier = _notifier(lambda request: httpx.Response(200, json={}))

        assert await notifier.health_check() is False
        await notifier.initialize()
        assert await notifier.health_check() is True
        await notifier.close()
        assert await notifier.health_check() is False
