"""Tests for the shared JSON GET helper."""

import httpx
import pytest
import respx

from market_pulse.core.exceptions import ParseError, ProtocolError, TransportError
from market_pulse.core.http import fetch_json

URL = "https://api.test/v1/thing"


async def _get(**kwargs):
    return await fetch_json(URL, source="Test", timeout=1.0, user_agent="ua/1.0", **kwargs)


class TestFetchJson:
    @respx.mock
    async def test_returns_decoded_body(self):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={"ok": True}))
        assert await _get() == {"ok": True}
        request = route.calls.last.request
        assert request.headers["User-Agent"] == "ua/1.0"
        assert request.headers["Accept"] == "application/json"

    @respx.mock
    async def test_params_are_encoded(self):
        route = respx.get(host="api.test", path="/v1/thing").mock(
            return_value=httpx.Response(200, json=[])
        )
        await _get(params={"ids": "abc"})
        assert route.calls.last.request.url.params["ids"] == "abc"

    @respx.mock
    async def test_timeout_is_transport_error(self):
        respx.get(URL).mock(side_effect=httpx.ConnectTimeout("slow"))
        with pytest.raises(TransportError, match="Test request timed out"):
            await _get()

    @respx.mock
    async def test_connection_failure_is_transport_error(self):
        respx.get(URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(TransportError, match="Test request"):
            await _get()

    @respx.mock
    async def test_non_success_status_is_protocol_error(self):
        respx.get(URL).mock(return_value=httpx.Response(429, text="slow down"))
        with pytest.raises(ProtocolError, match="Test status 429") as exc_info:
            await _get()
        assert exc_info.value.context["status_code"] == 429

    @respx.mock
    async def test_invalid_json_is_parse_error(self):
        respx.get(URL).mock(return_value=httpx.Response(200, text="<html>"))
        with pytest.raises(ParseError, match="Test parse"):
            await _get()
