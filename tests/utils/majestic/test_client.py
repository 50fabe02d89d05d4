import logging

import httpx
import pytest

from src.utils.majestic.client import MAJESTIC_API_URL, MajesticClient, encode_value
from src.utils.majestic.errors import ParseError, ProviderError, TransportError
from src.utils.majestic.util import configure_logging
from tests.clients.MajesticStub import MajesticStub, ok_envelope


def test_encode_value_turns_flags_into_digits():
    assert encode_value(True) == "1"
    assert encode_value(False) == "0"
    assert encode_value(50000) == "50000"
    assert encode_value("fresh") == "fresh"


@pytest.mark.asyncio
async def test_call_sends_key_and_command_first(stub, majestic_client):
    await majestic_client.call(
        "GetBackLinkData", {"item": "majestic.com", "Count": 10, "Flag": True}
    )

    request = stub.requests[0]
    assert request.method == "GET"
    assert str(request.url).startswith(MAJESTIC_API_URL)
    assert stub.last_param_names == ["app_api_key", "cmd", "item", "Count", "Flag"]
    assert stub.last_params == {
        "app_api_key": "test-key",
        "cmd": "GetBackLinkData",
        "item": "majestic.com",
        "Count": "10",
        "Flag": "1",
    }


@pytest.mark.asyncio
async def test_api_key_never_reaches_the_logs(stub, caplog):
    configure_logging()
    caplog.set_level(logging.INFO)
    client = MajesticClient("SECRET-KEY-123", transport=stub.transport)

    await client.call("GetIndexItemInfo", {"items": 1, "item0": "majestic.com"})

    stub.envelope = {"Code": "InvalidAPIKey", "ErrorMessage": "The API key is invalid"}
    with pytest.raises(ProviderError):
        await client.call("GetSubscriptionInfo", {})

    assert stub.last_params["app_api_key"] == "SECRET-KEY-123"
    assert caplog.records
    assert all("SECRET-KEY-123" not in record.getMessage() for record in caplog.records)


def test_configure_logging_quiets_http_request_logs():
    configure_logging()

    assert logging.getLogger("httpx").getEffectiveLevel() >= logging.WARNING
    assert logging.getLogger("httpcore").getEffectiveLevel() >= logging.WARNING


@pytest.mark.asyncio
async def test_call_returns_envelope_unchanged(stub, majestic_client):
    envelope = ok_envelope({"Results": {"Data": [{"Item": "majestic.com"}]}}, Extra=1)
    stub.envelope = envelope

    assert await majestic_client.call("GetIndexItemInfo", {}) == envelope


@pytest.mark.asyncio
async def test_provider_error_carries_error_message(stub, majestic_client):
    stub.envelope = {"Code": "InvalidAPIKey", "ErrorMessage": "The API key is invalid"}

    with pytest.raises(ProviderError) as excinfo:
        await majestic_client.call("GetSubscriptionInfo", {})

    assert excinfo.value.message == "The API key is invalid"
    assert excinfo.value.code == "InvalidAPIKey"
    assert "InvalidAPIKey" not in str(excinfo.value)


@pytest.mark.asyncio
async def test_provider_error_falls_back_to_code(stub, majestic_client):
    stub.envelope = {"Code": "InsufficientIndexItemInfoUnits", "ErrorMessage": ""}

    with pytest.raises(ProviderError) as excinfo:
        await majestic_client.call("GetIndexItemInfo", {})

    assert excinfo.value.message == "InsufficientIndexItemInfoUnits"


@pytest.mark.asyncio
async def test_non_success_status_raises_transport_error():
    stub = MajesticStub(status_code=503)
    client = MajesticClient("test-key", transport=stub.transport)

    with pytest.raises(TransportError) as excinfo:
        await client.call("GetTopPages", {})

    assert excinfo.value.status_code == 503
    assert excinfo.value.reason == "Service Unavailable"


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = MajesticClient("test-key", transport=httpx.MockTransport(refuse))

    with pytest.raises(TransportError) as excinfo:
        await client.call("GetTopPages", {})

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_raises_parse_error():
    stub = MajesticStub(body=b"<html>Bad gateway</html>")
    client = MajesticClient("test-key", transport=stub.transport)

    with pytest.raises(ParseError):
        await client.call("GetAnchorText", {})


@pytest.mark.asyncio
async def test_non_object_json_raises_parse_error():
    stub = MajesticStub(body=b"[1, 2, 3]")
    client = MajesticClient("test-key", transport=stub.transport)

    with pytest.raises(ParseError):
        await client.call("GetAnchorText", {})
