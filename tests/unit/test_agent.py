"""
Unit tests for BinanceAgent.

These tests use a recording transport so that no network calls are made.
"""

import asyncio
import hashlib
import hmac
from types import SimpleNamespace

import pytest

from binance_rest.exchange.agent import BinanceAgent, rejection_reason
from binance_rest.exchange.composer import API_KEY_HEADER, RequestConfig
from binance_rest.exchange.exceptions import (
    AuthenticationRequiredError,
    ExchangeAPIError,
    TransportError
)
from binance_rest.exchange.exchange_config import TESTNET_CONFIG
from binance_rest.exchange.models import ApiAuth
from binance_rest.exchange.transport import Response

from tests.helpers import FROZEN_TIME_MS, RecordingTransport


class FailingCall(Exception):
    """Transport error exposing an optional response, like aiohttp/axios errors."""

    def __init__(self, response=None):
        super().__init__("request failed")
        if response is not None:
            self.response = response


class GatedTransport(RecordingTransport):
    """Transport that blocks every call until released."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def execute(self, descriptor):
        self.calls.append(descriptor)
        await self.release.wait()
        return self.response


def _signature_of(url_or_body: str) -> str:
    return url_or_body.rsplit("signature=", 1)[1]


def _expected_signature(secret: str, url_or_body: str) -> str:
    payload = url_or_body.split("?", 1)[-1].rsplit("&signature=", 1)[0]
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


@pytest.fixture
def agent(auth, transport, frozen_clock):
    """Create an authenticated agent with a recording transport."""
    return BinanceAgent(auth=auth, transport=transport, clock=frozen_clock)


# ============================================================================
# Credential Lifecycle Tests
# ============================================================================

@pytest.mark.unit
def test_agent_starts_unauthenticated(transport):
    """Without keys the agent is not upgraded."""
    agent = BinanceAgent(transport=transport)

    assert agent.is_upgraded() is False
    assert agent.auth is None


@pytest.mark.unit
def test_agent_with_auth_is_upgraded(agent, auth):
    """Keys supplied at construction upgrade the agent."""
    assert agent.is_upgraded() is True
    assert agent.auth == auth


@pytest.mark.unit
def test_upgrade_replaces_credentials(agent):
    """upgrade() replaces the key pair wholesale."""
    new_auth = ApiAuth(public_key="pk2", private_key="sk2")

    agent.upgrade(new_auth)

    assert agent.auth is new_auth
    assert agent.is_upgraded() is True


@pytest.mark.unit
def test_default_transport_is_aiohttp():
    """Agents without an explicit transport use AiohttpTransport."""
    from binance_rest.exchange.transport import AiohttpTransport

    assert isinstance(BinanceAgent().transport, AiohttpTransport)


# ============================================================================
# Public Request Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_public_request_descriptor(transport):
    """Public requests are GETs with query parameters and no body."""
    agent = BinanceAgent(transport=transport)

    await agent.public_request("ticker", {"symbol": "BTCUSDT"})

    descriptor = transport.last
    assert descriptor.method == "GET"
    assert descriptor.url == "/ticker?symbol=BTCUSDT"
    assert descriptor.data is None
    assert API_KEY_HEADER not in descriptor.headers


@pytest.mark.asyncio
@pytest.mark.unit
async def test_public_request_returns_response_verbatim():
    """The transport response is returned unchanged."""
    response = Response(status=200, data={"serverTime": 1}, headers={"x": "y"})
    agent = BinanceAgent(transport=RecordingTransport(response=response))

    assert await agent.public_request("api/v1/time") is response


@pytest.mark.asyncio
@pytest.mark.unit
async def test_public_request_propagates_errors():
    """Public request errors are not normalized."""
    error = TransportError("boom", response=Response(status=500, data={"error": "x"}))
    agent = BinanceAgent(transport=RecordingTransport(error=error))

    with pytest.raises(TransportError) as exc_info:
        await agent.public_request("api/v1/ping")

    assert exc_info.value is error


@pytest.mark.asyncio
@pytest.mark.unit
async def test_public_request_uses_agent_defaults(transport):
    """The agent's default layer supplies root URL and timeout."""
    agent = BinanceAgent(transport=transport, defaults=TESTNET_CONFIG)

    await agent.public_request("api/v1/ping")

    assert transport.last.base_url == "https://testnet.binance.vision"
    assert transport.last.timeout == 3000


# ============================================================================
# Private Request Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_request_requires_auth(transport):
    """Unauthenticated private calls fail before reaching the transport."""
    agent = BinanceAgent(transport=transport)

    with pytest.raises(AuthenticationRequiredError):
        await agent.private_request("api/v3/account", "GET")

    assert transport.calls == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_get_request(agent, transport):
    """Signed GETs carry parameters, timing fields and signature in the URL."""
    await agent.private_request("api/v3/openOrders", "GET", {"symbol": "BTCUSDT"})

    descriptor = transport.last
    assert descriptor.method == "GET"
    assert descriptor.data is None
    assert descriptor.url.startswith(
        f"/api/v3/openOrders?symbol=BTCUSDT&timestamp={FROZEN_TIME_MS}&recvWindow=5000&signature="
    )
    assert descriptor.headers[API_KEY_HEADER] == "pk1"
    assert _signature_of(descriptor.url) == _expected_signature("sk1", descriptor.url)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_post_request(agent, transport):
    """Signed POSTs carry the signed parameters in the body."""
    await agent.private_request("api/v3/order", "POST", {"symbol": "BTCUSDT", "side": "BUY"})

    descriptor = transport.last
    assert descriptor.method == "POST"
    assert descriptor.url == "/api/v3/order"
    assert descriptor.data.startswith(
        f"symbol=BTCUSDT&side=BUY&timestamp={FROZEN_TIME_MS}&recvWindow=5000&signature="
    )
    assert _signature_of(descriptor.data) == _expected_signature("sk1", descriptor.data)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_post_small_quantity_in_body(agent, transport):
    """Small float quantities reach the body in fixed-point form."""
    await agent.private_request("api/v3/order", "POST", {"symbol": "BTCUSDT", "side": "BUY", "quantity": 0.00001})

    descriptor = transport.last
    assert descriptor.data.startswith(
        f"symbol=BTCUSDT&side=BUY&quantity=0.00001&timestamp={FROZEN_TIME_MS}&recvWindow=5000&signature="
    )
    assert "e-05" not in descriptor.data
    assert _signature_of(descriptor.data) == _expected_signature("sk1", descriptor.data)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_request_override_recv_window(agent, transport):
    """A call-level override can change the receive window."""
    await agent.private_request("api/v3/account", "GET", None, RequestConfig(recv_window=10000))

    assert "&recvWindow=10000&" in transport.last.url


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_request_override_headers_and_method(agent, transport):
    """Override headers are merged; override method cannot drop the API key."""
    override = RequestConfig(method="PUT", headers={"X-Test": "1"})

    await agent.private_request("api/v3/order", "DELETE", {"symbol": "BTCUSDT"}, override)

    descriptor = transport.last
    assert descriptor.method == "DELETE"
    assert descriptor.headers["X-Test"] == "1"
    assert descriptor.headers["Cache-Control"] == "no-cache"
    assert descriptor.headers[API_KEY_HEADER] == "pk1"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_request_after_upgrade_uses_new_keys(agent, transport):
    """After upgrade() requests are signed with the new secret and key."""
    agent.upgrade(ApiAuth(public_key="pk2", private_key="sk2"))

    await agent.private_request("api/v3/account", "GET")

    descriptor = transport.last
    assert descriptor.headers[API_KEY_HEADER] == "pk2"
    assert _signature_of(descriptor.url) == _expected_signature("sk2", descriptor.url)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_in_flight_request_keeps_old_keys(auth, frozen_clock):
    """A request already in flight is unaffected by a later upgrade."""
    transport = GatedTransport()
    agent = BinanceAgent(auth=auth, transport=transport, clock=frozen_clock)

    first = asyncio.ensure_future(agent.private_request("api/v3/account", "GET"))
    while not transport.calls:
        await asyncio.sleep(0)

    agent.upgrade(ApiAuth(public_key="pk2", private_key="sk2"))
    second = asyncio.ensure_future(agent.private_request("api/v3/account", "GET"))
    while len(transport.calls) < 2:
        await asyncio.sleep(0)

    transport.release.set()
    await asyncio.gather(first, second)

    old, new = transport.calls
    assert old.headers[API_KEY_HEADER] == "pk1"
    assert _signature_of(old.url) == _expected_signature("sk1", old.url)
    assert new.headers[API_KEY_HEADER] == "pk2"
    assert _signature_of(new.url) == _expected_signature("sk2", new.url)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_private_request_returns_response_verbatim(auth, frozen_clock):
    """Successful private responses are returned unchanged."""
    response = Response(status=200, data={"balances": []})
    agent = BinanceAgent(auth=auth, transport=RecordingTransport(response=response), clock=frozen_clock)

    assert await agent.private_request("api/v3/account", "GET") is response


@pytest.mark.unit
def test_agent_sign_message_uses_agent_defaults(agent, frozen_clock):
    """Agent.sign_message applies the configured receive window and clock."""
    result = agent.sign_message({"symbol": "BTCUSDT"}, "secret")

    assert result.body["timestamp"] == FROZEN_TIME_MS
    assert result.body["recvWindow"] == 5000


# ============================================================================
# Error Normalization Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_rejects_with_exchange_error_field(auth):
    """The exchange's error field is preferred over everything else."""
    response = SimpleNamespace(status=400, data={"error": "INSUFFICIENT_FUNDS", "code": -2010})
    agent = BinanceAgent(auth=auth, transport=RecordingTransport(error=FailingCall(response)))

    with pytest.raises(ExchangeAPIError) as exc_info:
        await agent.private_request("api/v3/order", "POST", {"symbol": "BTCUSDT"})

    assert exc_info.value.reason == "INSUFFICIENT_FUNDS"
    assert exc_info.value.status_code == 400
    assert exc_info.value.error_code == -2010
    assert exc_info.value.response is response


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rejects_with_response_data(auth):
    """Without an error field the whole payload is the reason."""
    response = SimpleNamespace(status=400, data={"code": -1})
    agent = BinanceAgent(auth=auth, transport=RecordingTransport(error=FailingCall(response)))

    with pytest.raises(ExchangeAPIError) as exc_info:
        await agent.private_request("api/v3/order", "POST")

    assert exc_info.value.reason == {"code": -1}
    assert exc_info.value.error_code == -1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rejects_with_response_when_no_data(auth):
    """Without a payload the response object is the reason."""
    response = SimpleNamespace(status=502)
    agent = BinanceAgent(auth=auth, transport=RecordingTransport(error=FailingCall(response)))

    with pytest.raises(ExchangeAPIError) as exc_info:
        await agent.private_request("api/v3/order", "POST")

    assert exc_info.value.reason is response
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rejects_with_bare_exception(auth):
    """Errors without a response are re-raised unchanged."""
    error = FailingCall()
    agent = BinanceAgent(auth=auth, transport=RecordingTransport(error=error))

    with pytest.raises(FailingCall) as exc_info:
        await agent.private_request("api/v3/order", "POST")

    assert exc_info.value is error


@pytest.mark.asyncio
@pytest.mark.unit
async def test_transport_failure_without_response(auth):
    """Network failures surface as the transport's own error."""
    error = TransportError("connection refused")
    agent = BinanceAgent(auth=auth, transport=RecordingTransport(error=error))

    with pytest.raises(TransportError) as exc_info:
        await agent.private_request("api/v3/account", "GET")

    assert exc_info.value is error


@pytest.mark.asyncio
@pytest.mark.unit
async def test_agent_usable_after_failure(auth, frozen_clock):
    """A rejected request leaves the agent able to send more requests."""
    transport = RecordingTransport(error=FailingCall(SimpleNamespace(status=400, data={"code": -1100})))
    agent = BinanceAgent(auth=auth, transport=transport, clock=frozen_clock)

    with pytest.raises(ExchangeAPIError):
        await agent.private_request("api/v3/order", "POST")

    transport.error = None
    response = await agent.private_request("api/v3/account", "GET")

    assert response.status == 200
    assert agent.is_upgraded() is True
    assert len(transport.calls) == 2


@pytest.mark.unit
def test_rejection_reason_with_text_payload():
    """Non-JSON payloads degrade to the raw text."""
    error = FailingCall(SimpleNamespace(status=502, data="<html>Bad Gateway</html>"))

    assert rejection_reason(error) == "<html>Bad Gateway</html>"
