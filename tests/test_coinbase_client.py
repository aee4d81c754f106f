"""
CoinbaseClient 테스트 (respx로 업스트림 모킹)

pytest tests/test_coinbase_client.py -v
"""

import asyncio

import httpx
import pytest
import respx

from spot_mirror.coinbase_client import CoinbaseClient
from spot_mirror.models import FailureReason

BASE_URL = "https://api.coinbase.com/v2/prices"
SPOT_URL = f"{BASE_URL}/BTC-USD/spot"
OK_BODY = {"data": {"amount": "50000.00", "base": "BTC", "currency": "USD"}}


@pytest.mark.asyncio
async def test_success_mapping() -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, timeout=5.0, user_agent="spot-price-mirror/1.0", client=http)
        with respx.mock:
            route = respx.get(SPOT_URL).mock(return_value=httpx.Response(200, json=OK_BODY))

            outcome = await client.get_spot_price("BTC-USD")

            assert route.called
            assert route.calls.last.request.headers["User-Agent"] == "spot-price-mirror/1.0"
            assert outcome.success is True
            assert outcome.error is None
            assert (outcome.amount, outcome.base, outcome.currency) == ("50000.00", "BTC", "USD")


@pytest.mark.asyncio
async def test_base_defaults_to_btc() -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(
                return_value=httpx.Response(200, json={"data": {"amount": "1.5", "currency": "USD"}})
            )

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.success is True
            assert outcome.base == "BTC"


@pytest.mark.asyncio
async def test_rate_limited() -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(return_value=httpx.Response(429))

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.reason is FailureReason.RATE_LIMITED
            assert outcome.is_rate_limited is True
            assert outcome.error == "rate_limited"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 404, 500, 503])
async def test_http_error(status_code: int) -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(return_value=httpx.Response(status_code, json=OK_BODY))

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.reason is FailureReason.HTTP_ERROR
            assert outcome.status_code == status_code
            assert outcome.error == f"http_{status_code}"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"data": {"base": "BTC", "currency": "USD"}},
        {"data": {"amount": "", "base": "BTC", "currency": "USD"}},
        {"data": {"amount": True, "currency": "USD"}},
        {"data": {"amount": {"value": "1"}, "currency": "USD"}},
        {"data": None},
        {"errors": [{"id": "not_found"}]},
        ["unexpected"],
    ],
)
async def test_malformed_response(body) -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(return_value=httpx.Response(200, json=body))

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.reason is FailureReason.MALFORMED_RESPONSE
            assert outcome.error == "malformed_response"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw, expected",
    [
        (b'{"data": {"amount": 50000, "currency": "USD"}}', "50000"),
        (b'{"data": {"amount": 50000.10, "currency": "USD"}}', "50000.10"),
    ],
)
async def test_numeric_amount_keeps_upstream_text(raw, expected) -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(
                return_value=httpx.Response(
                    200, content=raw, headers={"Content-Type": "application/json"}
                )
            )

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.success is True
            assert outcome.amount == expected
            assert outcome.currency == "USD"


@pytest.mark.asyncio
async def test_non_json_body_is_malformed() -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.reason is FailureReason.MALFORMED_RESPONSE


@pytest.mark.asyncio
async def test_network_error_carries_message() -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(side_effect=httpx.ConnectError("connection reset by peer"))

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.reason is FailureReason.NETWORK_ERROR
            assert outcome.error == "network_error"
            assert "connection reset by peer" in outcome.message


@pytest.mark.asyncio
async def test_httpx_timeout_is_timeout() -> None:
    async with httpx.AsyncClient() as http:
        client = CoinbaseClient(base_url=BASE_URL, client=http)
        with respx.mock:
            respx.get(SPOT_URL).mock(side_effect=httpx.ReadTimeout("read timed out"))

            outcome = await client.get_spot_price("BTC-USD")

            assert outcome.reason is FailureReason.TIMEOUT


@pytest.mark.asyncio
async def test_hard_timeout_aborts_slow_request() -> None:
    """응답이 타임아웃보다 늦으면 요청을 취소하고 timeout 반환"""

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(10)
        return httpx.Response(200, json=OK_BODY)

    async with httpx.AsyncClient(transport=httpx.MockTransport(slow_handler)) as http:
        client = CoinbaseClient(base_url=BASE_URL, timeout=0.05, client=http)

        outcome = await asyncio.wait_for(client.get_spot_price("BTC-USD"), timeout=2)

        assert outcome.reason is FailureReason.TIMEOUT


def test_spot_url() -> None:
    client = CoinbaseClient(base_url=f"{BASE_URL}/", client=httpx.AsyncClient())

    assert client.spot_url("BTC-EUR") == f"{BASE_URL}/BTC-EUR/spot"
