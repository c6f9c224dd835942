import httpx
import pytest

from storefront.errors import ApiError, ApiErrorKind
from storefront.infra.http_client import create_http_client, request_json, require_success


def _client(handler):
    return create_http_client(base_url="http://commerce.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_request_json_ok():
    client = _client(lambda req: httpx.Response(200, json={"success": True, "x": 1}))
    assert await request_json(client, "GET", "/api/x") == {"success": True, "x": 1}


@pytest.mark.asyncio
async def test_transport_error_is_network_failure():
    def boom(req):
        raise httpx.ConnectTimeout("timeout", request=req)

    with pytest.raises(ApiError) as exc:
        await request_json(_client(boom), "GET", "/api/cart")
    assert exc.value.kind is ApiErrorKind.NETWORK_FAILURE
    assert exc.value.is_network_failure
    assert exc.value.endpoint == "GET /api/cart"


@pytest.mark.asyncio
async def test_http_error_status_is_unexpected_response():
    client = _client(lambda req: httpx.Response(503, json={"success": False}))
    with pytest.raises(ApiError) as exc:
        await request_json(client, "GET", "/api/cart")
    assert exc.value.kind is ApiErrorKind.UNEXPECTED_RESPONSE
    assert exc.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>"),
    httpx.Response(200, json=[1, 2]),
])
async def test_non_object_body_is_unexpected_response(response):
    with pytest.raises(ApiError) as exc:
        await request_json(_client(lambda req: response), "GET", "/api/cart")
    assert exc.value.kind is ApiErrorKind.UNEXPECTED_RESPONSE


def test_require_success():
    assert require_success({"success": True}, "GET /x") == {"success": True}
    for body in ({}, {"success": False}, {"success": "true"}):
        with pytest.raises(ApiError):
            require_success(body, "GET /x")


def test_no_timeout_by_default():
    client = create_http_client(base_url="http://commerce.test", timeout=None)
    assert client.timeout.read is None


@pytest.mark.asyncio
async def test_undecodable_body_is_network_failure():
    # Content-Encoding gzip annoncé, corps illisible: DecodingError côté httpx
    client = _client(
        lambda req: httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not-gzip"))
    )
    with pytest.raises(ApiError) as exc:
        await request_json(client, "GET", "/api/check-payment-status/cs_1")
    assert exc.value.kind is ApiErrorKind.NETWORK_FAILURE
    assert isinstance(exc.value.__cause__, httpx.DecodingError)
