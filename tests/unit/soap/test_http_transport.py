"""
Unit tests for HttpSoapTransport using httpx.MockTransport.
"""

import base64

import httpx
import pytest

from inventory_client.models.invocation import Credentials
from inventory_client.soap.exceptions import (
    ArgumentValidationError,
    SoapConnectionError,
    SoapDecodeError,
    SoapFaultError,
    SoapHttpError,
    SoapTimeoutError,
)
from inventory_client.soap.http_transport import HttpSoapTransport

ENDPOINT = "http://inventory.test/InventarioService"
NAMESPACE = "http://ws.inventario.ferreteria.com/"


class BrokenStream(httpx.AsyncByteStream):
    """Response stream that drops the connection after its first chunk."""

    def __init__(self, first_chunk: bytes):
        self.first_chunk = first_chunk

    async def __aiter__(self):
        yield self.first_chunk
        raise httpx.ReadError("Connection reset by peer")


def make_transport(handler) -> HttpSoapTransport:
    return HttpSoapTransport(ENDPOINT, NAMESPACE, transport=httpx.MockTransport(handler))


# ============================================================================
# Request Shape
# ============================================================================


@pytest.mark.asyncio
async def test_request_headers_and_body(ok_body):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, text=ok_body)

    transport = make_transport(handler)
    credentials = Credentials(username="admin", password="admin123")

    await transport.call("consultarArticulo", {"codigo": "MART-001"}, 15000, credentials)

    request = seen["request"]
    expected_auth = "Basic " + base64.b64encode(b"admin:admin123").decode("ascii")
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    assert request.headers["SOAPAction"] == f'"{NAMESPACE}consultarArticulo"'
    assert request.headers["Content-Type"].startswith("text/xml")
    assert request.headers["Connection"] == "close"
    assert request.headers["Authorization"] == expected_auth
    body = request.content.decode("utf-8")
    assert "tns:consultarArticulo" in body
    assert "<codigo>MART-001</codigo>" in body


@pytest.mark.asyncio
async def test_no_credentials_no_auth_header(ok_body):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, text=ok_body)

    await make_transport(handler).call("verificarEstado", {}, 15000)

    assert "Authorization" not in seen["request"].headers


@pytest.mark.asyncio
async def test_unserializable_argument_sends_nothing():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    reply = await make_transport(handler).call("op", {"x": {1, 2}}, 15000)

    assert isinstance(reply.error, ArgumentValidationError)
    assert calls == []


# ============================================================================
# Responses
# ============================================================================


@pytest.mark.asyncio
async def test_successful_response(ok_body):
    reply = await make_transport(lambda request: httpx.Response(200, text=ok_body)).call(
        "consultarArticulo", {"codigo": "MART-001"}, 15000
    )

    assert reply.ok
    assert reply.status_code == 200
    assert reply.raw_body == ok_body
    assert reply.result["return"]["articulo"]["nombre"] == "Martillo de carpintero"


@pytest.mark.asyncio
async def test_malformed_response_keeps_body(malformed_body):
    reply = await make_transport(lambda request: httpx.Response(200, text=malformed_body)).call(
        "consultarArticulo", {"codigo": "MART-001"}, 15000
    )

    assert isinstance(reply.error, SoapDecodeError)
    assert reply.raw_body == malformed_body
    assert reply.result is None


@pytest.mark.asyncio
async def test_empty_success_body():
    reply = await make_transport(lambda request: httpx.Response(200, content=b"")).call(
        "consultarArticulo", {"codigo": "MART-001"}, 15000
    )

    assert isinstance(reply.error, SoapDecodeError)
    assert reply.raw_body == ""


@pytest.mark.asyncio
async def test_fault_in_http_500(fault_body):
    reply = await make_transport(lambda request: httpx.Response(500, text=fault_body)).call(
        "actualizarStock", {"codigo": "MART-001", "nuevoStock": 1}, 15000
    )

    assert isinstance(reply.error, SoapFaultError)
    assert reply.error.fault_string == "Stock no puede ser negativo"
    assert reply.error.details["status_code"] == 500
    assert reply.raw_body == fault_body


@pytest.mark.asyncio
async def test_http_500_with_envelope_keeps_body(ok_body):
    reply = await make_transport(lambda request: httpx.Response(500, text=ok_body)).call(
        "consultarArticulo", {"codigo": "MART-001"}, 15000
    )

    assert isinstance(reply.error, SoapHttpError)
    assert reply.error.status_code == 500
    assert reply.raw_body == ok_body


@pytest.mark.asyncio
async def test_http_error_without_body():
    reply = await make_transport(lambda request: httpx.Response(503, text="  ")).call(
        "consultarArticulo", {"codigo": "MART-001"}, 15000
    )

    assert isinstance(reply.error, SoapHttpError)
    assert reply.error.status_code == 503
    assert reply.raw_body is None


# ============================================================================
# Network Errors
# ============================================================================


@pytest.mark.asyncio
async def test_connection_refused():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    reply = await make_transport(handler).call("consultarArticulo", {"codigo": "MART-001"}, 15000)

    assert type(reply.error) is SoapConnectionError
    assert reply.raw_body is None


@pytest.mark.asyncio
async def test_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    reply = await make_transport(handler).call("consultarArticulo", {"codigo": "MART-001"}, 15000)

    assert isinstance(reply.error, SoapTimeoutError)
    assert reply.error.details["timeout_ms"] == 15000


@pytest.mark.asyncio
async def test_dropped_connection_keeps_partial_body(ok_body):
    partial = ok_body[:300].encode("utf-8")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=BrokenStream(partial))

    reply = await make_transport(handler).call("consultarArticulo", {"codigo": "MART-001"}, 15000)

    assert isinstance(reply.error, SoapConnectionError)
    assert reply.raw_body == partial.decode("utf-8")
    assert reply.status_code == 200


# ============================================================================
# Operation Listing
# ============================================================================


@pytest.mark.asyncio
async def test_list_operations(load_fixture):
    wsdl = load_fixture("inventario.wsdl")

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.query == b"wsdl"
        return httpx.Response(200, text=wsdl)

    operations = await make_transport(handler).list_operations()

    assert "consultarArticulo" in operations
    assert len(operations) == 6


@pytest.mark.asyncio
async def test_list_operations_http_error():
    transport = make_transport(lambda request: httpx.Response(404))

    with pytest.raises(SoapHttpError):
        await transport.list_operations()


@pytest.mark.asyncio
async def test_list_operations_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(SoapConnectionError):
        await make_transport(handler).list_operations()
