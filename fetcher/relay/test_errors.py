import asyncio
import socket

import httpx
import pytest

from fetcher.relay.errors import (
    RelayErrorKind,
    classify_transport_error,
    transport_error_message,
)


def _chain(outer: BaseException, inner: BaseException) -> BaseException:
    outer.__cause__ = inner
    return outer


class TestClassifyTransportError:
    def test_httpx_timeouts(self):
        assert classify_transport_error(httpx.ConnectTimeout("x")) is RelayErrorKind.TIMEOUT
        assert classify_transport_error(httpx.ReadTimeout("x")) is RelayErrorKind.TIMEOUT
        assert classify_transport_error(httpx.PoolTimeout("x")) is RelayErrorKind.TIMEOUT

    def test_asyncio_deadline(self):
        assert classify_transport_error(asyncio.TimeoutError()) is RelayErrorKind.TIMEOUT

    def test_refused_nested_in_chain(self):
        exc = _chain(
            httpx.ConnectError("All connection attempts failed"),
            _chain(OSError("connect failed"), ConnectionRefusedError(111, "refused")),
        )
        assert classify_transport_error(exc) is RelayErrorKind.CONNECTION_REFUSED

    def test_refused_inside_exception_group(self):
        group = ExceptionGroup(
            "multiple attempts",
            [ConnectionRefusedError(111, "refused"), ConnectionRefusedError(111, "refused")],
        )
        exc = _chain(httpx.ConnectError("All connection attempts failed"), group)
        assert classify_transport_error(exc) is RelayErrorKind.CONNECTION_REFUSED

    def test_gaierror(self):
        exc = _chain(httpx.ConnectError(""), socket.gaierror(-2, "Name or service not known"))
        assert classify_transport_error(exc) is RelayErrorKind.HOST_NOT_FOUND

    @pytest.mark.parametrize(
        "message",
        [
            "[Errno -2] Name or service not known",
            "[Errno 8] nodename nor servname provided, or not known",
            "[Errno 11001] getaddrinfo failed",
            "[Errno -3] Temporary failure in name resolution",
        ],
    )
    def test_resolver_messages_without_os_error(self, message):
        assert (
            classify_transport_error(httpx.ConnectError(message))
            is RelayErrorKind.HOST_NOT_FOUND
        )

    def test_refused_message_without_os_error(self):
        exc = httpx.ConnectError("[Errno 111] Connection refused")
        assert classify_transport_error(exc) is RelayErrorKind.CONNECTION_REFUSED

    def test_anything_else_is_generic(self):
        assert (
            classify_transport_error(httpx.RemoteProtocolError("Server disconnected"))
            is RelayErrorKind.TRANSPORT
        )
        assert classify_transport_error(ValueError("boom")) is RelayErrorKind.TRANSPORT


class TestErrorKindMapping:
    @pytest.mark.parametrize(
        "kind,status",
        [
            (RelayErrorKind.VALIDATION, 400),
            (RelayErrorKind.TIMEOUT, 408),
            (RelayErrorKind.CONNECTION_REFUSED, 502),
            (RelayErrorKind.HOST_NOT_FOUND, 404),
            (RelayErrorKind.TRANSPORT, 500),
            (RelayErrorKind.UPSTREAM_STATUS, None),
        ],
    )
    def test_status_codes(self, kind, status):
        assert kind.status_code == status

    def test_fixed_messages_ignore_exception_text(self):
        exc = httpx.ReadTimeout("internal detail")
        assert transport_error_message(RelayErrorKind.TIMEOUT, exc) == "Request timed out"

    def test_generic_message_falls_back(self):
        assert transport_error_message(RelayErrorKind.TRANSPORT, httpx.ReadError("")) == (
            "Error fetching URL"
        )
        assert (
            transport_error_message(RelayErrorKind.TRANSPORT, ValueError("boom")) == "boom"
        )
