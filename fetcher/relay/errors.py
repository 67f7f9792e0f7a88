import asyncio
import errno
import socket
from enum import Enum
from typing import Optional

import httpx

from fetcher.utils.exception_logging import (
    find_exception_in_chain,
    format_exception_message,
)

GENERIC_FETCH_ERROR = "Error fetching URL"

# Message fragments used when the underlying OSError did not survive wrapping.
REFUSED_MARKERS = ("connection refused", "econnrefused")
HOST_NOT_FOUND_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "enotfound",
)


class RelayErrorKind(str, Enum):
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    HOST_NOT_FOUND = "host_not_found"
    TRANSPORT = "transport"
    UPSTREAM_STATUS = "upstream_status"

    @property
    def status_code(self) -> Optional[int]:
        """Fixed status for locally synthesized errors; None means passthrough."""
        return _STATUS_CODES[self]

    @property
    def default_message(self) -> Optional[str]:
        return _DEFAULT_MESSAGES.get(self)


_STATUS_CODES = {
    RelayErrorKind.VALIDATION: 400,
    RelayErrorKind.TIMEOUT: 408,
    RelayErrorKind.CONNECTION_REFUSED: 502,
    RelayErrorKind.HOST_NOT_FOUND: 404,
    RelayErrorKind.TRANSPORT: 500,
    RelayErrorKind.UPSTREAM_STATUS: None,
}

_DEFAULT_MESSAGES = {
    RelayErrorKind.TIMEOUT: "Request timed out",
    RelayErrorKind.CONNECTION_REFUSED: "Connection refused - server may be down",
    RelayErrorKind.HOST_NOT_FOUND: "Host not found - check the URL",
    RelayErrorKind.TRANSPORT: GENERIC_FETCH_ERROR,
}


def _is_refused(exc: BaseException) -> bool:
    if isinstance(exc, ConnectionRefusedError):
        return True
    if isinstance(exc, OSError) and exc.errno == errno.ECONNREFUSED:
        return True
    return False


def _message_has(exc: BaseException, markers) -> bool:
    text = format_exception_message(exc).lower()
    return any(marker in text for marker in markers)


def classify_transport_error(exc: BaseException) -> RelayErrorKind:
    """Map an exception raised by the outbound call to its error kind."""
    if find_exception_in_chain(
        exc, lambda e: isinstance(e, (httpx.TimeoutException, asyncio.TimeoutError))
    ):
        return RelayErrorKind.TIMEOUT
    if find_exception_in_chain(exc, _is_refused):
        return RelayErrorKind.CONNECTION_REFUSED
    if find_exception_in_chain(exc, socket.gaierror):
        return RelayErrorKind.HOST_NOT_FOUND
    if find_exception_in_chain(exc, lambda e: _message_has(e, REFUSED_MARKERS)):
        return RelayErrorKind.CONNECTION_REFUSED
    if find_exception_in_chain(exc, lambda e: _message_has(e, HOST_NOT_FOUND_MARKERS)):
        return RelayErrorKind.HOST_NOT_FOUND
    return RelayErrorKind.TRANSPORT


def transport_error_message(kind: RelayErrorKind, exc: BaseException) -> str:
    """Caller-facing message: fixed per kind, the exception text for generic failures."""
    if kind is RelayErrorKind.TRANSPORT:
        return format_exception_message(exc) or GENERIC_FETCH_ERROR
    return kind.default_message or GENERIC_FETCH_ERROR
