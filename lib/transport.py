# =============================================================================
# lib/transport.py - Tagged Transport Errors
# =============================================================================
# The upstream client never lets raw httpx/socket/ssl exceptions escape.
# Everything is converted into a TransportError tagged with one of a fixed
# set of kinds, decided from the exception type and its cause chain
# (httpx wraps httpcore, which wraps the ssl/socket error).
#
# Usage:
#   try:
#       ...
#   except Exception as exc:
#       raise TransportError.from_exception(exc) from exc
# =============================================================================

from __future__ import annotations

import asyncio
import errno
import socket
import ssl
from enum import Enum
from typing import Iterator

import httpx

from lib.utils import ApplicationError


class TransportErrorKind(str, Enum):
    """Category of a failed outbound call."""
    TLS = "tls"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    DNS_FAILURE = "dns_failure"
    NETWORK = "network"
    OTHER = "other"


_SUGGESTIONS = {
    TransportErrorKind.TLS: "Check that the upstream URL is correct and serves HTTPS",
    TransportErrorKind.TIMEOUT: "The upstream may still complete the request; verify before retrying",
    TransportErrorKind.CONNECTION_REFUSED: "Check that the upstream service is running and reachable",
    TransportErrorKind.DNS_FAILURE: "Check the upstream host name in API_URL",
    TransportErrorKind.NETWORK: "Check network connectivity to the upstream",
}


class TransportError(ApplicationError):
    """
    Failure of an outbound HTTP call, tagged with its kind.

    Attributes:
        kind: TransportErrorKind
        message: Description of the underlying failure
        code: Library-specific error code when one exists
              (e.g. "WRONG_VERSION_NUMBER" for TLS, "ECONNREFUSED")
    """

    def __init__(
        self,
        kind: TransportErrorKind,
        message: str,
        code: str | None = None,
    ):
        super().__init__(
            message,
            code=code or kind.value.upper(),
            suggestion=_SUGGESTIONS.get(kind),
        )
        self.kind = kind

    @classmethod
    def from_exception(cls, exc: BaseException) -> TransportError:
        """
        Tag an arbitrary exception raised during an outbound call.

        Precedence: TLS, timeout, DNS, connection refused, generic network,
        other. TLS is decided first because handshake failures surface as
        connect errors too.
        """
        if isinstance(exc, TransportError):
            return exc

        message = str(exc) or exc.__class__.__name__
        chain = list(_exception_chain(exc))

        for err in chain:
            if isinstance(err, ssl.SSLError):
                return cls(
                    TransportErrorKind.TLS,
                    message,
                    code=getattr(err, "reason", None) or err.__class__.__name__,
                )

        if any(isinstance(err, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)) for err in chain):
            return cls(TransportErrorKind.TIMEOUT, message)

        for err in chain:
            if isinstance(err, socket.gaierror):
                return cls(TransportErrorKind.DNS_FAILURE, message, code="ENOTFOUND")

        for err in chain:
            if isinstance(err, ConnectionRefusedError) or (
                isinstance(err, OSError) and err.errno == errno.ECONNREFUSED
            ):
                return cls(TransportErrorKind.CONNECTION_REFUSED, message, code="ECONNREFUSED")

        if any(isinstance(err, (httpx.NetworkError, httpx.RemoteProtocolError, ConnectionError)) for err in chain):
            return cls(TransportErrorKind.NETWORK, message)

        return cls(TransportErrorKind.OTHER, message)


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield exc and every exception it was raised from or during."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__
