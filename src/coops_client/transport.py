"""Client-side transport abstraction for CoOpsClient.

Separates protocol logic from the wire so the client can run against a real
server or against canned responses in tests.

Architecture:
- ClientTransport is the PROTOCOL (interface) with four verbs
- BaseClientTransport builds headers and classifies response statuses
- HTTPClientTransport performs real requests with httpx
- MockClientTransport answers from a path -> response/exception table

Status classification (shared by every implementation):
- 204: success, no body (None)
- 200: success, body text returned as-is
- 401: UnauthorizedError
- 403: ForbiddenError
- anything else: ServerError
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlsplit

import httpx

from .auth import Auth, auth_headers
from .errors import (
    CoOpsError,
    ForbiddenError,
    ServerError,
    TransportError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


class HttpMethod(str, Enum):
    """Verbs used by the protocol."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"


@dataclass(frozen=True)
class HTTPTransportConfig:
    """Configuration for HTTPClientTransport."""

    timeout: float = 30.0
    verify: bool = True
    follow_redirects: bool = False
    user_agent: str | None = None


@dataclass(frozen=True)
class RecordedRequest:
    """A request seen by MockClientTransport."""

    method: str
    url: str
    body: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class ClientTransport(Protocol):
    """Protocol for client transports.

    Each verb returns the response body text, None for 204, or raises a
    CoOpsError subclass. GET never sends a body.
    """

    def get(self, url: str, auth: Auth | None = None) -> str | None:
        """Perform a GET request."""
        ...

    def post(
        self,
        url: str,
        body: str | None = None,
        content_type: str | None = None,
        auth: Auth | None = None,
    ) -> str | None:
        """Perform a POST request."""
        ...

    def put(
        self,
        url: str,
        body: str | None = None,
        content_type: str | None = None,
        auth: Auth | None = None,
    ) -> str | None:
        """Perform a PUT request."""
        ...

    def patch(
        self,
        url: str,
        body: str | None = None,
        content_type: str | None = None,
        auth: Auth | None = None,
    ) -> str | None:
        """Perform a PATCH request."""
        ...


def interpret_response(status_code: int, text: str) -> str | None:
    """Map a response status to a result or a typed error.

    Raises:
        UnauthorizedError: On 401
        ForbiddenError: On 403
        ServerError: On any other status except 200 and 204
    """
    if status_code == 204:
        return None
    if status_code == 200:
        return text
    if status_code == 401:
        raise UnauthorizedError(text)
    if status_code == 403:
        raise ForbiddenError(text)
    raise ServerError(text, status_code=status_code)


class BaseClientTransport(ABC):
    """Base class for client transports.

    Provides:
    - The four protocol verbs
    - Auth and Content-Type header assembly
    - Response status classification
    """

    def get(self, url: str, auth: Auth | None = None) -> str | None:
        return self._request(HttpMethod.GET, url, None, None, auth)

    def post(
        self,
        url: str,
        body: str | None = None,
        content_type: str | None = None,
        auth: Auth | None = None,
    ) -> str | None:
        return self._request(HttpMethod.POST, url, body, content_type, auth)

    def put(
        self,
        url: str,
        body: str | None = None,
        content_type: str | None = None,
        auth: Auth | None = None,
    ) -> str | None:
        return self._request(HttpMethod.PUT, url, body, content_type, auth)

    def patch(
        self,
        url: str,
        body: str | None = None,
        content_type: str | None = None,
        auth: Auth | None = None,
    ) -> str | None:
        return self._request(HttpMethod.PATCH, url, body, content_type, auth)

    def _request(
        self,
        method: HttpMethod,
        url: str,
        body: str | None,
        content_type: str | None,
        auth: Auth | None,
    ) -> str | None:
        headers = auth_headers(auth)
        if content_type is not None:
            headers["Content-Type"] = content_type

        logger.debug(f"{method.value} {url}")
        status_code, text = self._execute(method, url, body, headers)
        logger.debug(f"{method.value} {url} -> {status_code}")

        return interpret_response(status_code, text)

    @abstractmethod
    def _execute(
        self,
        method: HttpMethod,
        url: str,
        body: str | None,
        headers: dict[str, str],
    ) -> tuple[int, str]:
        """Send the request and return (status_code, body_text).

        Raises:
            TransportError: If the request could not be performed
        """
        ...

    def close(self) -> None:
        """Release transport resources."""
        pass

    def __enter__(self) -> BaseClientTransport:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class HTTPClientTransport(BaseClientTransport):
    """Transport over HTTP using a shared httpx.Client.

    The underlying client is created on first use and reused for every
    request; httpx.Client is safe to share between threads. Pass
    ``http_client`` to supply a pre-configured client (it is then not
    closed by this transport).
    """

    def __init__(
        self,
        config: HTTPTransportConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.config = config or HTTPTransportConfig()
        self._http_client = http_client
        self._owns_client = http_client is None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._http_client is None:
                headers = {"User-Agent": self.config.user_agent} if self.config.user_agent else None
                self._http_client = httpx.Client(
                    timeout=httpx.Timeout(self.config.timeout),
                    verify=self.config.verify,
                    follow_redirects=self.config.follow_redirects,
                    headers=headers,
                )
            return self._http_client

    def _execute(
        self,
        method: HttpMethod,
        url: str,
        body: str | None,
        headers: dict[str, str],
    ) -> tuple[int, str]:
        client = self._get_client()
        content = body.encode("utf-8") if body is not None and method != HttpMethod.GET else None

        try:
            response = client.request(method.value, url, content=content, headers=headers)
        except (httpx.TransportError, httpx.InvalidURL) as e:
            raise TransportError(f"{method.value} {url} failed: {e}") from e

        return response.status_code, response.content.decode("utf-8", errors="replace")

    def close(self) -> None:
        """Close the httpx client if this transport created it."""
        with self._lock:
            if self._http_client is not None and self._owns_client:
                self._http_client.close()
                self._http_client = None


class MockClientTransport(BaseClientTransport):
    """Mock transport for testing.

    Maps a request key (URL path, plus ``?query`` when present) to a canned
    response or an exception. No actual I/O. Not thread-safe.

    Usage:
        transport = MockClientTransport()
        transport.set_response("/files/1", '{"revisionNumber": 3}')
        transport.set_exception("/files/2", ForbiddenError)

        client = create_test_client(transport, base_path="/files/1")
        file = client.get_file()

        assert transport.recorded_requests[0].method == "GET"
    """

    MOCK_EXCEPTION_MESSAGE = "Message!"

    def __init__(self) -> None:
        self._responses: dict[str, tuple[int, str]] = {}
        self._exceptions: dict[str, BaseException | type[BaseException]] = {}
        self._recorded_requests: list[RecordedRequest] = []

    @property
    def recorded_requests(self) -> list[RecordedRequest]:
        """Get all requests sent through this transport."""
        return self._recorded_requests.copy()

    @staticmethod
    def request_key(url: str) -> str:
        """Path plus query string, as used for lookups."""
        parts = urlsplit(url)
        if parts.query:
            return f"{parts.path}?{parts.query}"
        return parts.path

    def set_response(self, path: str, body: str = "", status_code: int = 200) -> None:
        """Set canned response for a request key.

        The status still goes through the normal classification, so a 403
        here raises ForbiddenError with ``body`` as message.
        """
        self._responses[path] = (status_code, body)

    def set_exception(self, path: str, exception: BaseException | type[BaseException]) -> None:
        """Raise ``exception`` for a request key.

        Classes are instantiated with MOCK_EXCEPTION_MESSAGE.
        """
        self._exceptions[path] = exception

    def clear(self) -> None:
        """Clear responses, exceptions and recorded requests."""
        self._responses.clear()
        self._exceptions.clear()
        self._recorded_requests.clear()

    def _execute(
        self,
        method: HttpMethod,
        url: str,
        body: str | None,
        headers: dict[str, str],
    ) -> tuple[int, str]:
        self._recorded_requests.append(
            RecordedRequest(method=method.value, url=url, body=body, headers=dict(headers))
        )

        key = self.request_key(url)
        if key in self._responses:
            return self._responses[key]

        if key in self._exceptions:
            raise self._build_exception(self._exceptions[key])

        raise TransportError(f"Request not mocked properly: no mocked action for {key!r}")

    def _build_exception(self, exception: BaseException | type[BaseException]) -> BaseException:
        if isinstance(exception, type):
            try:
                exception = exception(self.MOCK_EXCEPTION_MESSAGE)
            except Exception as e:
                return TransportError(
                    f"Request not mocked properly: could not initialize {exception.__name__}: {e}"
                )

        if isinstance(exception, CoOpsError):
            return exception

        if isinstance(exception, OSError):
            error = TransportError(str(exception))
            error.__cause__ = exception
            return error

        return TransportError(
            f"Request not mocked properly: invalid exception {type(exception).__name__}"
        )


# Factory functions


def create_http_transport(
    timeout: float = 30.0,
    verify: bool = True,
    user_agent: str | None = None,
) -> HTTPClientTransport:
    """Create an HTTP transport.

    Args:
        timeout: Request timeout in seconds
        verify: Verify TLS certificates
        user_agent: Optional User-Agent header

    Returns:
        HTTPClientTransport configured for HTTP communication
    """
    config = HTTPTransportConfig(timeout=timeout, verify=verify, user_agent=user_agent)
    return HTTPClientTransport(config)


def create_mock_transport() -> MockClientTransport:
    """Create a mock transport for testing."""
    return MockClientTransport()


__all__ = [
    "BaseClientTransport",
    "ClientTransport",
    "HTTPClientTransport",
    "HTTPTransportConfig",
    "HttpMethod",
    "MockClientTransport",
    "RecordedRequest",
    "create_http_transport",
    "create_mock_transport",
    "interpret_response",
]
