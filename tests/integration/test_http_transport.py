"""Integration tests for the HTTP transport.

Runs CoOpsClient over HTTPClientTransport with an httpx.MockTransport
handler standing in for the server, verifying:
- Methods, paths and query strings on the wire
- Auth and Content-Type headers
- UTF-8 request and response bodies
- Status classification and network failures
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator

import httpx
import pytest

from coops_client import (
    PROTOCOL_VERSION,
    BearerTokenAuth,
    ClientConfig,
    CoOpsClient,
    File,
    ForbiddenError,
    HTTPClientTransport,
    HTTPTransportConfig,
    Patch,
    ServerError,
    TransportError,
    UnauthorizedError,
)

Handler = Callable[[httpx.Request], httpx.Response]
ClientFactory = Callable[..., CoOpsClient]


@pytest.fixture
def http_clients() -> Iterator[list[httpx.Client]]:
    """httpx clients injected into transports, closed on teardown."""
    clients: list[httpx.Client] = []
    yield clients
    for http_client in clients:
        http_client.close()


@pytest.fixture
def make_client(http_clients: list[httpx.Client]) -> ClientFactory:
    """Factory for clients whose transport answers through ``handler``."""

    def factory(handler: Handler, base_path: str = "/files/1") -> CoOpsClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        http_clients.append(http_client)
        return CoOpsClient(
            ClientConfig("http", "coops.test", 8080, base_path),
            transport=HTTPClientTransport(http_client=http_client),
            owns_transport=True,
        )

    return factory


class Recorder:
    """Handler that records requests and replies with a fixed response."""

    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.text.encode("utf-8"))


# =============================================================================
# Tests: Wire format
# =============================================================================


class TestWireFormat:
    """Requests reach the server exactly as the protocol describes."""

    def test_join_request(self, make_client: ClientFactory) -> None:
        recorder = Recorder(text='{"fileId": "1", "extensions": ["dmp"], "revisionNumber": 4}')

        with make_client(recorder) as client:
            join = client.join_file(["dmp", "ot json"], auth=BearerTokenAuth("secret"))

        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.host == "coops.test"
        assert request.url.port == 8080
        assert request.url.path == "/files/1/join"
        assert request.url.query == (
            f"protocolVersion={PROTOCOL_VERSION}&algorithm=dmp&algorithm=ot+json".encode()
        )
        assert request.headers["Authorization"] == "Bearer secret"
        assert "Content-Type" not in request.headers
        assert join is not None
        assert join.revision_number == 4

    def test_get_revision_request(self, make_client: ClientFactory) -> None:
        recorder = Recorder(text='{"revisionNumber": 6}')

        with make_client(recorder) as client:
            file = client.get_file_revision(6)

        assert recorder.requests[0].url.query == b"revisionNumber=6"
        assert file is not None
        assert file.revision_number == 6

    def test_save_request(self, make_client: ClientFactory) -> None:
        recorder = Recorder()

        with make_client(recorder) as client:
            client.save_file(File(name="päivä", content="ünïcode"))

        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/files/1"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.content.decode("utf-8"))
        assert body == {"name": "päivä", "content": "ünïcode"}

    def test_patch_request(self, make_client: ClientFactory) -> None:
        recorder = Recorder()

        with make_client(recorder) as client:
            client.patch_file(Patch(algorithm="dummy", revision_number=666, patch="change"))

        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "revisionNumber": 666,
            "algorithm": "dummy",
            "patch": "change",
        }

    def test_utf8_response(self, make_client: ClientFactory) -> None:
        recorder = Recorder(text='{"content": "häkä ☃"}')

        with make_client(recorder) as client:
            file = client.get_file()

        assert file is not None
        assert file.content == "häkä ☃"


# =============================================================================
# Tests: Status codes and failures
# =============================================================================


class TestResponses:
    """Status codes map to the error taxonomy."""

    def test_no_content(self, make_client: ClientFactory) -> None:
        with make_client(Recorder(status_code=204)) as client:
            assert client.get_file() is None

    @pytest.mark.parametrize(
        ("status_code", "exception"),
        [(401, UnauthorizedError), (403, ForbiddenError), (500, ServerError)],
    )
    def test_error_statuses(
        self, make_client: ClientFactory, status_code: int, exception: type[ServerError]
    ) -> None:
        with make_client(Recorder(status_code=status_code, text="nope")) as client:
            with pytest.raises(exception) as exc_info:
                client.get_file()

        assert exc_info.value.message == "nope"
        assert exc_info.value.status_code == status_code

    def test_connection_failure(self, make_client: ClientFactory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                client.get_file()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout(self, make_client: ClientFactory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with make_client(handler) as client:
            with pytest.raises(TransportError):
                client.patch_file(Patch(algorithm="dummy", revision_number=1))


# =============================================================================
# Tests: Transport lifecycle
# =============================================================================


class TestHTTPTransportLifecycle:
    """Tests for httpx client ownership."""

    def test_lazy_client_created_and_closed(self) -> None:
        transport = HTTPClientTransport(HTTPTransportConfig(timeout=5.0, user_agent="coops-test"))

        http_client = transport._get_client()

        assert http_client is transport._get_client()
        assert http_client.headers["User-Agent"] == "coops-test"
        transport.close()
        assert http_client.is_closed

    def test_injected_client_not_closed(self) -> None:
        http_client = httpx.Client(transport=httpx.MockTransport(Recorder()))
        transport = HTTPClientTransport(http_client=http_client)

        transport.close()

        assert not http_client.is_closed
        http_client.close()

    def test_factory_clients_left_for_teardown(
        self, make_client: ClientFactory, http_clients: list[httpx.Client]
    ) -> None:
        """Closing the CoOpsClient leaves the injected httpx client to its fixture."""
        with make_client(Recorder(status_code=204)) as client:
            client.get_file()

        assert len(http_clients) == 1
        assert client.transport._http_client is http_clients[0]
        assert not http_clients[0].is_closed
