"""CoOps protocol client.

Builds protocol requests, hands them to a ClientTransport and decodes the
responses with a JsonCodec. Works with HTTP or mock transports.

Usage:
    with create_client("https://example.com/files/42") as client:
        join = client.join_file(["dmp"], auth=BearerTokenAuth(token))
        client.patch_file(
            Patch(revision_number=join.revision_number, algorithm="dmp", patch=diff),
            auth=BearerTokenAuth(token),
        )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode, urlsplit

from .auth import Auth
from .codec import JsonCodec, ModelT
from .errors import UsageError
from .models import File, FileJoin, Patch
from .transport import (
    ClientTransport,
    HTTPClientTransport,
    MockClientTransport,
    create_http_transport,
    create_mock_transport,
)

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "1.0.0draft2"
CONTENT_TYPE_JSON = "application/json"


@dataclass(frozen=True)
class ClientConfig:
    """Endpoint of the file resource.

    ``port=None`` uses the scheme's default port. ``base_path`` identifies
    the file and prefixes every request path.
    """

    scheme: str = "http"
    host: str = "localhost"
    port: int | None = None
    base_path: str = ""

    @classmethod
    def from_url(cls, url: str) -> ClientConfig:
        """Split an endpoint URL like ``https://host:8443/files/1``.

        Raises:
            UsageError: If the URL has no scheme or host, or a bad port
        """
        parts = urlsplit(url)
        if not parts.scheme or not parts.hostname:
            raise UsageError(f"Invalid endpoint URL: {url!r}")
        try:
            port = parts.port
        except ValueError as e:
            raise UsageError(f"Invalid port in endpoint URL: {url!r}") from e
        return cls(
            scheme=parts.scheme,
            host=parts.hostname,
            port=port,
            base_path=parts.path.rstrip("/"),
        )

    def uri(self, path: str) -> str:
        """Absolute URI for a request path (path may carry a query)."""
        # IPv6 literals need their brackets back
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = host if self.port is None else f"{host}:{self.port}"
        return f"{self.scheme}://{netloc}{path}"


class CoOpsClient:
    """Client for a single CoOps file resource.

    Stateless apart from its configuration, codec and transport; safe to
    share between threads when the transport is (HTTPClientTransport is).

    Every operation blocks until the server answers. Errors are raised as
    CoOpsError subclasses and never retried here.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: ClientTransport | None = None,
        codec: JsonCodec | None = None,
        owns_transport: bool | None = None,
    ) -> None:
        self._config = config
        self._owns_transport = transport is None if owns_transport is None else owns_transport
        self._transport: ClientTransport = (
            transport if transport is not None else HTTPClientTransport()
        )
        self._codec = codec or JsonCodec()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> ClientTransport:
        """Access the underlying transport."""
        return self._transport

    @property
    def codec(self) -> JsonCodec:
        return self._codec

    # =========================================================================
    # Protocol operations
    # =========================================================================

    def join_file(
        self, algorithms: Iterable[str] | None, auth: Auth | None = None
    ) -> FileJoin | None:
        """Join the collaboration session.

        Args:
            algorithms: Patch algorithms supported by the client, in preference order
            auth: Authentication for this request

        Returns:
            Join result, or None if the server answered 204

        Raises:
            UsageError: If no algorithm is given
        """
        if isinstance(algorithms, str):
            raise UsageError("algorithms must be a sequence of algorithm names")
        algorithms = list(algorithms) if algorithms is not None else []
        if not algorithms:
            raise UsageError("At least one algorithm needs to be defined")

        query = [("protocolVersion", PROTOCOL_VERSION)]
        query.extend(("algorithm", algorithm) for algorithm in algorithms)

        file_join = self._get(FileJoin, f"{self._config.base_path}/join?{urlencode(query)}", auth)
        if file_join is not None:
            logger.debug(
                f"Joined file {file_join.file_id} at revision {file_join.revision_number}, "
                f"extensions={file_join.extensions}, realtime={file_join.has_realtime_channel}"
            )
        return file_join

    def get_file(self, auth: Auth | None = None) -> File | None:
        """Get the current version of the file."""
        return self._get(File, self._config.base_path, auth)

    def get_file_revision(self, revision_number: int | None, auth: Auth | None = None) -> File | None:
        """Get the file as it was at ``revision_number``.

        Raises:
            UsageError: If revision_number is None
        """
        if revision_number is None:
            raise UsageError("revision_number is required")

        query = urlencode({"revisionNumber": revision_number})
        return self._get(File, f"{self._config.base_path}?{query}", auth)

    def save_file(self, file: File, auth: Auth | None = None) -> None:
        """Replace the file with ``file``. The response body is discarded."""
        self._transport.put(
            self._config.uri(self._config.base_path),
            self._codec.encode(file),
            CONTENT_TYPE_JSON,
            auth,
        )

    def patch_file(self, patch: Patch, auth: Auth | None = None) -> None:
        """Apply ``patch`` on top of its revision. The response body is discarded.

        Raises:
            UsageError: If the patch has no algorithm or no revision number
        """
        if patch.algorithm is None or not patch.algorithm.strip():
            raise UsageError("algorithm is required")
        if patch.revision_number is None:
            raise UsageError("revision_number is required")

        self._transport.patch(
            self._config.uri(self._config.base_path),
            self._codec.encode(patch),
            CONTENT_TYPE_JSON,
            auth,
        )

    def _get(self, model_type: type[ModelT], path: str, auth: Auth | None) -> ModelT | None:
        text = self._transport.get(self._config.uri(path), auth)
        return self._codec.decode(model_type, text)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> CoOpsClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


# Factory functions


def create_client(
    url: str,
    timeout: float = 30.0,
    verify: bool = True,
    user_agent: str | None = None,
) -> CoOpsClient:
    """Create a client for the file resource at ``url`` over HTTP.

    Args:
        url: File endpoint, e.g. ``https://example.com/files/42``
        timeout: Request timeout in seconds
        verify: Verify TLS certificates
        user_agent: Optional User-Agent header

    Returns:
        CoOpsClient that owns its HTTPClientTransport
    """
    transport = create_http_transport(timeout=timeout, verify=verify, user_agent=user_agent)
    return CoOpsClient(ClientConfig.from_url(url), transport=transport, owns_transport=True)


def create_test_client(
    transport: MockClientTransport | None = None,
    base_path: str = "",
) -> CoOpsClient:
    """Create a client for testing.

    Args:
        transport: Pre-configured mock transport (creates new if None)
        base_path: Base path of the file resource

    Returns:
        CoOpsClient with MockClientTransport
    """
    config = ClientConfig(scheme="http", host="localhost", port=80, base_path=base_path)
    return CoOpsClient(
        config,
        transport=transport or create_mock_transport(),
        owns_transport=transport is None,
    )


__all__ = [
    "CONTENT_TYPE_JSON",
    "PROTOCOL_VERSION",
    "ClientConfig",
    "CoOpsClient",
    "create_client",
    "create_test_client",
]
