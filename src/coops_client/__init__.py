"""CoOps client - Client for the CoOps collaborative file editing protocol.

Provides multiple transport modes:
- http: Real requests with httpx
- mock: Canned responses for testing without real I/O

Operations: join_file, get_file, get_file_revision, save_file, patch_file.
"""

from .auth import Auth, BearerTokenAuth, CookieAuth, HeaderAuth
from .client import (
    CONTENT_TYPE_JSON,
    PROTOCOL_VERSION,
    ClientConfig,
    CoOpsClient,
    create_client,
    create_test_client,
)
from .codec import JsonCodec, encode_timestamp, parse_timestamp
from .errors import (
    CoOpsError,
    DecodeError,
    ForbiddenError,
    ServerError,
    TransportError,
    UnauthorizedError,
    UsageError,
)
from .models import File, FileJoin, Patch, Role
from .transport import (
    BaseClientTransport,
    ClientTransport,
    HTTPClientTransport,
    HTTPTransportConfig,
    MockClientTransport,
    RecordedRequest,
    create_http_transport,
    create_mock_transport,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "CoOpsClient",
    "ClientConfig",
    "PROTOCOL_VERSION",
    "CONTENT_TYPE_JSON",
    "create_client",
    "create_test_client",
    # Models
    "File",
    "FileJoin",
    "Patch",
    "Role",
    # Codec
    "JsonCodec",
    "encode_timestamp",
    "parse_timestamp",
    # Auth
    "Auth",
    "BearerTokenAuth",
    "CookieAuth",
    "HeaderAuth",
    # Transport Protocol & Base
    "ClientTransport",
    "BaseClientTransport",
    "HTTPTransportConfig",
    "RecordedRequest",
    # Transport Implementations
    "HTTPClientTransport",
    "MockClientTransport",
    # Transport Factory Functions
    "create_http_transport",
    "create_mock_transport",
    # Errors
    "CoOpsError",
    "UsageError",
    "ServerError",
    "UnauthorizedError",
    "ForbiddenError",
    "TransportError",
    "DecodeError",
]
