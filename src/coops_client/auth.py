"""Authentication capability.

An auth object only has to produce the headers that authenticate a request.
Transports attach every header it returns; passing ``None`` instead of an
auth object sends the request unauthenticated.

Example:
    class SignedAuth:
        def get_headers(self) -> dict[str, str]:
            return {"X-Signature": sign(secret)}

    client.get_file(auth=SignedAuth())
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Auth(Protocol):
    """Protocol for request authentication."""

    def get_headers(self) -> Mapping[str, str] | None:
        """Return headers to add to the request, or None for none."""
        ...


@dataclass(frozen=True)
class BearerTokenAuth:
    """OAuth-style bearer token."""

    token: str

    def get_headers(self) -> Mapping[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass(frozen=True)
class HeaderAuth:
    """Fixed set of headers, e.g. an API key or a pre-computed signature."""

    headers: Mapping[str, str] = field(default_factory=dict)

    def get_headers(self) -> Mapping[str, str]:
        return dict(self.headers)


@dataclass(frozen=True)
class CookieAuth:
    """Session cookies sent as a single Cookie header."""

    cookies: Mapping[str, str] = field(default_factory=dict)

    def get_headers(self) -> Mapping[str, str] | None:
        if not self.cookies:
            return None
        return {"Cookie": "; ".join(f"{name}={value}" for name, value in self.cookies.items())}


def auth_headers(auth: Auth | None) -> dict[str, str]:
    """Collect the headers an auth object produces (empty for None)."""
    if auth is None:
        return {}
    headers = auth.get_headers()
    if not headers:
        return {}
    return dict(headers)


__all__ = ["Auth", "BearerTokenAuth", "CookieAuth", "HeaderAuth", "auth_headers"]
