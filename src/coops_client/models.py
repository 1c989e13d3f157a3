"""CoOps data model.

Wire names are camelCase; attributes are snake_case with aliases, so both
``File(revision_number=1)`` and ``File.model_validate({"revisionNumber": 1})``
work. Unknown wire fields are ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .codec import encode_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Caller's permission level on a file."""

    OWNER = "OWNER"
    WRITER = "WRITER"
    READER = "READER"


class CoOpsModel(BaseModel):
    """Base for all wire records."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class File(CoOpsModel):
    """A file snapshot as returned by the server.

    ``revision_number`` is assigned by the server and only ever increases
    for a given file.
    """

    id: str | None = None
    name: str | None = None
    content: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    role: Role | None = None
    modified: datetime | None = None
    revision_number: int | None = Field(default=None, alias="revisionNumber")

    @field_validator("role", mode="before")
    @classmethod
    def _tolerate_unknown_role(cls, value: Any) -> Any:
        if value is None or isinstance(value, Role):
            return value
        try:
            return Role(value)
        except (TypeError, ValueError):
            # Newer servers may add roles; drop the value rather than the file.
            logger.warning(f"Ignoring unknown file role: {value!r}")
            return None

    @field_validator("modified", mode="before")
    @classmethod
    def _parse_modified(cls, value: Any) -> datetime | None:
        if value is None:
            return None
        return parse_timestamp(value)

    @field_serializer("modified")
    def _serialize_modified(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return encode_timestamp(value)


class FileJoin(CoOpsModel):
    """Result of joining a collaboration session.

    The websocket fields are only present when the server offers a realtime
    channel.
    """

    extensions: list[str] | None = None
    file_id: str | None = Field(default=None, alias="fileId")
    revision_number: int | None = Field(default=None, alias="revisionNumber")
    content: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")

    client_id: str | None = Field(default=None, alias="clientId")
    unsecure_websocket_url: str | None = Field(default=None, alias="unsecureWebSocketUrl")
    secure_websocket_url: str | None = Field(default=None, alias="secureWebSocketUrl")

    @property
    def has_realtime_channel(self) -> bool:
        """Check if the server offered a websocket channel."""
        return bool(self.unsecure_websocket_url or self.secure_websocket_url)


class Patch(CoOpsModel):
    """An outbound change against ``revision_number``.

    ``patch`` is an opaque payload produced by ``algorithm``; ``properties``
    carries algorithm-specific metadata.
    """

    revision_number: int | None = Field(default=None, alias="revisionNumber")
    algorithm: str | None = None
    patch: str | None = None
    properties: dict[str, str] | None = None


__all__ = ["CoOpsModel", "File", "FileJoin", "Patch", "Role"]
