"""JSON codec for the CoOps data model.

Timestamps are written as ISO-8601. Reading accepts ISO-8601 first and then
falls back to the date-string forms older servers emit (RFC 2822 / HTTP-date
and the legacy ``Feb 3, 2010 4:05:06 AM`` form). Both tiers must stay.
"""

from __future__ import annotations

import logging
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import DecodeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Legacy Java default date rendering, with and without AM/PM
LEGACY_DATE_FORMATS = (
    "%b %d, %Y %I:%M:%S %p",
    "%b %d, %Y %H:%M:%S",
)


def encode_timestamp(value: datetime) -> str:
    """Format a timestamp as ISO-8601, keeping any sub-second precision."""
    return value.isoformat()


def parse_timestamp(value: Any) -> datetime:
    """Parse a timestamp, trying ISO-8601 before the alternate formats.

    Raises:
        ValueError: If the value matches none of the accepted formats
    """
    if isinstance(value, datetime):
        return value

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    parsed = _parse_date_string(text)
    if parsed is None:
        raise ValueError(f"Unrecognized timestamp: {value!r}")

    logger.debug(f"Timestamp {text!r} decoded with fallback format")
    return parsed


def _parse_date_string(text: str) -> datetime | None:
    """Secondary parse for non-ISO date strings."""
    # Strict formats first: parsedate_to_datetime would silently drop AM/PM
    for fmt in LEGACY_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None


class JsonCodec:
    """Encodes models to JSON and decodes response bodies into models.

    Stateless; one instance can be shared by any number of clients.
    """

    def encode(self, model: BaseModel) -> str:
        """Serialize a model using wire names, omitting absent fields."""
        return model.model_dump_json(by_alias=True, exclude_none=True)

    def decode(self, model_type: type[ModelT], text: str | None) -> ModelT | None:
        """Decode a response body.

        Args:
            model_type: Model class to decode into
            text: Response body; None or blank means "no result"

        Returns:
            Decoded model, or None for an empty body

        Raises:
            DecodeError: If the body is not valid JSON or a field is invalid
        """
        if text is None or not text.strip():
            return None

        try:
            return model_type.model_validate_json(text)
        except ValidationError as e:
            raise DecodeError(f"Invalid {model_type.__name__} payload: {e}") from e


__all__ = [
    "JsonCodec",
    "encode_timestamp",
    "parse_timestamp",
]
