"""Decoding of slot-query responses into appointment records."""

from __future__ import annotations

from pydantic import TypeAdapter, ValidationError

from .errors import DecodeError
from .models import Appointment


_APPOINTMENTS = TypeAdapter(list[Appointment])


def decode_appointments(raw: bytes) -> list[Appointment]:
    """
    Decode a JSON array of appointment objects.

    Raises DecodeError on malformed JSON, a non-array top level or elements
    that are not appointment objects. Unknown fields are ignored.
    """
    try:
        return _APPOINTMENTS.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.error_count() else {}
        raise DecodeError(
            f"Failed to unmarshal response data: {first.get('msg', e)} "
            f"(at {list(first.get('loc', ()))}, {len(raw)} bytes)"
        ) from e


__all__ = ["decode_appointments"]
