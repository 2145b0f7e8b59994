"""Value normalization for converting document store values into portable types."""

import base64
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

from dateutil import tz

logger = logging.getLogger(__name__)

UTC = tz.tzutc()
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Serialized timestamp shapes: Firestore REST/JSON exports use
# {"_seconds", "_nanoseconds"}, protobuf-style payloads use {"seconds", "nanoseconds"}.
TIMESTAMP_KEYS = (
    ("seconds", "nanoseconds"),
    ("_seconds", "_nanoseconds"),
)

TO_DATETIME_METHODS = ("to_datetime", "ToDatetime", "to_pydatetime")


class _Absent:
    """Marker for a field that has no value at all (as opposed to None)."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def format_timestamp(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC already.

    Example:
        >>> format_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678901))
        '2024-01-02T03:04:05.678Z'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
        f".{dt.microsecond // 1000:03d}Z"
    )


def timestamp_from_epoch(seconds: float, nanoseconds: float = 0) -> str:
    """Format a {seconds, nanoseconds} pair as an ISO-8601 UTC string."""
    millis = math.floor(seconds * 1000) + int(nanoseconds) // 1_000_000
    return format_timestamp(EPOCH + timedelta(milliseconds=millis))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _timestamp_parts(value: Mapping) -> Optional[Tuple[float, float]]:
    """Return (seconds, nanoseconds) if the mapping is a serialized timestamp."""
    for seconds_key, nanos_key in TIMESTAMP_KEYS:
        if seconds_key not in value or not set(value) <= {seconds_key, nanos_key}:
            continue
        seconds = value[seconds_key]
        nanos = value.get(nanos_key, 0)
        if _is_number(seconds) and _is_number(nanos):
            return seconds, nanos
    return None


def _to_datetime(value: Any) -> Optional[datetime]:
    """Convert objects offering a to-date conversion (e.g. protobuf Timestamp)."""
    for method_name in TO_DATETIME_METHODS:
        method = getattr(value, method_name, None)
        if callable(method):
            converted = method()
            if isinstance(converted, datetime):
                return converted
    return None


def _is_geo_point(value: Any) -> bool:
    return (
        not isinstance(value, Mapping)
        and _is_number(getattr(value, "latitude", None))
        and _is_number(getattr(value, "longitude", None))
    )


def _is_document_reference(value: Any) -> bool:
    return (
        isinstance(getattr(value, "path", None), str)
        and hasattr(value, "id")
        and hasattr(value, "parent")
    )


def normalize_value(value: Any) -> Any:
    """
    Convert a source value into a portable scalar or JSON-compatible structure.

    - Timestamps (datetime objects, objects with a to-date conversion, or
      serialized {seconds, nanoseconds} maps) become ISO-8601 UTC strings
    - Geo points become {"latitude", "longitude"} maps
    - Document references become their path
    - Bytes become base64 text
    - Mappings and sequences are normalized recursively
    - Everything else is returned unchanged

    The argument is never mutated.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value

    if isinstance(value, datetime):
        return format_timestamp(value)

    if isinstance(value, Mapping):
        parts = _timestamp_parts(value)
        if parts is not None:
            return timestamp_from_epoch(*parts)
        return {key: normalize_value(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]

    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")

    converted = _to_datetime(value)
    if converted is not None:
        return format_timestamp(converted)

    if _is_geo_point(value):
        return {"latitude": value.latitude, "longitude": value.longitude}

    if _is_document_reference(value):
        return value.path

    return value


def normalize_record(fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Normalize every field of a document body."""
    if not fields:
        return {}
    return {key: normalize_value(value) for key, value in fields.items()}


def _strip_absent(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _strip_absent(v) for k, v in value.items() if v is not ABSENT}
    if isinstance(value, list):
        # JSON arrays cannot have holes
        return [None if item is ABSENT else _strip_absent(item) for item in value]
    return value


def sanitize_for_destination(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Drop fields whose value is ABSENT. Explicit None values are kept.

    Args:
        row: Destination row

    Returns:
        A new row safe to send to the destination
    """
    return _strip_absent(row)
