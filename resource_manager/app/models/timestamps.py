"""
RFC 3339 timestamp helpers for wire conversion.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import AwareDatetime, TypeAdapter

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_timestamp_adapter = TypeAdapter(AwareDatetime)

# The service reports nanoseconds; datetime holds microseconds.
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; an offset is required."""
    return _timestamp_adapter.validate_python(_EXTRA_FRACTION.sub(r"\1", value.strip()))


def rfc3339_to_millis(value: Optional[str]) -> Optional[int]:
    """Parse an RFC 3339 timestamp into epoch milliseconds (sub-millis truncated)."""
    if value is None:
        return None
    return (parse_rfc3339(value) - EPOCH) // timedelta(milliseconds=1)


def millis_to_rfc3339(millis: Optional[int]) -> Optional[str]:
    """Format epoch milliseconds as a UTC RFC 3339 timestamp."""
    if millis is None:
        return None
    moment = EPOCH + timedelta(milliseconds=millis)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_rfc3339() -> str:
    now = datetime.now(timezone.utc)
    return millis_to_rfc3339((now - EPOCH) // timedelta(milliseconds=1))
