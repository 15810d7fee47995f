"""
Deadline utilities.

Converts the Lambda-Runtime-Deadline-Ms header into an absolute point in time.
"""

import re
from datetime import datetime, timedelta, timezone

from .exceptions import MalformedInvokeError

MS_PER_S = 1000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_BASE10_INT = re.compile(r"[+-]?[0-9]+")


def unix_millis(ms: int) -> datetime:
    """Epoch milliseconds to an aware UTC datetime, without float rounding."""
    seconds, millis = divmod(ms, MS_PER_S)
    return _EPOCH + timedelta(seconds=seconds, milliseconds=millis)


def parse_deadline(value: str) -> datetime:
    """
    Parse a deadline header value.

    Raises:
        MalformedInvokeError: value is not a base-10 int64 or is out of the datetime range
    """
    if not _BASE10_INT.fullmatch(value):
        raise MalformedInvokeError(f"failed to parse deadline: invalid syntax: {value!r}")
    deadline_epoch_ms = int(value, 10)
    if not _INT64_MIN <= deadline_epoch_ms <= _INT64_MAX:
        raise MalformedInvokeError(f"failed to parse deadline: value out of range: {value!r}")
    try:
        return unix_millis(deadline_epoch_ms)
    except OverflowError as e:
        raise MalformedInvokeError(f"failed to parse deadline: {e}") from e
