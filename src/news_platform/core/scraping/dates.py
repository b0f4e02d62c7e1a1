"""Best-effort timestamp coercion for scraped and fed dates."""

from __future__ import annotations

import calendar
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Turn strings, epoch numbers or `time.struct_time` into aware UTC datetimes.

    Returns None for anything that cannot be interpreted; callers treat the
    date as optional.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, time.struct_time):
        dt = datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            dt = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            dt = dateutil_parser.parse(text)
        except (ValueError, OverflowError) as exc:
            logger.debug("Unparseable date %r: %s", text, exc)
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
