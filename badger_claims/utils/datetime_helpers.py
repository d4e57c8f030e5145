"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- The evaluation instant is always a timezone-aware UTC datetime
- Wall-clock checks convert to the rule's own timezone, never the server's
- Deadlines are integer unix seconds
"""

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from badger_claims.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(timezone.utc)


def unix_seconds(moment: datetime) -> int:
    """Convert an aware datetime to integer unix seconds"""
    return int(ensure_utc(moment).timestamp())


def ensure_utc(moment: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC

    Naive datetimes are assumed to already be UTC.
    """
    if moment.tzinfo is None:
        logger.debug("Naive datetime treated as UTC")
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name

    Raises:
        ConfigurationError: If the timezone is unknown (a catalog defect, not user input)
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown timezone '{tz_name}' in achievement rules",
            config_key="timezone",
            cause=e
        )


def local_hour(moment: datetime, tz_name: str) -> int:
    """Wall-clock hour of `moment` in the named timezone"""
    return ensure_utc(moment).astimezone(get_zone(tz_name)).hour


def hour_in_window(hour: int, hour_start: int, hour_end: int) -> bool:
    """
    Check hour against a [start, end) window

    A window with start > end wraps midnight, e.g. 22-2 covers 22, 23, 0, 1.
    """
    if hour_start <= hour_end:
        return hour_start <= hour < hour_end
    return hour >= hour_start or hour < hour_end
