"""
s3verify.datetime_utils
~~~~~~~~~~~~~~~~~~~~~~~

UTC time helpers for the SigV4 timestamp formats.
"""

from datetime import datetime, timedelta, timezone

from .exceptions import SigningError

# Basic ISO-8601, e.g. 20160101T120000Z
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"
# Expiration format used inside POST policies
EXPIRATION_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def get_utc_datetime():
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value):
    """Normalize a datetime to aware UTC. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_amz_date(value):
    return to_utc(value).strftime(AMZ_DATE_FORMAT)


def format_date_stamp(value):
    """
    Return the YYYYMMDD part of a signing date.

    Args:
        value: A datetime, or an already formatted date stamp / amz date string

    Returns:
        str: Date stamp
    """
    if isinstance(value, datetime):
        return to_utc(value).strftime(DATE_STAMP_FORMAT)
    return str(value)[:8]


def parse_amz_date(value):
    """
    Parse an ``X-Amz-Date`` value.

    Raises:
        SigningError: If the value is missing or not in basic ISO-8601 form
    """
    if not value:
        raise SigningError("missing X-Amz-Date")
    try:
        parsed = datetime.strptime(value, AMZ_DATE_FORMAT)
    except (TypeError, ValueError):
        raise SigningError("invalid X-Amz-Date: {0!r}".format(value))
    return parsed.replace(tzinfo=timezone.utc)


def format_expiration(value):
    """Format a POST policy expiration with millisecond precision."""
    text = to_utc(value).strftime(EXPIRATION_FORMAT)
    # %f is microseconds; the policy grammar wants milliseconds
    return text[:-4] + "Z"


def expires_at(signed_at, expires_seconds):
    return signed_at + timedelta(seconds=int(expires_seconds))
