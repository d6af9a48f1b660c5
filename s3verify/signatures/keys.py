"""
s3verify.signatures.keys
~~~~~~~~~~~~~~~~~~~~~~~~

Signing key derivation and the SigV4 string to sign.
"""

import hashlib
import hmac

from ..datetime_utils import format_date_stamp

SIGN_V4_ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
TERMINATOR = "aws4_request"


def sum_hmac(key, msg):
    if not isinstance(msg, bytes):
        msg = msg.encode("utf-8")
    return hmac.new(key, msg, hashlib.sha256).digest()


def sum256_hex(data):
    if not isinstance(data, bytes):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def derive_signing_key(secret_key, region, date):
    """
    Derive the date, region and service scoped signing key.

    Args:
        secret_key (str): Secret access key
        region (str): Signing region
        date: datetime or YYYYMMDD string

    Returns:
        bytes: 32 byte signing key
    """
    date_key = sum_hmac(("AWS4" + secret_key).encode("utf-8"), format_date_stamp(date))
    date_region_key = sum_hmac(date_key, region)
    date_region_service_key = sum_hmac(date_region_key, SERVICE)
    return sum_hmac(date_region_service_key, TERMINATOR)


def get_scope(region, date):
    return "/".join([format_date_stamp(date), region, SERVICE, TERMINATOR])


def get_credential(access_key, region, date):
    return access_key + "/" + get_scope(region, date)


def get_string_to_sign(timestamp, scope, canonical_request):
    return "\n".join(
        [SIGN_V4_ALGORITHM, timestamp, scope, sum256_hex(canonical_request)]
    )


def get_signature(signing_key, string_to_sign):
    return hmac.new(
        signing_key, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()
