"""
s3verify.signatures.post_policy
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Browser-based POST upload policies.

Only what is needed to obtain a signed policy is implemented: a policy
pinned to one bucket and key, and the form fields that carry its signature.
"""

import base64
import json

from ..datetime_utils import format_amz_date, format_expiration, get_utc_datetime
from .keys import SIGN_V4_ALGORITHM, derive_signing_key, get_credential, get_signature


def new_post_policy(bucket, key, expiration, credential, date):
    """
    Build a POST policy accepting exactly ``bucket`` and ``key``.

    Args:
        bucket (str): Bucket name
        key (str): Object key
        expiration (datetime): Moment the policy stops being accepted
        credential (str): ``<access key>/<scope>`` of the signer
        date (datetime): Signing time

    Returns:
        bytes: JSON policy document
    """
    policy = {
        "expiration": format_expiration(expiration),
        "conditions": [
            ["eq", "$bucket", bucket],
            ["eq", "$key", key],
            ["eq", "$x-amz-algorithm", SIGN_V4_ALGORITHM],
            ["eq", "$x-amz-date", format_amz_date(date)],
            ["eq", "$x-amz-credential", credential],
        ],
    }
    return json.dumps(policy, separators=(",", ":")).encode("utf-8")


def sign_post_policy(policy, credentials, date):
    """
    Sign a POST policy.

    The string to sign is the base64 encoded policy itself.

    Returns:
        dict: Form fields to send along with the upload
    """
    encoded = base64.b64encode(policy).decode("ascii")
    signing_key = derive_signing_key(credentials.secret_key, credentials.region, date)
    return {
        "policy": encoded,
        "x-amz-algorithm": SIGN_V4_ALGORITHM,
        "x-amz-credential": get_credential(
            credentials.access_key, credentials.region, date
        ),
        "x-amz-date": format_amz_date(date),
        "x-amz-signature": get_signature(signing_key, encoded),
    }


def post_policy_form(bucket, key, credentials, expiration, date=None):
    """
    Build and sign a policy for one object upload.

    Returns:
        dict: ``key`` plus the signed policy fields
    """
    date = date or get_utc_datetime()
    credential = get_credential(credentials.access_key, credentials.region, date)
    policy = new_post_policy(bucket, key, expiration, credential, date)
    fields = {"key": key}
    fields.update(sign_post_policy(policy, credentials, date))
    return fields
