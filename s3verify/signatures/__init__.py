"""
s3verify.signatures
~~~~~~~~~~~~~~~~~~~

AWS Signature Version 4 for S3: header based, presigned and streaming
signatures, their verification, and POST policy signing.
"""

from .base import BaseSignature
from .post_policy import post_policy_form, sign_post_policy
from .streaming import signed_chunk_length, stream_content_length
from .v4 import (
    SignatureV4,
    presign,
    sign,
    sign_streaming,
    verify,
    verify_presigned,
)

__all__ = [
    "BaseSignature",
    "SignatureV4",
    "sign",
    "presign",
    "sign_streaming",
    "verify",
    "verify_presigned",
    "signed_chunk_length",
    "stream_content_length",
    "sign_post_policy",
    "post_policy_form",
]
