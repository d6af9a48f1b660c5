# -*- coding: utf-8 -*-
import logging

from .auth import S3Auth
from .config import Config, Credentials
from .exceptions import (
    Aborted,
    BodyResetError,
    EncodingError,
    Exhausted,
    ProtocolError,
    S3VerifyError,
    SigningError,
    TransportError,
)
from .executor import RetryExecutor
from .operations import S3Request
from .operations.errors import ErrorResponse
from .retry import BackoffTimer, ErrorClassification, classify
from .signatures import (
    SignatureV4,
    post_policy_form,
    presign,
    sign,
    sign_streaming,
    stream_content_length,
    verify,
    verify_presigned,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__title__ = "s3verify"
__version__ = "1.0.0"
__license__ = "MIT"
__all__ = [
    "Config",
    "Credentials",
    "S3Auth",
    "S3Request",
    "RetryExecutor",
    "ErrorResponse",
    "SignatureV4",
    "sign",
    "presign",
    "sign_streaming",
    "verify",
    "verify_presigned",
    "stream_content_length",
    "post_policy_form",
    "BackoffTimer",
    "ErrorClassification",
    "classify",
    "S3VerifyError",
    "EncodingError",
    "SigningError",
    "TransportError",
    "ProtocolError",
    "Aborted",
    "BodyResetError",
    "Exhausted",
]
