"""
s3verify.operations
~~~~~~~~~~~~~~~~~~~

Logical description of a pending S3 call.
"""

import requests

from ..signatures.streaming import DEFAULT_CHUNK_SIZE
from ..util import as_body_source, body_length
from .errors import ErrorResponse

SIGN_HEADER = "header"
SIGN_PRESIGN = "presign"
SIGN_STREAMING = "streaming"
# The request carries its own credentials, e.g. a signed POST policy form
SIGN_NONE = "none"

SIGN_MODES = (SIGN_HEADER, SIGN_PRESIGN, SIGN_STREAMING, SIGN_NONE)


class S3Request(object):
    """
    A request that can be signed and sent any number of times.

    The body is kept as a readable source. Bytes are wrapped so that they
    can be rewound; a file-like body is only replayable if it can seek.

    Args:
        bucket (str, optional): Bucket name, empty for service level calls
        key (str, optional): Object key
        params (dict, optional): Query parameters, ``None`` values become bare keys
        headers (dict, optional): Extra HTTP headers
        body: bytes, str or a file-like object
        sign_mode (str): One of ``header``, ``presign``, ``streaming``, ``none``
        expires (int): Presigned URL validity in seconds
        chunk_size (int): Payload bytes per chunk for streaming signatures
        files (dict, optional): Multipart form files, for POST policy uploads
        data (dict, optional): Multipart form fields, for POST policy uploads
    """

    def __init__(
        self,
        bucket="",
        key="",
        params=None,
        headers=None,
        body=None,
        sign_mode=SIGN_HEADER,
        expires=0,
        chunk_size=DEFAULT_CHUNK_SIZE,
        files=None,
        data=None,
    ):
        if sign_mode not in SIGN_MODES:
            raise ValueError("unknown sign mode: {0!r}".format(sign_mode))
        self.bucket = bucket or ""
        self.key = key or ""
        self.params = params or {}
        self.headers = dict(headers or {})
        self.body = as_body_source(body)
        self.sign_mode = sign_mode
        self.expires = expires
        self.chunk_size = chunk_size
        self.files = files
        self.data = data

    def bucket_url(self, config):
        """URL of this request against the endpoint of ``config``."""
        return config.target_url(self.bucket, self.key, self.params)

    def prepare(self, method, config):
        """
        Build a fresh, unsigned ``requests.PreparedRequest`` for one attempt.

        Args:
            method (str): HTTP method
            config (Config): Connection settings

        Returns:
            requests.PreparedRequest
        """
        headers = {"User-Agent": config.user_agent}
        headers.update(self.headers)
        body = self.body
        if body is not None and body_length(body) == 0:
            # requests would send an empty stream chunk-encoded
            body = None
        request = requests.Request(
            method.upper(),
            self.bucket_url(config),
            headers=headers,
            data=self.data if self.files or self.data else body,
            files=self.files,
        )
        return request.prepare()

    def error_response(self, response):
        """Decode the S3 error carried by ``response``."""
        return ErrorResponse.from_response(response, self.bucket, self.key)

    def __repr__(self):
        return "<S3Request bucket={0!r} key={1!r} sign_mode={2}>".format(
            self.bucket, self.key, self.sign_mode
        )
