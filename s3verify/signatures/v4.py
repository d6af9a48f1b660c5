"""
s3verify.signatures.v4
~~~~~~~~~~~~~~~~~~~~~~

AWS Signature Version 4 for S3.

Three signing flavours are supported:

* header based, an ``Authorization`` header is added to the request;
* presigned, the signature and its expiry travel in the query string;
* streaming, the body is re-framed as ``aws-chunked`` with chained
  per-chunk signatures.

The header based signer never hashes the request body, it always sends
``X-Amz-Content-Sha256: UNSIGNED-PAYLOAD``. The body is therefore not
covered by the signature.

Requests are duck typed: anything with ``method``, ``url``, ``headers``
(a mutable mapping) and ``body`` attributes can be signed, which includes
``requests.PreparedRequest``.
"""

import hmac
import logging
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from ..datetime_utils import expires_at, format_amz_date, parse_amz_date, to_utc
from ..exceptions import SigningError
from ..util import as_body_source, body_length
from .base import BaseSignature
from .canonical import (
    build_canonical_request,
    canonical_query_string,
    del_header,
    get_header,
    header_text,
    request_host,
    set_header,
    signed_headers,
)
from .keys import (
    SIGN_V4_ALGORITHM,
    derive_signing_key,
    get_credential,
    get_scope,
    get_signature,
    get_string_to_sign,
)
from .streaming import (
    DEFAULT_CHUNK_SIZE,
    STREAMING_PAYLOAD,
    AwsChunkedStream,
    stream_content_length,
)

logger = logging.getLogger(__name__)

UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

DEFAULT_EXPIRES = 7 * 24 * 60 * 60
MAX_EXPIRES = 7 * 24 * 60 * 60

PRESIGN_PARAMS = (
    "X-Amz-Algorithm",
    "X-Amz-Credential",
    "X-Amz-Date",
    "X-Amz-Expires",
    "X-Amz-SignedHeaders",
    "X-Amz-Signature",
)


def parse_signed_headers(authorization):
    """
    Extract the ``SignedHeaders`` list from an ``Authorization`` value.

    A malformed value yields an empty list rather than an error.
    """
    if not authorization:
        return []
    fields = header_text(authorization).split(" ", 1)
    if len(fields) < 2:
        return []
    for field in fields[1].split(","):
        field = field.strip()
        if field.startswith("SignedHeaders="):
            names = field[len("SignedHeaders="):].split(";")
            return [name for name in names if name]
    return []


def _same(presented, expected):
    return hmac.compare_digest(
        header_text(presented).encode("utf-8"), expected.encode("utf-8")
    )


class SignatureV4(BaseSignature):
    """
    AWS Signature Version 4 implementation.

    Args:
        credentials (Credentials): Access key, secret key and region
        clock (callable, optional): Returns the current UTC datetime, every
            signature asks it again so that retries carry fresh timestamps
    """

    def authorization(self, request, timestamp, headers=None, strict=True):
        """
        Compute the ``Authorization`` value for ``request``.

        Args:
            request: The request object
            timestamp (str): ``X-Amz-Date`` to sign with
            headers (dict, optional): Headers to canonicalize, defaults to all
                request headers
            strict (bool): Raise on an invalid path rather than signing it as is

        Returns:
            tuple: (authorization header value, signature)
        """
        headers = request.headers if headers is None else headers
        parts = urlsplit(request.url)
        canonical_request = build_canonical_request(
            request.method,
            parts.path,
            parts.query,
            headers,
            request_host(request),
            strict=strict,
        )
        scope = get_scope(self.region, timestamp)
        signature = get_signature(
            derive_signing_key(self.credentials.secret_key, self.region, timestamp),
            get_string_to_sign(timestamp, scope, canonical_request),
        )
        header = "{0} Credential={1},SignedHeaders={2},Signature={3}".format(
            SIGN_V4_ALGORITHM,
            get_credential(self.access_key, self.region, timestamp),
            signed_headers(headers),
            signature,
        )
        return header, signature

    def sign_request(self, request):
        """
        Sign request with an ``Authorization`` header.

        Args:
            request: The request object to sign

        Returns:
            The signed request object
        """
        self.check_credentials()
        timestamp = format_amz_date(self.clock())

        set_header(request.headers, "X-Amz-Date", timestamp)
        set_header(request.headers, "Host", request_host(request))
        set_header(request.headers, "X-Amz-Content-Sha256", UNSIGNED_PAYLOAD)

        header, _ = self.authorization(request, timestamp)
        set_header(request.headers, "Authorization", header)
        logger.debug("Signed %s %s at %s", request.method, request.url, timestamp)
        return request

    def presign_request(self, request, expires=DEFAULT_EXPIRES):
        """
        Sign request by embedding the signature in its URL.

        Args:
            request: The request object to sign
            expires (int): Validity of the URL in seconds

        Returns:
            The request object with a presigned ``url``

        Raises:
            SigningError: If ``expires`` is outside 1..604800 seconds
        """
        self.check_credentials()
        expires = int(expires)
        if not 1 <= expires <= MAX_EXPIRES:
            raise SigningError(
                "presigned URL expiry must be between 1 and {0} seconds".format(
                    MAX_EXPIRES
                )
            )
        timestamp = format_amz_date(self.clock())
        host = request_host(request)
        parts = urlsplit(request.url)

        # Drop a previous presignature so that the request can be signed again
        params = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key not in PRESIGN_PARAMS
        ]
        params.extend(
            [
                ("X-Amz-Algorithm", SIGN_V4_ALGORITHM),
                ("X-Amz-Credential", get_credential(self.access_key, self.region, timestamp)),
                ("X-Amz-Date", timestamp),
                ("X-Amz-Expires", str(expires)),
                ("X-Amz-SignedHeaders", signed_headers(request.headers)),
            ]
        )
        canonical_request = build_canonical_request(
            request.method,
            parts.path,
            params,
            request.headers,
            host,
            payload_hash=UNSIGNED_PAYLOAD,
        )
        signature = get_signature(
            derive_signing_key(self.credentials.secret_key, self.region, timestamp),
            get_string_to_sign(
                timestamp, get_scope(self.region, timestamp), canonical_request
            ),
        )
        query = canonical_query_string(params) + "&X-Amz-Signature=" + signature
        request.url = urlunsplit(
            (parts.scheme, parts.netloc, parts.path, query, parts.fragment)
        )
        logger.debug("Presigned %s %s for %ds", request.method, parts.path, expires)
        return request

    def sign_streaming(self, request, chunk_size=DEFAULT_CHUNK_SIZE):
        """
        Sign request for an ``aws-chunked`` streaming upload.

        The request headers are signed first (the seed signature), then the
        body is replaced by an :class:`AwsChunkedStream` that signs each
        chunk as it is read.

        Args:
            request: The request object to sign, its body must have a known length
            chunk_size (int): Payload bytes per chunk

        Returns:
            The signed request object
        """
        self.check_credentials()
        if chunk_size <= 0:
            raise ValueError("chunk size must be positive")
        source = as_body_source(request.body if request.body is not None else b"")
        data_len = body_length(source)
        if data_len is None:
            raise SigningError("streaming signature needs a body of known length")

        timestamp = format_amz_date(self.clock())
        set_header(request.headers, "X-Amz-Date", timestamp)
        set_header(request.headers, "Host", request_host(request))
        set_header(request.headers, "X-Amz-Content-Sha256", STREAMING_PAYLOAD)
        set_header(request.headers, "Content-Encoding", "aws-chunked")
        set_header(request.headers, "X-Amz-Decoded-Content-Length", str(data_len))
        set_header(
            request.headers,
            "Content-Length",
            str(stream_content_length(data_len, chunk_size)),
        )
        # The framed length is known, the body must not be sent chunk-encoded
        del_header(request.headers, "Transfer-Encoding")

        header, seed_signature = self.authorization(request, timestamp)
        set_header(request.headers, "Authorization", header)

        request.body = AwsChunkedStream(
            source,
            data_len,
            chunk_size,
            derive_signing_key(self.credentials.secret_key, self.region, timestamp),
            get_scope(self.region, timestamp),
            timestamp,
            seed_signature,
        )
        logger.debug(
            "Stream-signed %s %s, %d bytes in %d byte chunks",
            request.method,
            request.url,
            data_len,
            chunk_size,
        )
        return request

    def is_signed(self, request):
        """
        Return True if ``request`` carries a valid header signature.

        Only the headers declared in ``SignedHeaders`` (plus ``Host``) are
        canonicalized, and the request's own ``X-Amz-Date`` is used.
        """
        presented = get_header(request.headers, "Authorization")
        if not presented:
            return False
        timestamp = get_header(request.headers, "X-Amz-Date")
        try:
            parse_amz_date(timestamp)
        except SigningError:
            return False

        headers = {}
        for name in parse_signed_headers(presented):
            value = get_header(request.headers, name)
            headers[name] = "" if value is None else value
        expected, _ = self.authorization(
            request, header_text(timestamp), headers=headers, strict=False
        )
        return _same(presented, expected)

    def is_presigned_valid(self, request, now=None):
        """
        Return True if the presigned URL of ``request`` is valid at ``now``.

        The URL is rejected once ``now`` is past ``X-Amz-Date + X-Amz-Expires``.
        """
        parts = urlsplit(request.url)
        params = parse_qsl(parts.query, keep_blank_values=True)
        values = dict(params)
        if any(name not in values for name in PRESIGN_PARAMS):
            return False
        if values["X-Amz-Algorithm"] != SIGN_V4_ALGORITHM:
            return False
        try:
            signed_at = parse_amz_date(values["X-Amz-Date"])
            expires = int(values["X-Amz-Expires"])
        except (SigningError, ValueError):
            return False

        now = to_utc(now if now is not None else self.clock())
        if now > expires_at(signed_at, expires):
            return False
        timestamp = values["X-Amz-Date"]
        if values["X-Amz-Credential"] != get_credential(
            self.access_key, self.region, timestamp
        ):
            return False

        headers = {}
        for name in values["X-Amz-SignedHeaders"].split(";"):
            if name and name != "host":
                value = get_header(request.headers, name)
                headers[name] = "" if value is None else value
        canonical_request = build_canonical_request(
            request.method,
            parts.path,
            [(key, value) for key, value in params if key != "X-Amz-Signature"],
            headers,
            request_host(request),
            payload_hash=UNSIGNED_PAYLOAD,
            strict=False,
        )
        expected = get_signature(
            derive_signing_key(self.credentials.secret_key, self.region, timestamp),
            get_string_to_sign(
                timestamp, get_scope(self.region, timestamp), canonical_request
            ),
        )
        return _same(values["X-Amz-Signature"], expected)


def sign(request, credentials, clock=None):
    """Sign ``request`` with an ``Authorization`` header."""
    return SignatureV4(credentials, clock).sign_request(request)


def presign(request, credentials, expires=DEFAULT_EXPIRES, clock=None):
    """Presign the URL of ``request``."""
    return SignatureV4(credentials, clock).presign_request(request, expires)


def sign_streaming(request, credentials, chunk_size=DEFAULT_CHUNK_SIZE, clock=None):
    """Sign ``request`` for an ``aws-chunked`` upload."""
    return SignatureV4(credentials, clock).sign_streaming(request, chunk_size)


def verify(request, credentials):
    """Return True if the ``Authorization`` header of ``request`` is valid."""
    return SignatureV4(credentials).is_signed(request)


def verify_presigned(request, credentials, now=None):
    """Return True if the presigned URL of ``request`` is valid at ``now``."""
    return SignatureV4(credentials).is_presigned_valid(request, now)
