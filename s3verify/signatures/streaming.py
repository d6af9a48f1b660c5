"""
s3verify.signatures.streaming
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

``aws-chunked`` payload framing for streaming signatures.

Each chunk is sent as::

    hex(len) ";chunk-signature=" signature CRLF data CRLF

and the stream ends with a zero-length chunk. Every chunk signature is
computed over the previous one, starting from the seed signature of the
request headers, so chunks cannot be reordered or dropped.
"""

import hashlib

from ..exceptions import S3VerifyError
from .canonical import EMPTY_SHA256
from .keys import get_signature

STREAMING_PAYLOAD = "STREAMING-AWS4-HMAC-SHA256-PAYLOAD"
STREAMING_ALGORITHM = "AWS4-HMAC-SHA256-PAYLOAD"
DEFAULT_CHUNK_SIZE = 64 * 1024

_SIGNATURE_FIELD = ";chunk-signature="
_SIGNATURE_LENGTH = 64
_CRLF = b"\r\n"


def signed_chunk_length(chunk_data_size):
    """Length of one framed chunk carrying ``chunk_data_size`` bytes."""
    return (
        len("{0:x}".format(chunk_data_size))
        + len(_SIGNATURE_FIELD)
        + _SIGNATURE_LENGTH
        + len(_CRLF)
        + chunk_data_size
        + len(_CRLF)
    )


def stream_content_length(data_len, chunk_size):
    """
    Length of the whole framed stream, as sent in ``Content-Length``.

    Args:
        data_len (int): Raw body length
        chunk_size (int): Payload bytes per chunk

    Returns:
        int: Full chunks + remainder chunk (if any) + zero-length terminator
    """
    if data_len < 0:
        raise ValueError("data length must not be negative")
    if chunk_size <= 0:
        raise ValueError("chunk size must be positive")
    full_chunks, remainder = divmod(data_len, chunk_size)
    length = full_chunks * signed_chunk_length(chunk_size)
    if remainder:
        length += signed_chunk_length(remainder)
    return length + signed_chunk_length(0)


def chunk_string_to_sign(timestamp, scope, previous_signature, chunk):
    return "\n".join(
        [
            STREAMING_ALGORITHM,
            timestamp,
            scope,
            previous_signature,
            EMPTY_SHA256,
            hashlib.sha256(chunk).hexdigest(),
        ]
    )


class AwsChunkedStream(object):
    """
    File-like body that frames and signs ``source`` chunk by chunk.

    Args:
        source: Readable raw body positioned at its first byte
        data_len (int): Number of raw bytes to send
        chunk_size (int): Payload bytes per chunk
        signing_key (bytes): Derived SigV4 signing key
        scope (str): Credential scope of the seed signature
        timestamp (str): ``X-Amz-Date`` of the seed signature
        seed_signature (str): Signature of the request headers
    """

    def __init__(
        self, source, data_len, chunk_size, signing_key, scope, timestamp, seed_signature
    ):
        self.source = source
        self.data_len = data_len
        self.chunk_size = chunk_size
        self.signing_key = signing_key
        self.scope = scope
        self.timestamp = timestamp
        self.signature = seed_signature
        self._frames = self._generate()
        self._buffer = b""

    def __len__(self):
        return stream_content_length(self.data_len, self.chunk_size)

    def __iter__(self):
        return iter(self._frames)

    def _read_chunk(self, size):
        chunk = b""
        while len(chunk) < size:
            data = self.source.read(size - len(chunk))
            if not data:
                break
            chunk += data
        return chunk

    def _generate(self):
        remaining = self.data_len
        while remaining > 0:
            chunk = self._read_chunk(min(self.chunk_size, remaining))
            if not chunk:
                raise S3VerifyError(
                    "request body ended {0} bytes early".format(remaining)
                )
            remaining -= len(chunk)
            yield self.frame(chunk)
        yield self.frame(b"")

    def frame(self, chunk):
        """Sign ``chunk`` against the previous signature and frame it."""
        string_to_sign = chunk_string_to_sign(
            self.timestamp, self.scope, self.signature, chunk
        )
        self.signature = get_signature(self.signing_key, string_to_sign)
        header = "{0:x}{1}{2}".format(len(chunk), _SIGNATURE_FIELD, self.signature)
        return header.encode("ascii") + _CRLF + chunk + _CRLF

    def read(self, size=-1):
        if size is None:
            size = -1
        while size < 0 or len(self._buffer) < size:
            try:
                self._buffer += next(self._frames)
            except StopIteration:
                break
        if size < 0:
            data, self._buffer = self._buffer, b""
        else:
            data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data
