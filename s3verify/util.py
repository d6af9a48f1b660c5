"""
s3verify.util
~~~~~~~~~~~~~

Helpers for request bodies that may have to be replayed.
"""

import io
import os

from .exceptions import BodyResetError


def as_body_source(body):
    """
    Turn a request body into a readable source.

    Bytes and text are wrapped in a ``BytesIO`` so that they can be rewound
    between attempts. File-like objects are returned as is.
    """
    if body is None:
        return None
    if isinstance(body, str):
        body = body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(body))
    if not hasattr(body, "read"):
        raise TypeError("unsupported body type: {0}".format(type(body).__name__))
    return body


def is_resettable(body):
    """Return True if ``body`` can be rewound to offset 0."""
    if body is None or not hasattr(body, "seek"):
        return False
    seekable = getattr(body, "seekable", None)
    if seekable is None:
        return True
    try:
        return bool(seekable())
    except (OSError, ValueError):
        return False


def rewind(body):
    """
    Seek ``body`` back to its first byte.

    Raises:
        BodyResetError: If the body cannot be rewound
    """
    if not is_resettable(body):
        raise BodyResetError(
            "request body of type {0} cannot be rewound".format(type(body).__name__)
        )
    try:
        body.seek(0, os.SEEK_SET)
    except (OSError, ValueError) as e:
        raise BodyResetError("failed to rewind request body: {0}".format(e))


def body_length(body):
    """
    Return the number of bytes left in ``body``.

    Returns:
        int or None: Remaining length, None when it cannot be determined
    """
    if body is None:
        return 0
    if hasattr(body, "__len__"):
        return len(body)
    if hasattr(body, "getbuffer"):
        return len(body.getbuffer()) - body.tell()
    if hasattr(body, "fileno"):
        try:
            return os.fstat(body.fileno()).st_size - body.tell()
        except (OSError, io.UnsupportedOperation):
            pass
    if is_resettable(body):
        current = body.tell()
        end = body.seek(0, os.SEEK_END)
        body.seek(current, os.SEEK_SET)
        return end - current
    return None
