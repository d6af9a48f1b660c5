"""
s3verify.signatures.canonical
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Canonical request construction for AWS Signature Version 4.

The canonical request is::

    <HTTPMethod>\\n
    <CanonicalURI>\\n
    <CanonicalQueryString>\\n
    <CanonicalHeaders>\\n
    <SignedHeaders>\\n
    <HashedPayload>

Every function here is pure, so a single builder can be shared by any
number of threads.
"""

import hashlib
from urllib.parse import parse_qsl, quote, unquote_to_bytes, urlsplit

from ..exceptions import EncodingError

# These headers are ignored for signature calculation.
IGNORED_HEADERS = frozenset(
    ["authorization", "content-type", "content-length", "user-agent"]
)

EMPTY_SHA256 = hashlib.sha256(b"").hexdigest()

_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~/"
)


def header_text(value):
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def get_header(headers, name):
    """Case-insensitive header lookup, returns None when absent."""
    lname = name.lower()
    for key, value in headers.items():
        if key.lower() == lname:
            return value
    return None


def set_header(headers, name, value):
    """Set a header, dropping any spelling of the same name that differs in case."""
    lname = name.lower()
    for key in [k for k in headers.keys() if k.lower() == lname and k != name]:
        del headers[key]
    headers[name] = value


def del_header(headers, name):
    """Remove every spelling of a header, if present."""
    lname = name.lower()
    for key in [k for k in headers.keys() if k.lower() == lname]:
        del headers[key]


def request_host(request):
    """Host of ``request``: the URL authority, else its Host header."""
    host = urlsplit(request.url).netloc
    if not host:
        host = get_header(request.headers, "Host") or ""
    return header_text(host)


def encode_path_strict(path):
    """
    Percent-encode a decoded path.

    Every byte outside ``A-Za-z0-9-_.~/`` becomes ``%XX`` (uppercase hex),
    multi-byte characters are encoded byte by byte from their UTF-8 form.

    Raises:
        EncodingError: If ``path`` is not valid UTF-8
    """
    if isinstance(path, bytes):
        try:
            path = path.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError("path is not valid UTF-8: {0}".format(e))
    try:
        raw = path.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError("path is not valid UTF-8: {0}".format(e))
    return "".join(
        chr(b) if b in _UNRESERVED else "%{0:02X}".format(b) for b in raw
    )


def encode_path(path):
    """Like :func:`encode_path_strict`, but returns ``path`` unchanged if it is invalid."""
    try:
        return encode_path_strict(path)
    except EncodingError:
        return path


def canonical_uri(url_path, strict=True):
    """
    Canonical URI for the path component of a URL.

    The path is percent-decoded first so that already escaped characters
    are not escaped twice.
    """
    url_path = url_path or "/"
    try:
        decoded = unquote_to_bytes(url_path).decode("utf-8")
    except UnicodeDecodeError as e:
        if strict:
            raise EncodingError("path is not valid UTF-8: {0}".format(e))
        return url_path
    if strict:
        return encode_path_strict(decoded)
    return encode_path(decoded)


def _query_pairs(query):
    if not query:
        return []
    if isinstance(query, str):
        return parse_qsl(query, keep_blank_values=True)
    if hasattr(query, "items"):
        query = query.items()
    pairs = []
    for key, value in query:
        if isinstance(value, (list, tuple)):
            pairs.extend((key, "" if v is None else str(v)) for v in value)
        else:
            pairs.append((key, "" if value is None else str(value)))
    return pairs


def canonical_query_string(query):
    """
    Sorted, re-encoded query string.

    Args:
        query: Raw query string, a dict, or a list of (key, value) pairs

    Returns:
        str: ``k1=v1&k2=v2`` sorted by key, spaces encoded as ``%20``
    """
    pairs = _query_pairs(query)
    # sort is stable: repeated keys keep their order
    pairs.sort(key=lambda pair: pair[0])
    return "&".join(
        "{0}={1}".format(quote(key, safe=""), quote(value, safe=""))
        for key, value in pairs
    )


def _signed_values(headers, host):
    values = {}
    for name, value in headers.items():
        lname = name.lower()
        if lname in IGNORED_HEADERS or lname == "host":
            continue
        items = value if isinstance(value, (list, tuple)) else [value]
        values.setdefault(lname, []).extend(header_text(v).strip() for v in items)
    values["host"] = [host]
    return values


def signed_header_names(headers):
    """Sorted, lowercased header names that take part in the signature."""
    names = set(["host"])
    for name in headers.keys():
        lname = name.lower()
        if lname not in IGNORED_HEADERS:
            names.add(lname)
    return sorted(names)


def signed_headers(headers):
    """Semicolon separated :func:`signed_header_names`."""
    return ";".join(signed_header_names(headers))


def canonical_headers(headers, host):
    """Lowercase(name) + ":" + comma-joined values + "\\n" for every signed header."""
    values = _signed_values(headers, host)
    return "".join(
        "{0}:{1}\n".format(name, ",".join(values[name])) for name in sorted(values)
    )


def hashed_payload(headers, payload_hash=None):
    if payload_hash:
        return payload_hash
    value = get_header(headers, "X-Amz-Content-Sha256")
    if value:
        return header_text(value)
    return EMPTY_SHA256


def build_canonical_request(
    method, url_path, query, headers, host, payload_hash=None, strict=True
):
    """
    Create the canonical request string.

    Args:
        method (str): HTTP method
        url_path (str): Path component of the request URL
        query: Query string or parameters
        headers (dict): Request headers
        host (str): Value forced into the ``host`` header
        payload_hash (str, optional): Overrides the ``X-Amz-Content-Sha256`` value
        strict (bool): Raise :class:`EncodingError` on an invalid path instead
            of signing it verbatim

    Returns:
        str: Canonical request
    """
    return "\n".join(
        [
            method.upper(),
            canonical_uri(url_path, strict=strict),
            canonical_query_string(query),
            canonical_headers(headers, host),
            signed_headers(headers),
            hashed_payload(headers, payload_hash),
        ]
    )
