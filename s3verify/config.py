"""
s3verify.config
~~~~~~~~~~~~~~~

Credentials and the per-client configuration object.

Nothing here is cached at module level: a ``Config`` is built once by the
caller and handed to the signer and executor constructors.
"""

import os
from collections import namedtuple
from urllib.parse import quote, urlparse

DEFAULT_ENDPOINT = "https://s3.amazonaws.com"
DEFAULT_REGION = "us-east-1"
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BACKOFF_UNIT = 1.0
# (connect, read) in seconds
DEFAULT_TIMEOUT = (5.0, 60.0)
DEFAULT_USER_AGENT = "s3verify/1.0.0"


class Credentials(namedtuple("Credentials", ["access_key", "secret_key", "region"])):
    """Read-only access key, secret key and region used for signing."""

    __slots__ = ()

    def __new__(cls, access_key, secret_key, region=DEFAULT_REGION):
        return super(Credentials, cls).__new__(cls, access_key, secret_key, region)

    def __repr__(self):
        # Keep the secret out of logs and tracebacks
        return "Credentials(access_key={0!r}, region={1!r})".format(
            self.access_key, self.region
        )


def region_from_endpoint(endpoint):
    """
    Guess the signing region from an S3 endpoint host.

    Args:
        endpoint (str): Endpoint hostname, with or without scheme

    Returns:
        str: AWS region
    """
    host = urlparse(endpoint).hostname if "://" in endpoint else endpoint
    host = host or ""
    if host == "s3.amazonaws.com" or host.endswith(".s3.amazonaws.com"):
        return DEFAULT_REGION
    elif "s3-" in host and ".amazonaws.com" in host:
        # s3-region.amazonaws.com
        return host.split("s3-")[1].split(".amazonaws.com")[0]
    elif ".s3." in host and ".amazonaws.com" in host:
        # bucket.s3.region.amazonaws.com
        return host.split(".s3.")[1].split(".amazonaws.com")[0]
    elif host.startswith("s3.") and host.endswith(".amazonaws.com"):
        # s3.region.amazonaws.com
        return host[len("s3."):-len(".amazonaws.com")]
    return DEFAULT_REGION


def build_query_string(params):
    """
    Build query string from parameters.

    Returns:
        str: Query string starting with '?' or empty string
    """
    if not params:
        return ""

    # A None value is sent as a bare key (?acl), S3 subresource style. The
    # canonical query string still signs it as "acl=".
    query_parts = []
    for param, value in sorted(params.items()):
        if value is not None:
            query_parts.append(
                "{0}={1}".format(
                    quote(str(param), safe=""),
                    quote(str(value), safe=""),
                )
            )
        else:
            query_parts.append(quote(str(param), safe=""))

    return "?" + "&".join(query_parts)


class Config(object):
    """
    Connection settings shared by the signer and the retry executor.

    Args:
        access_key (str): Access key
        secret_key (str): Secret key
        endpoint (str): Service URL, e.g. ``http://localhost:9000``
        region (str, optional): Signing region, guessed from the endpoint if omitted
        verify (bool or str): TLS verification flag or CA bundle path
        timeout: ``requests`` timeout, a number or a (connect, read) tuple
        max_attempts (int): Attempts per logical call, including the first
        backoff_unit (float): Base backoff delay in seconds
        path_style (bool): Use ``endpoint/bucket/key`` URLs instead of virtual hosts
        user_agent (str): User-Agent header value
    """

    def __init__(
        self,
        access_key,
        secret_key,
        endpoint=DEFAULT_ENDPOINT,
        region=None,
        verify=True,
        timeout=DEFAULT_TIMEOUT,
        max_attempts=DEFAULT_MAX_ATTEMPTS,
        backoff_unit=DEFAULT_BACKOFF_UNIT,
        path_style=True,
        user_agent=DEFAULT_USER_AGENT,
    ):
        if "://" not in endpoint:
            endpoint = "https://" + endpoint
        parsed = urlparse(endpoint)
        if not parsed.netloc:
            raise ValueError("invalid endpoint: {0!r}".format(endpoint))
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.endpoint = endpoint.rstrip("/")
        self.scheme = parsed.scheme
        self.host = parsed.netloc
        self.credentials = Credentials(
            access_key, secret_key, region or region_from_endpoint(parsed.netloc)
        )
        self.verify = verify
        self.timeout = timeout
        self.max_attempts = int(max_attempts)
        self.backoff_unit = float(backoff_unit)
        self.path_style = path_style
        self.user_agent = user_agent

    @property
    def region(self):
        return self.credentials.region

    @property
    def tls(self):
        return self.scheme == "https"

    def target_url(self, bucket="", key="", query=None):
        """
        Generate the complete URL for a bucket and key.

        Args:
            bucket (str): Bucket name, empty for service level calls
            key (str): Object key
            query (dict, optional): Query parameters, ``None`` values become bare keys

        Returns:
            str: Complete URL for the S3 request

        Examples:
            >>> Config("a", "b", "http://localhost:9000").target_url("my-bucket", "my-file.txt")
            'http://localhost:9000/my-bucket/my-file.txt'
            >>> Config("a", "b", "http://localhost:9000").target_url()  # Service operation
            'http://localhost:9000/'
        """
        key = quote((key or "").lstrip("/"), safe="/~")
        if not bucket:
            url = "{0}://{1}/".format(self.scheme, self.host)
        elif self.path_style:
            # Path-style: http://endpoint/bucket/key
            url = "{0}://{1}/{2}/{3}".format(
                self.scheme, self.host, quote(bucket, safe=""), key
            )
        else:
            # Virtual host-style: http://bucket.endpoint/key
            url = "{0}://{1}.{2}/{3}".format(
                self.scheme, quote(bucket, safe=""), self.host, key
            )
        return url + build_query_string(query)

    @classmethod
    def from_env(cls, environ=None):
        """Build a configuration from ``S3_*`` environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            access_key=environ.get("S3_ACCESS", ""),
            secret_key=environ.get("S3_SECRET", ""),
            endpoint=environ.get("S3_URL", DEFAULT_ENDPOINT),
            region=environ.get("S3_REGION") or None,
            max_attempts=int(environ.get("S3_MAX_RETRY", DEFAULT_MAX_ATTEMPTS)),
            backoff_unit=float(environ.get("S3_RETRY_UNIT", DEFAULT_BACKOFF_UNIT)),
        )

    def __repr__(self):
        return "<Config endpoint={0!r} region={1!r}>".format(self.endpoint, self.region)
