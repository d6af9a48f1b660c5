"""
s3verify.auth
~~~~~~~~~~~~~

``requests`` authentication handler signing with AWS Signature Version 4.

    >>> import requests
    >>> auth = S3Auth("access", "secret", region="us-east-1")
    >>> requests.get("http://localhost:9000/bucket/key", auth=auth)
"""

from requests.auth import AuthBase

from .config import Credentials, region_from_endpoint
from .signatures.v4 import SignatureV4


class S3Auth(AuthBase):
    """
    Attach a SigV4 ``Authorization`` header to every request.

    Args:
        access_key (str): Access key
        secret_key (str): Secret key
        region (str, optional): Signing region
        endpoint (str): Endpoint used to guess the region when none is given
        clock (callable, optional): Returns the current UTC datetime
    """

    def __init__(
        self, access_key, secret_key, region=None, endpoint="s3.amazonaws.com", clock=None
    ):
        self.credentials = Credentials(
            access_key, secret_key, region or region_from_endpoint(endpoint)
        )
        self.signer = SignatureV4(self.credentials, clock)

    @property
    def region(self):
        return self.credentials.region

    def __call__(self, request):
        return self.signer.sign_request(request)

    def __repr__(self):
        return "<S3Auth access_key={0!r} region={1!r}>".format(
            self.credentials.access_key, self.credentials.region
        )
