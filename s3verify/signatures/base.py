"""
s3verify.signatures.base
~~~~~~~~~~~~~~~~~~~~~~~~

Base class for signature implementations.
"""

from ..datetime_utils import get_utc_datetime
from ..exceptions import SigningError


class BaseSignature(object):
    """Base class for signature implementations."""

    def __init__(self, credentials, clock=None):
        """
        Initialize the signature implementation.

        Args:
            credentials (Credentials): Access key, secret key and region
            clock (callable, optional): Returns the current UTC datetime
        """
        self.credentials = credentials
        self.clock = clock or get_utc_datetime

    @property
    def access_key(self):
        return self.credentials.access_key

    @property
    def region(self):
        return self.credentials.region

    def check_credentials(self):
        """
        Raises:
            SigningError: If the access key, secret key or region is empty
        """
        if not self.credentials.access_key or not self.credentials.secret_key:
            raise SigningError("access key and secret key are required for signing")
        if not self.credentials.region:
            raise SigningError("a region is required for signing")

    def sign_request(self, request):
        """
        Sign the given request.

        Args:
            request: The request object to sign

        Returns:
            The signed request object
        """
        raise NotImplementedError("Subclasses must implement sign_request")
