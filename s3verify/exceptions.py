"""
s3verify.exceptions
~~~~~~~~~~~~~~~~~~~

Exception hierarchy for signing and request execution.
"""


class S3VerifyError(Exception):
    """Base exception for all s3verify errors."""

    def __init__(self, message, details=None):
        super(S3VerifyError, self).__init__(message)
        self.message = message
        self.details = details or {}


class EncodingError(S3VerifyError, ValueError):
    """A path could not be percent-encoded (invalid UTF-8)."""


class SigningError(S3VerifyError):
    """Credentials or the signing time could not be turned into a signature."""


class TransportError(S3VerifyError):
    """Connection-level failure while sending a request."""

    def __init__(self, message, original=None, details=None):
        super(TransportError, self).__init__(message, details)
        self.original = original


class ProtocolError(S3VerifyError):
    """The server answered with a body that could not be decoded."""


class Aborted(S3VerifyError):
    """Terminal, non-retryable outcome of a request."""


class BodyResetError(Aborted):
    """The request body could not be rewound for another attempt."""


class Exhausted(S3VerifyError):
    """Every attempt failed with a retryable error."""

    def __init__(self, attempts, last_error=None, details=None):
        message = "request failed after {0} attempts".format(attempts)
        if last_error is not None:
            message += ": {0}".format(last_error)
        super(Exhausted, self).__init__(message, details)
        self.attempts = attempts
        self.last_error = last_error
