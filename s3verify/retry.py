"""
s3verify.retry
~~~~~~~~~~~~~~

Backoff timer and the tables deciding which failures are worth retrying.
"""

import enum
import socket
import threading

import requests

MAX_RETRY = 5

# Messages of network errors that can and should be retried.
TCP_RETRY_MESSAGES = (
    "i/o timeout",
    "TLS handshake timeout",
    "connection reset by peer",
    "operation timed out",
    "Connection closed by foreign host",
)

RETRYABLE_NETWORK_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    socket.timeout,
    socket.gaierror,
    ConnectionResetError,
)

# AWS S3 error codes which are retryable.
RETRYABLE_S3_CODES = frozenset(
    [
        "RequestError",
        "RequestTimeout",
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "RequestThrottled",
        "InternalError",
        "ExpiredToken",
        "ExpiredTokenException",
    ]
)

# HTTP status codes which are retryable.
RETRYABLE_HTTP_STATUS = frozenset([429, 500, 502, 503])

SUCCESS_STATUS = frozenset([200, 204, 206])


class ErrorClassification(enum.Enum):
    TRANSIENT_NETWORK = "transient-network"
    TRANSIENT_SERVER = "transient-server"
    PERMANENT = "permanent"

    @property
    def retryable(self):
        return self is not ErrorClassification.PERMANENT


def _mentions_retryable_message(err):
    text = str(err)
    return any(message in text for message in TCP_RETRY_MESSAGES)


def is_net_error_retryable(err):
    """
    Return True if a transport exception, or a bare error message, is transient.

    Certificate failures are reported by ``requests`` as connection errors
    but are permanent, only a handshake timeout is retried.
    """
    if isinstance(err, requests.exceptions.SSLError):
        return _mentions_retryable_message(err)
    if isinstance(err, RETRYABLE_NETWORK_ERRORS):
        return True
    if isinstance(err, (str, requests.exceptions.RequestException, OSError)):
        return _mentions_retryable_message(err)
    return False


def is_s3_code_retryable(code):
    return code in RETRYABLE_S3_CODES


def is_http_status_retryable(status):
    return status in RETRYABLE_HTTP_STATUS


def classify(error=None, s3_code=None, status=None):
    """
    Classify a failed attempt.

    Args:
        error (Exception or str, optional): Transport exception raised by the
            attempt, or its message
        s3_code (str, optional): Code decoded from the S3 error body
        status (int, optional): HTTP status of the response

    Returns:
        ErrorClassification
    """
    if error is not None:
        if is_net_error_retryable(error):
            return ErrorClassification.TRANSIENT_NETWORK
        return ErrorClassification.PERMANENT
    if s3_code and is_s3_code_retryable(s3_code):
        return ErrorClassification.TRANSIENT_SERVER
    if status is not None and is_http_status_retryable(status):
        return ErrorClassification.TRANSIENT_SERVER
    return ErrorClassification.PERMANENT


class BackoffTimer(object):
    """
    Cancelable sequence of attempt numbers with exponential backoff.

    Iterating yields ``1..max_attempts``. Before handing out attempt ``k + 1``
    the timer waits ``unit * 2 ** (k - 1)`` seconds, unless :meth:`cancel`
    is called first, in which case iteration stops at once.

    Args:
        max_attempts (int): Number of attempts to hand out
        unit (float): Delay after the first attempt, in seconds
        done (threading.Event, optional): Cancellation signal
    """

    def __init__(self, max_attempts=MAX_RETRY, unit=1.0, done=None):
        self.max_attempts = max_attempts
        self.unit = unit
        self.done = done or threading.Event()

    def delay(self, attempt):
        return self.unit * (1 << (attempt - 1))

    def cancel(self):
        self.done.set()

    @property
    def cancelled(self):
        return self.done.is_set()

    def __iter__(self):
        for attempt in range(1, self.max_attempts + 1):
            if self.cancelled:
                return
            yield attempt
            if attempt < self.max_attempts and self.done.wait(self.delay(attempt)):
                return
