"""
s3verify.executor
~~~~~~~~~~~~~~~~~

Sign, send and retry S3 requests.

Every attempt rewinds the request body, builds and signs a brand new
request (so the signature date is fresh), sends it, and classifies the
outcome:

* a network error, including one raised while reading an error body, is
  retried if it looks transient, otherwise it ends the call;
* a 200, 204 or 206 response ends the call;
* any other response has its error body decoded, and is retried when the
  S3 error code or the HTTP status says the failure is transient.

Once ``max_attempts`` have failed the last response and error are returned.
"""

import logging

import requests

from .exceptions import (
    BodyResetError,
    Exhausted,
    ProtocolError,
    S3VerifyError,
    TransportError,
)
from .operations import SIGN_HEADER, SIGN_PRESIGN, SIGN_STREAMING
from .retry import SUCCESS_STATUS, BackoffTimer, ErrorClassification, classify
from .signatures.v4 import SignatureV4
from .util import is_resettable, rewind

logger = logging.getLogger(__name__)


class RetryExecutor(object):
    """
    Execute :class:`~s3verify.operations.S3Request` objects with retries.

    The executor holds no per-call state, a single instance may be shared
    by many threads as long as its session is.

    Args:
        config (Config): Credentials, endpoint and retry settings
        session (requests.Session, optional): Transport, one is created if omitted
        signer (SignatureV4, optional): Signer, built from the config if omitted
    """

    def __init__(self, config, session=None, signer=None):
        self.config = config
        self.session = session or requests.Session()
        self.signer = signer or SignatureV4(config.credentials)

    def adapter(self):
        """
        Get the HTTP transport used to send prepared requests.

        Returns the session by default, but can be overridden for testing
        with mock adapters.
        """
        return self.session

    def new_request(self, method, spec):
        """
        Build and sign the request for one attempt.

        Returns:
            requests.PreparedRequest
        """
        request = spec.prepare(method, self.config)
        if spec.sign_mode == SIGN_PRESIGN:
            return self.signer.presign_request(request, spec.expires)
        if spec.sign_mode == SIGN_STREAMING:
            return self.signer.sign_streaming(request, spec.chunk_size)
        if spec.sign_mode == SIGN_HEADER:
            return self.signer.sign_request(request)
        # SIGN_NONE: e.g. a POST policy form which carries its own signature
        return request

    def _send(self, request):
        return self.adapter().send(
            request,
            stream=True,
            timeout=self.config.timeout,
            verify=self.config.verify,
            allow_redirects=False,
        )

    def _error_code(self, spec, response):
        try:
            return spec.error_response(response).code
        except ProtocolError as e:
            logger.debug("Undecodable error body with status %d: %s", response.status_code, e)
            return None

    def execute(self, method, spec):
        """
        Execute ``spec`` with ``method``, retrying transient failures.

        Args:
            method (str): HTTP method
            spec (S3Request): The request to send

        Returns:
            tuple: ``(response, error)``. ``response`` is the last response
            received, or None. ``error`` is None on success and when the
            server gave a final, non-retryable answer (the caller inspects
            the response). Otherwise it is the error that ended the call:
            a :class:`BodyResetError`, the exception raised while building
            the request, a :class:`TransportError`, or :class:`Exhausted`.
        """
        method = method.upper()
        timer = BackoffTimer(self.config.max_attempts, self.config.backoff_unit)
        replayable = spec.body is None or is_resettable(spec.body)
        response = None
        last_error = None
        attempts = 0

        try:
            for attempt in timer:
                attempts = attempt
                if spec.body is not None and replayable:
                    try:
                        rewind(spec.body)
                    except BodyResetError as e:
                        logger.info("Aborting %s %r: %s", method, spec, e)
                        return response, e

                try:
                    request = self.new_request(method, spec)
                except (S3VerifyError, requests.exceptions.RequestException) as e:
                    logger.info("Aborting %s %r, request could not be built: %s", method, spec, e)
                    return response, e

                if response is not None:
                    response.close()
                    response = None

                try:
                    response = self._send(request)
                    if response.status_code in SUCCESS_STATUS:
                        logger.debug("%s %r succeeded on attempt %d", method, spec, attempt)
                        return response, None
                    # Reading the error body buffers it for the caller
                    code = self._error_code(spec, response)
                except (requests.exceptions.RequestException, OSError, S3VerifyError) as e:
                    last_error = TransportError(str(e), original=e)
                    last_error.__cause__ = e
                    if classify(error=e) is ErrorClassification.PERMANENT:
                        logger.info("Aborting %s %r: %s", method, spec, e)
                        return response, last_error
                    failure = e
                else:
                    if classify(s3_code=code, status=response.status_code) is ErrorClassification.PERMANENT:
                        logger.info(
                            "%s %r failed with status %d (%s), not retrying",
                            method,
                            spec,
                            response.status_code,
                            code,
                        )
                        return response, None
                    last_error = None
                    failure = "status {0} ({1})".format(response.status_code, code)

                if attempt >= timer.max_attempts:
                    break
                if not replayable:
                    logger.info(
                        "Aborting %s %r: request body cannot be rewound for a retry",
                        method,
                        spec,
                    )
                    return response, BodyResetError(
                        "request body cannot be rewound for a retry",
                        details={"last_error": last_error},
                    )
                logger.warning(
                    "Attempt %d/%d for %s %r failed: %s. Retrying in %.2fs",
                    attempt,
                    timer.max_attempts,
                    method,
                    spec,
                    failure,
                    timer.delay(attempt),
                )
        finally:
            timer.cancel()

        logger.error("All %d attempts exhausted for %s %r", attempts, method, spec)
        details = {}
        if response is not None:
            details["status_code"] = response.status_code
        return response, Exhausted(attempts, last_error, details=details)

    def run(self, method, spec):
        """
        Like :meth:`execute`, but raise the error instead of returning it.

        Returns:
            requests.Response: The final response

        Raises:
            S3VerifyError: If the call did not end with a response
        """
        response, error = self.execute(method, spec)
        if error is not None:
            raise error
        return response
