import socket
import unittest

import requests

from s3verify.retry import (
    BackoffTimer,
    ErrorClassification,
    classify,
    is_http_status_retryable,
    is_net_error_retryable,
    is_s3_code_retryable,
)


class RecordingEvent(object):
    """Stands in for threading.Event, optionally firing after a number of waits."""

    def __init__(self, fire_after=None):
        self.waits = []
        self.fired = False
        self.fire_after = fire_after

    def wait(self, timeout):
        self.waits.append(timeout)
        if self.fire_after is not None and len(self.waits) >= self.fire_after:
            self.fired = True
        return self.fired

    def set(self):
        self.fired = True

    def is_set(self):
        return self.fired


class TestClassify(unittest.TestCase):
    def test_transient_network_errors(self):
        errors = [
            requests.exceptions.ConnectionError("connection reset by peer"),
            requests.exceptions.ReadTimeout("read timed out"),
            socket.timeout("timed out"),
            ConnectionResetError(),
            OSError("dial tcp: i/o timeout"),
            requests.exceptions.SSLError("net/http: TLS handshake timeout"),
        ]
        for error in errors:
            self.assertIs(classify(error=error), ErrorClassification.TRANSIENT_NETWORK, error)

    def test_permanent_network_errors(self):
        errors = [
            requests.exceptions.SSLError("certificate verify failed"),
            requests.exceptions.InvalidURL("bad url"),
            OSError("permission denied"),
            ValueError("not a network error"),
        ]
        for error in errors:
            self.assertIs(classify(error=error), ErrorClassification.PERMANENT, error)

    def test_error_messages(self):
        self.assertIs(classify("connection reset by peer"), ErrorClassification.TRANSIENT_NETWORK)
        self.assertIs(classify("read tcp: i/o timeout"), ErrorClassification.TRANSIENT_NETWORK)
        self.assertIs(classify("no such host"), ErrorClassification.PERMANENT)
        self.assertTrue(is_net_error_retryable("Connection closed by foreign host"))

    def test_server_errors(self):
        self.assertIs(classify(s3_code="NoSuchKey", status=404), ErrorClassification.PERMANENT)
        self.assertIs(classify(s3_code="AccessDenied", status=403), ErrorClassification.PERMANENT)
        self.assertIs(classify(status=503), ErrorClassification.TRANSIENT_SERVER)
        self.assertIs(classify(s3_code="SlowDown", status=503), ErrorClassification.TRANSIENT_SERVER)
        self.assertIs(classify(s3_code="RequestTimeout", status=400), ErrorClassification.TRANSIENT_SERVER)
        self.assertIs(classify(status=501), ErrorClassification.PERMANENT)

    def test_retryable_property(self):
        self.assertTrue(ErrorClassification.TRANSIENT_NETWORK.retryable)
        self.assertTrue(ErrorClassification.TRANSIENT_SERVER.retryable)
        self.assertFalse(ErrorClassification.PERMANENT.retryable)

    def test_tables(self):
        self.assertTrue(is_s3_code_retryable("ExpiredToken"))
        self.assertFalse(is_s3_code_retryable("NoSuchBucket"))
        self.assertTrue(is_http_status_retryable(429))
        self.assertFalse(is_http_status_retryable(404))
        self.assertFalse(is_net_error_retryable(KeyError("x")))


class TestBackoffTimer(unittest.TestCase):
    def test_yields_every_attempt(self):
        done = RecordingEvent()
        self.assertEqual(list(BackoffTimer(4, 1.0, done)), [1, 2, 3, 4])
        self.assertEqual(done.waits, [1.0, 2.0, 4.0])

    def test_unit_scales_delays(self):
        timer = BackoffTimer(3, 0.5, RecordingEvent())
        self.assertEqual([timer.delay(k) for k in (1, 2, 3)], [0.5, 1.0, 2.0])

    def test_single_attempt_never_waits(self):
        done = RecordingEvent()
        self.assertEqual(list(BackoffTimer(1, 1.0, done)), [1])
        self.assertEqual(done.waits, [])

    def test_cancel_during_wait_stops(self):
        done = RecordingEvent(fire_after=1)
        self.assertEqual(list(BackoffTimer(5, 1.0, done)), [1])

    def test_cancel_before_iteration(self):
        timer = BackoffTimer(5, 1.0, RecordingEvent())
        timer.cancel()
        self.assertTrue(timer.cancelled)
        self.assertEqual(list(timer), [])

    def test_cancel_between_attempts(self):
        timer = BackoffTimer(5, 0.0)
        seen = []
        for attempt in timer:
            seen.append(attempt)
            if attempt == 2:
                timer.cancel()
        self.assertEqual(seen, [1, 2])


if __name__ == "__main__":
    unittest.main()
