import io
import unittest

from s3verify.config import Config
from s3verify.operations import SIGN_STREAMING, S3Request


class TestS3Request(unittest.TestCase):
    def setUp(self):
        self.config = Config("a", "b", endpoint="http://localhost:9000")

    def test_bucket_url(self):
        self.assertEqual(
            S3Request("bucket", "key").bucket_url(self.config),
            "http://localhost:9000/bucket/key",
        )
        self.assertEqual(S3Request().bucket_url(self.config), "http://localhost:9000/")

    def test_key_is_quoted(self):
        self.assertEqual(
            S3Request("bucket", "/dir/my file~1.txt").bucket_url(self.config),
            "http://localhost:9000/bucket/dir/my%20file~1.txt",
        )

    def test_virtual_host_style(self):
        config = Config("a", "b", endpoint="https://s3.amazonaws.com", path_style=False)
        self.assertEqual(
            S3Request("bucket", "key").bucket_url(config),
            "https://bucket.s3.amazonaws.com/key",
        )

    def test_query_string(self):
        request = S3Request("bucket", "key", params={"uploadId": "a b", "partNumber": 2, "acl": None})
        self.assertEqual(
            request.bucket_url(self.config),
            "http://localhost:9000/bucket/key?acl&partNumber=2&uploadId=a%20b",
        )

    def test_prepare(self):
        prepared = S3Request("bucket", "key", headers={"Range": "bytes=0-1"}).prepare("get", self.config)
        self.assertEqual(prepared.method, "GET")
        self.assertEqual(prepared.headers["Range"], "bytes=0-1")
        self.assertEqual(prepared.headers["User-Agent"], self.config.user_agent)
        self.assertNotIn("Authorization", prepared.headers)

    def test_prepare_empty_body(self):
        prepared = S3Request("bucket", "key", body=b"").prepare("PUT", self.config)
        self.assertEqual(prepared.headers["Content-Length"], "0")
        self.assertNotIn("Transfer-Encoding", prepared.headers)

    def test_prepare_stream_body(self):
        body = io.BytesIO(b"payload")
        prepared = S3Request("bucket", "key", body=body).prepare("PUT", self.config)
        self.assertIs(prepared.body, body)
        self.assertEqual(prepared.headers["Content-Length"], "7")

    def test_unknown_sign_mode(self):
        with self.assertRaises(ValueError):
            S3Request("bucket", "key", sign_mode="v2")

    def test_repr(self):
        self.assertIn(SIGN_STREAMING, repr(S3Request("b", "k", sign_mode=SIGN_STREAMING)))


if __name__ == "__main__":
    unittest.main()
