import unittest

from s3verify.exceptions import EncodingError
from s3verify.signatures.canonical import (
    EMPTY_SHA256,
    build_canonical_request,
    canonical_headers,
    canonical_query_string,
    canonical_uri,
    del_header,
    encode_path,
    encode_path_strict,
    get_header,
    hashed_payload,
    set_header,
    signed_headers,
)


class TestEncodePath(unittest.TestCase):
    def test_unreserved_characters_are_kept(self):
        self.assertEqual(encode_path_strict("/a-b_c.d~e/F0"), "/a-b_c.d~e/F0")

    def test_reserved_characters_are_escaped_uppercase(self):
        self.assertEqual(encode_path_strict("/a b+c"), "/a%20b%2Bc")

    def test_multibyte_characters_are_escaped_per_byte(self):
        self.assertEqual(encode_path_strict("/ü"), "/%C3%BC")

    def test_invalid_utf8_raises_in_strict_mode(self):
        with self.assertRaises(EncodingError):
            encode_path_strict(b"/\xff")

    def test_invalid_utf8_is_returned_as_is_in_lenient_mode(self):
        self.assertEqual(encode_path(b"/\xff"), b"/\xff")

    def test_encoding_error_is_a_value_error(self):
        self.assertTrue(issubclass(EncodingError, ValueError))


class TestCanonicalUri(unittest.TestCase):
    def test_empty_path_is_root(self):
        self.assertEqual(canonical_uri(""), "/")

    def test_escaped_path_is_not_escaped_twice(self):
        self.assertEqual(canonical_uri("/my%20file.txt"), "/my%20file.txt")
        self.assertEqual(canonical_uri("/my file.txt"), "/my%20file.txt")

    def test_invalid_escape_strict(self):
        with self.assertRaises(EncodingError):
            canonical_uri("/%FF")

    def test_invalid_escape_lenient(self):
        self.assertEqual(canonical_uri("/%FF", strict=False), "/%FF")


class TestCanonicalQueryString(unittest.TestCase):
    def test_sorted_by_key(self):
        self.assertEqual(canonical_query_string("b=2&a=1&c=3"), "a=1&b=2&c=3")

    def test_order_independent(self):
        self.assertEqual(
            canonical_query_string("prefix=x&delimiter=/"),
            canonical_query_string({"delimiter": "/", "prefix": "x"}),
        )

    def test_spaces_are_percent_encoded(self):
        self.assertEqual(canonical_query_string("a=x y"), "a=x%20y")
        self.assertEqual(canonical_query_string("a=x+y"), "a=x%20y")
        self.assertEqual(canonical_query_string([("a", "x/y")]), "a=x%2Fy")

    def test_bare_key_gets_empty_value(self):
        self.assertEqual(canonical_query_string("uploads"), "uploads=")
        self.assertEqual(canonical_query_string({"uploads": None}), "uploads=")

    def test_empty(self):
        self.assertEqual(canonical_query_string(""), "")
        self.assertEqual(canonical_query_string(None), "")


class TestCanonicalHeaders(unittest.TestCase):
    def test_ignored_headers_are_not_signed(self):
        headers = {
            "Authorization": "x",
            "Content-Type": "text/plain",
            "Content-Length": "3",
            "User-Agent": "test",
            "X-Amz-Date": "20130524T000000Z",
        }
        self.assertEqual(signed_headers(headers), "host;x-amz-date")

    def test_host_is_always_signed(self):
        self.assertEqual(signed_headers({}), "host")

    def test_host_value_is_forced(self):
        headers = {"Host": "other.example.com", "X-Amz-Meta-Note": "  padded  "}
        self.assertEqual(
            canonical_headers(headers, "bucket.example.com"),
            "host:bucket.example.com\nx-amz-meta-note:padded\n",
        )

    def test_names_are_lowercased_and_sorted(self):
        headers = {"X-Amz-Date": "d", "Range": "bytes=0-9"}
        self.assertEqual(canonical_headers(headers, "h"), "host:h\nrange:bytes=0-9\nx-amz-date:d\n")

    def test_bytes_values(self):
        self.assertEqual(canonical_headers({"Range": b"bytes=0-1"}, "h"), "host:h\nrange:bytes=0-1\n")


class TestHashedPayload(unittest.TestCase):
    def test_defaults_to_empty_sha256(self):
        self.assertEqual(hashed_payload({}), EMPTY_SHA256)
        self.assertEqual(
            EMPTY_SHA256,
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855",
        )

    def test_uses_content_sha256_header(self):
        self.assertEqual(hashed_payload({"x-amz-content-sha256": "abc"}), "abc")

    def test_override(self):
        headers = {"X-Amz-Content-Sha256": "abc"}
        self.assertEqual(hashed_payload(headers, "UNSIGNED-PAYLOAD"), "UNSIGNED-PAYLOAD")


class TestHeaderHelpers(unittest.TestCase):
    def test_set_header_replaces_other_spellings(self):
        headers = {"x-amz-date": "old"}
        set_header(headers, "X-Amz-Date", "new")
        self.assertEqual(headers, {"X-Amz-Date": "new"})

    def test_get_header_is_case_insensitive(self):
        self.assertEqual(get_header({"RANGE": "r"}, "range"), "r")
        self.assertIsNone(get_header({}, "range"))

    def test_del_header(self):
        headers = {"Transfer-Encoding": "chunked", "A": "b"}
        del_header(headers, "transfer-encoding")
        del_header(headers, "missing")
        self.assertEqual(headers, {"A": "b"})


class TestBuildCanonicalRequest(unittest.TestCase):
    def test_layout(self):
        canonical = build_canonical_request(
            "get",
            "/test.txt",
            "",
            {"X-Amz-Date": "20130524T000000Z"},
            "examplebucket.s3.amazonaws.com",
        )
        self.assertEqual(
            canonical,
            "\n".join(
                [
                    "GET",
                    "/test.txt",
                    "",
                    "host:examplebucket.s3.amazonaws.com",
                    "x-amz-date:20130524T000000Z",
                    "",
                    "host;x-amz-date",
                    EMPTY_SHA256,
                ]
            ),
        )


if __name__ == "__main__":
    unittest.main()
