import unittest
from datetime import datetime, timedelta, timezone

from s3verify import datetime_utils
from s3verify.exceptions import SigningError


class TestDatetimeUtils(unittest.TestCase):
    def test_utc_now_is_aware(self):
        self.assertEqual(datetime_utils.get_utc_datetime().utcoffset(), timedelta(0))

    def test_format_amz_date(self):
        value = datetime(2013, 5, 24, 1, 2, 3, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(datetime_utils.format_amz_date(value), "20130523T230203Z")
        self.assertEqual(datetime_utils.format_amz_date(datetime(2013, 5, 24)), "20130524T000000Z")

    def test_date_stamp(self):
        self.assertEqual(datetime_utils.format_date_stamp("20130524T000000Z"), "20130524")
        self.assertEqual(datetime_utils.format_date_stamp(datetime(2013, 5, 24)), "20130524")

    def test_parse_amz_date(self):
        parsed = datetime_utils.parse_amz_date("20130524T000000Z")
        self.assertEqual(parsed, datetime(2013, 5, 24, tzinfo=timezone.utc))
        for value in (None, "", "2013-05-24", b"20130524T000000Z"):
            with self.assertRaises(SigningError):
                datetime_utils.parse_amz_date(value)

    def test_expires_at(self):
        start = datetime(2013, 5, 24, tzinfo=timezone.utc)
        self.assertEqual(datetime_utils.expires_at(start, "60"), start + timedelta(seconds=60))


if __name__ == "__main__":
    unittest.main()
