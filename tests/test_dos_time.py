import unittest

from datetime import datetime

from atmfjstc.lib.zip_scan.dos_time import decode_dos_datetime, encode_dos_datetime, split_dos_date, split_dos_time


DATE_2020_05_17 = (40 << 9) | (5 << 5) | 17
TIME_13_45_30 = (13 << 11) | (45 << 5) | 15


class SplitTest(unittest.TestCase):
    def test_split_date(self):
        self.assertEqual(split_dos_date(DATE_2020_05_17), (2020, 5, 17))

    def test_split_time(self):
        self.assertEqual(split_dos_time(TIME_13_45_30), (13, 45, 30))

    def test_split_max(self):
        self.assertEqual(split_dos_date(0xffff), (2107, 15, 31))
        self.assertEqual(split_dos_time(0xffff), (31, 63, 62))


class DecodeTest(unittest.TestCase):
    def test_known_value(self):
        decoded = decode_dos_datetime(DATE_2020_05_17, TIME_13_45_30)

        self.assertEqual(decoded.replace(tzinfo=None), datetime(2020, 5, 17, 13, 45, 30))

    def test_is_local_and_aware(self):
        decoded = decode_dos_datetime(DATE_2020_05_17, TIME_13_45_30)

        self.assertIsNotNone(decoded.tzinfo)
        self.assertIsNotNone(decoded.utcoffset())

    def test_epoch(self):
        decoded = decode_dos_datetime((1 << 5) | 1, 0)

        self.assertEqual(decoded.replace(tzinfo=None), datetime(1980, 1, 1))

    def test_all_zero_is_normalized(self):
        decoded = decode_dos_datetime(0, 0)

        self.assertEqual(decoded.replace(tzinfo=None), datetime(1979, 11, 30))

    def test_out_of_range_components_carry_over(self):
        # 2001-02-30 24:00:00 -> 2001-03-03 00:00:00
        decoded = decode_dos_datetime((21 << 9) | (2 << 5) | 30, 24 << 11)

        self.assertEqual(decoded.replace(tzinfo=None), datetime(2001, 3, 3))

    def test_month_13_carries_into_next_year(self):
        decoded = decode_dos_datetime((10 << 9) | (13 << 5) | 1, 0)

        self.assertEqual(decoded.replace(tzinfo=None), datetime(1991, 1, 1))


class EncodeTest(unittest.TestCase):
    def test_known_value(self):
        self.assertEqual(encode_dos_datetime(datetime(2020, 5, 17, 13, 45, 30)), (DATE_2020_05_17, TIME_13_45_30))

    def test_odd_seconds_are_truncated(self):
        self.assertEqual(encode_dos_datetime(datetime(2020, 5, 17, 13, 45, 31)), (DATE_2020_05_17, TIME_13_45_30))

    def test_year_out_of_range(self):
        with self.assertRaises(ValueError):
            encode_dos_datetime(datetime(1979, 12, 31, 23, 59, 59))
        with self.assertRaises(ValueError):
            encode_dos_datetime(datetime(2108, 1, 1))


class RoundTripTest(unittest.TestCase):
    def test_years_1980_to_2107(self):
        for year in list(range(1980, 2108, 9)) + [2107]:
            original = datetime(year, year % 12 + 1, year % 28 + 1, year % 24, year % 60, (year * 7) % 60)

            with self.subTest(original=original):
                dos_date, dos_time = encode_dos_datetime(original)
                decoded = decode_dos_datetime(dos_date, dos_time)

                self.assertEqual(decoded.replace(tzinfo=None), original.replace(second=original.second // 2 * 2))
                self.assertEqual(encode_dos_datetime(decoded), (dos_date, dos_time))
