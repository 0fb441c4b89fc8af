"""
Conversion between MS-DOS packed date/time values (as used in ZIP headers) and Python `datetime` objects.

The format packs a timestamp into two 16-bit words:

- time: bits 0-4 = seconds / 2, bits 5-10 = minutes, bits 11-15 = hours
- date: bits 0-4 = day, bits 5-8 = month, bits 9-15 = year - 1980

so only the years 1980-2107 are representable, and seconds are stored with a resolution of 2. The format carries no
timezone; by convention the values are in the local time of the machine that created the archive.
"""

from datetime import datetime, timedelta
from typing import Tuple


DOS_EPOCH_YEAR = 1980
DOS_MAX_YEAR = DOS_EPOCH_YEAR + 0x7F


def split_dos_time(dos_time: int) -> Tuple[int, int, int]:
    """
    Splits a packed time into ``(hours, minutes, seconds)``. Values are returned as stored, without range checks.
    """
    return dos_time >> 11, (dos_time >> 5) & 0x3F, (dos_time & 0x1F) * 2


def split_dos_date(dos_date: int) -> Tuple[int, int, int]:
    """
    Splits a packed date into ``(year, month, day)``. Values are returned as stored, without range checks.
    """
    return ((dos_date >> 9) & 0x7F) + DOS_EPOCH_YEAR, (dos_date >> 5) & 0x0F, dos_date & 0x1F


def decode_dos_datetime(dos_date: int, dos_time: int) -> datetime:
    """
    Converts a packed MS-DOS date and time to an aware `datetime` in the local timezone.

    Components that are out of range (month 0 or 13-15, day 0 or past the end of the month, hours past 23, etc.) are
    not rejected. Instead, they are normalized by carrying over into the next larger unit, so e.g. the all-zero
    timestamp found in some archives decodes to 1979-11-30 00:00:00.

    The seconds keep the 2-second resolution of the format; no rounding is applied.
    """
    year, month, day = split_dos_date(dos_date)
    hours, minutes, seconds = split_dos_time(dos_time)

    carry_years, month_index = divmod(month - 1, 12)

    naive = datetime(year + carry_years, month_index + 1, 1) + \
        timedelta(days=day - 1, hours=hours, minutes=minutes, seconds=seconds)

    return naive.astimezone()


def encode_dos_datetime(timestamp: datetime) -> Tuple[int, int]:
    """
    Converts a `datetime` to a packed ``(dos_date, dos_time)`` pair.

    The wall-clock fields of the timestamp are used as-is (an aware timestamp is not converted to local time first).
    Seconds are truncated to an even number.

    Raises:
        ValueError: If the year is outside the range 1980-2107.
    """
    if not (DOS_EPOCH_YEAR <= timestamp.year <= DOS_MAX_YEAR):
        raise ValueError(f"Year {timestamp.year} cannot be represented in MS-DOS format")

    dos_date = ((timestamp.year - DOS_EPOCH_YEAR) << 9) | (timestamp.month << 5) | timestamp.day
    dos_time = (timestamp.hour << 11) | (timestamp.minute << 5) | (timestamp.second // 2)

    return dos_date, dos_time
