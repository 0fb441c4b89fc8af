"""
Helpers for building ZIP local file header records in tests.
"""

import io
import struct
import zlib
import zipfile

from datetime import datetime
from typing import Optional, Union, Iterable, Tuple

from atmfjstc.lib.zip_scan.dos_time import encode_dos_datetime


LOCAL_HEADER_FORMAT = '<IHHHHHIIIHH'
CENTRAL_DIRECTORY_MAGIC = b'PK\x01\x02'

DEFAULT_TIMESTAMP = datetime(2021, 3, 14, 15, 9, 26)


def deflate_raw(data: bytes) -> bytes:
    compressor = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def make_entry(
    name: Union[str, bytes], content: bytes, method: int = 0, timestamp: datetime = DEFAULT_TIMESTAMP,
    extra: bytes = b'', version: int = 20, flags: int = 0, data: Optional[bytes] = None, crc32: Optional[int] = None,
    uncompressed_size: Optional[int] = None, compressed_size: Optional[int] = None,
) -> bytes:
    """
    Builds a local file header followed by the entry data.

    The data is deflated for method 8 and stored as-is otherwise, unless `data` is given explicitly. All declared
    values can be overridden to build inconsistent entries.
    """
    if isinstance(name, str):
        name = name.encode('utf-8')
    if data is None:
        data = deflate_raw(content) if method == 8 else content

    dos_date, dos_time = encode_dos_datetime(timestamp)

    header = struct.pack(
        LOCAL_HEADER_FORMAT,
        0x04034B50, version, flags, method, dos_time, dos_date,
        (zlib.crc32(content) & 0xffffffff) if crc32 is None else crc32,
        len(data) if compressed_size is None else compressed_size,
        len(content) if uncompressed_size is None else uncompressed_size,
        len(name), len(extra),
    )

    return header + name + extra + data


def make_zipfile_archive(entries: Iterable[Tuple[str, bytes, int]], timestamp: datetime = DEFAULT_TIMESTAMP) -> bytes:
    """
    Builds a complete archive using Python's `zipfile`. Each entry is ``(name, content, compress_type)``.
    """
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, 'w') as zf:
        for name, content, compress_type in entries:
            info = zipfile.ZipInfo(name, date_time=timestamp.timetuple()[:6])
            info.compress_type = compress_type
            zf.writestr(info, content)

    return buffer.getvalue()
