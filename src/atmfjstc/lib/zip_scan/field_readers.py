"""
Bounds-checked readers for the little-endian fields found in ZIP headers.

Unlike a stream reader, these functions hold no position of their own. Each one is a pure function of the buffer and
an offset, and returns the decoded value together with the offset just past it, so that reads can be chained::

    signature, pos = read_u32(data, 0, 'signature')
    version, pos = read_u16(data, pos, 'version')

Any read that would go past the end of the buffer raises `BufferOverrunError`.
"""

from typing import Union, Optional, Tuple

from atmfjstc.lib.zip_scan.errors import BufferOverrunError


Buffer = Union[bytes, bytearray, memoryview]


def read_u16(buffer: Buffer, offset: int, meaning: Optional[str] = None) -> Tuple[int, int]:
    """
    Reads an unsigned 16-bit little-endian int. Returns the value and the offset following it.
    """
    data, next_offset = read_bytes(buffer, offset, 2, meaning or 'u16')

    return int.from_bytes(data, byteorder='little', signed=False), next_offset


def read_u32(buffer: Buffer, offset: int, meaning: Optional[str] = None) -> Tuple[int, int]:
    """
    Reads an unsigned 32-bit little-endian int. Returns the value and the offset following it.
    """
    data, next_offset = read_bytes(buffer, offset, 4, meaning or 'u32')

    return int.from_bytes(data, byteorder='little', signed=False), next_offset


def read_bytes(buffer: Buffer, offset: int, n_bytes: int, meaning: Optional[str] = None) -> Tuple[bytes, int]:
    """
    Reads exactly `n_bytes` starting at `offset`.

    Args:
        buffer: The data to read from.
        offset: The position of the first byte to read.
        n_bytes: The number of bytes to read. Zero is allowed and always succeeds for an in-range offset.
        meaning: An indication as to the meaning of the data being read (e.g. "file name"). It is used in the text
            of any exceptions that may be thrown.

    Returns:
        A ``(data, next_offset)`` tuple, where `data` is a `bytes` object exactly `n_bytes` in length.

    Raises:
        BufferOverrunError: If the range ``[offset, offset + n_bytes)`` is not entirely inside the buffer.
    """

    if n_bytes < 0:
        raise ValueError("The number of bytes to read cannot be negative")

    end = offset + n_bytes
    if (offset < 0) or (end > len(buffer)):
        raise BufferOverrunError(offset, n_bytes, max(0, len(buffer) - max(offset, 0)), meaning)

    return bytes(buffer[offset:end]), end


def read_string(buffer: Buffer, offset: int, n_bytes: int, meaning: Optional[str] = None) -> Tuple[str, int]:
    """
    Like `read_bytes`, but returns the data as text.

    No validation is performed: the bytes are decoded as UTF-8 with ``surrogateescape``, so that any byte sequence
    (valid text or not) survives unchanged and can be recovered with ``.encode('utf-8', 'surrogateescape')``.
    """
    data, next_offset = read_bytes(buffer, offset, n_bytes, meaning or 'string')

    return data.decode('utf-8', errors='surrogateescape'), next_offset
