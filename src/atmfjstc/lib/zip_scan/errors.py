"""
Exceptions raised while scanning and decoding ZIP local file headers.

All of them derive from `ZipScanError`, so a caller that only wants to know whether the archive could be read can catch
that alone. None of these errors is ever retried internally: the input is a resident buffer and decoding it is
deterministic.
"""

from typing import Optional


class ZipScanError(Exception):
    """
    Base class for all errors signaling that the data does not match the expected ZIP local header structure (or that
    a limit requested by the caller was exceeded).
    """


class BufferOverrunError(ZipScanError):
    """
    A fixed-width or length-prefixed read, or the declared content of an entry, extends past the end of the buffer.

    This always means the archive is truncated, or that its length fields are inconsistent with the data.
    """

    position: int
    expected_length: int
    available_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, available_length: int, meaning: Optional[str] = None):
        self.position = position
        self.expected_length = expected_length
        self.available_length = available_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {available_length} are available"
        )


class NotAZipEntryError(ZipScanError):
    """
    The data at some position does not start with the local file header signature.

    After the first entry, this is the normal way for a scan to end (the central directory or some other structure
    follows), so the walker does not propagate it in that case.
    """

    position: int
    found_magic: bytes

    def __init__(self, position: int, found_magic: bytes):
        self.position = position
        self.found_magic = found_magic

        super().__init__(
            f"At position {position}, expected a ZIP local file header signature, but found 0x{found_magic.hex()}"
        )


class NotAZipFileError(ZipScanError):
    """
    The buffer does not start with a ZIP local file header, so it is not a recognizable archive.
    """

    source_name: Optional[str]

    def __init__(self, source_name: Optional[str] = None):
        self.source_name = source_name

        quoted_name = f" '{source_name}'" if source_name is not None else ''
        super().__init__(f"Data{quoted_name} is not a ZIP archive (no local file header at the start)")


class DecompressionError(ZipScanError):
    """
    The compressed region of an entry is not a valid (or complete) raw deflate stream.

    The underlying `zlib.error`, if any, is available as ``__cause__``.
    """

    position: int
    file_name: Optional[str]

    def __init__(self, position: int, file_name: Optional[str] = None, details: Optional[str] = None):
        self.position = position
        self.file_name = file_name

        quoted_name = f" '{file_name}'" if file_name is not None else ''
        super().__init__(
            f"Could not inflate the data of entry{quoted_name} at position {position}"
            + (f": {details}" if details is not None else '')
        )


class UnsupportedCompressionMethodError(ZipScanError):
    """
    An entry uses a compression method other than store or deflate, and the scan was asked to be strict about it.
    """

    position: int
    method: int

    def __init__(self, position: int, method: int):
        self.position = position
        self.method = method

        super().__init__(f"Entry at position {position} uses unsupported compression method {method}")


class ScanLimitExceededError(ZipScanError):
    """
    A limit set through `ScanOptions` (number of entries, size of decoded content) was exceeded.
    """

    limit_name: str
    limit: int
    position: int

    def __init__(self, limit_name: str, limit: int, position: int):
        self.limit_name = limit_name
        self.limit = limit
        self.position = position

        super().__init__(f"At position {position}, the archive exceeds the {limit_name} limit ({limit})")


class EntryIntegrityError(ZipScanError):
    """
    The decoded content of an entry does not match its declared size or CRC-32 (only checked on request).
    """

    position: int
    file_name: str

    def __init__(self, position: int, file_name: str, details: str):
        self.position = position
        self.file_name = file_name

        super().__init__(f"Entry '{file_name}' at position {position} is corrupt: {details}")
