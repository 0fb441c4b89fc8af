"""
Decoding of a single ZIP local file header, together with the content of the entry that follows it.

The main entry point is `parse_local_file_header`, which returns a `LocalFileHeader` and the offset just past the
entry's data. Only the store and deflate methods are understood. By default, any other method is (incorrectly, but
compatibly with the original scanner) read as stored data; use ``ScanOptions(strict_compression=True)`` to get an
error instead.
"""

import zlib
import logging

from dataclasses import dataclass, field
from datetime import datetime
from contextlib import contextmanager
from enum import IntEnum, IntFlag
from typing import Optional, Tuple, ContextManager

from atmfjstc.lib.zip_scan.errors import DecompressionError, UnsupportedCompressionMethodError, \
    ScanLimitExceededError, EntryIntegrityError, NotAZipEntryError
from atmfjstc.lib.zip_scan.field_readers import Buffer, read_u16, read_u32, read_bytes
from atmfjstc.lib.zip_scan.dos_time import decode_dos_datetime
from atmfjstc.lib.zip_scan.options import ScanOptions, DEFAULT_SCAN_OPTIONS


LOG = logging.getLogger(__name__)

LOCAL_FILE_HEADER_SIGNATURE = 0x04034B50


class ZipCompressionMethod(IntEnum):
    STORE = 0
    DEFLATE = 8


class ZipEntryFlags(IntFlag):
    ENCRYPTED = 1 << 0
    DATA_DESCRIPTOR = 1 << 3
    UTF8 = 1 << 11


@dataclass(frozen=True)
class LocalFileHeader:
    """
    The decoded local header of a ZIP entry, along with its content.

    Objects of this type are inert data containers and do not refer back to the buffer they were decoded from.

    Attributes:
        signature: The header signature, always `LOCAL_FILE_HEADER_SIGNATURE`.
        version: The "version needed to extract" field, uninterpreted.
        bitflag: The general purpose flags, uninterpreted. See the `flags` property for a typed view.
        compression_method: How the content was decoded (STORE or DEFLATE).
        raw_compression_method: The compression method as stored in the header. It differs from `compression_method`
            when an unsupported method was read as stored data.
        last_modified: The modification time of the entry, as an aware datetime in the local timezone, with a
            resolution of 2 seconds.
        raw_mod_date: The packed MS-DOS date, as stored.
        raw_mod_time: The packed MS-DOS time, as stored.
        crc32: The declared CRC-32 of the uncompressed data.
        compressed_size: The declared size of the data as stored in the archive.
        uncompressed_size: The declared size of the data after decompression.
        raw_file_name: The entry name, as stored (no charset is assumed).
        extra_field: The raw "extra field" data.
        content: The decoded content of the entry.
        entry_start_offset: The position of the header in the buffer.
        data_start_offset: The position of the (possibly compressed) data in the buffer.
        next_offset: The position just after the data, where the next header may start.
    """

    signature: int
    version: int
    bitflag: int

    compression_method: ZipCompressionMethod
    raw_compression_method: int

    last_modified: datetime
    raw_mod_date: int
    raw_mod_time: int

    crc32: int
    compressed_size: int
    uncompressed_size: int

    raw_file_name: bytes
    extra_field: bytes
    content: bytes = field(repr=False)

    entry_start_offset: int = 0
    data_start_offset: int = 0
    next_offset: int = 0

    @property
    def file_name(self) -> str:
        """
        The entry name as text. Invalid UTF-8 sequences are preserved as surrogate escapes rather than corrected.
        """
        return self.raw_file_name.decode('utf-8', errors='surrogateescape')

    @property
    def text(self) -> str:
        """
        The content as text, decoded in the same lossless way as `file_name`.
        """
        return self.content.decode('utf-8', errors='surrogateescape')

    @property
    def flags(self) -> ZipEntryFlags:
        return ZipEntryFlags(self.bitflag)

    @property
    def total_entry_size(self) -> int:
        return self.next_offset - self.entry_start_offset

    def size_matches(self) -> bool:
        return len(self.content) == self.uncompressed_size

    def crc32_matches(self) -> bool:
        return (zlib.crc32(self.content) & 0xffffffff) == self.crc32

    def verify(self):
        """
        Checks the decoded content against the declared size and CRC-32.

        Raises:
            EntryIntegrityError: On any mismatch.
        """
        if not self.size_matches():
            raise EntryIntegrityError(
                self.entry_start_offset, self.file_name,
                f"size mismatch (declared: {self.uncompressed_size}, actual: {len(self.content)})"
            )

        if not self.crc32_matches():
            raise EntryIntegrityError(
                self.entry_start_offset, self.file_name,
                f"CRC failed (declared: 0x{self.crc32:08x}, actual: 0x{zlib.crc32(self.content) & 0xffffffff:08x})"
            )

    @staticmethod
    def read_from_buffer(
        buffer: Buffer, offset: int, options: Optional[ScanOptions] = None
    ) -> 'LocalFileHeader':
        options = options or DEFAULT_SCAN_OPTIONS
        entry_start_offset = offset

        pos = check_local_file_header_signature(buffer, offset)

        version, pos = read_u16(buffer, pos, 'version')
        bitflag, pos = read_u16(buffer, pos, 'general purpose flags')
        raw_method, pos = read_u16(buffer, pos, 'compression method')
        raw_mod_time, pos = read_u16(buffer, pos, 'modification time')
        raw_mod_date, pos = read_u16(buffer, pos, 'modification date')
        crc32, pos = read_u32(buffer, pos, 'CRC-32')
        compressed_size, pos = read_u32(buffer, pos, 'compressed size')
        uncompressed_size, pos = read_u32(buffer, pos, 'uncompressed size')
        file_name_length, pos = read_u16(buffer, pos, 'file name length')
        extra_field_length, pos = read_u16(buffer, pos, 'extra field length')

        raw_file_name, pos = read_bytes(buffer, pos, file_name_length, 'file name')
        extra_field, pos = read_bytes(buffer, pos, extra_field_length, 'extra field')

        method = _interpret_compression_method(raw_method, entry_start_offset, options.strict_compression)
        display_name = raw_file_name.decode('utf-8', errors='replace')

        data_start_offset = pos

        if method == ZipCompressionMethod.DEFLATE:
            compressed, pos = read_bytes(buffer, pos, compressed_size, 'compressed data')
            content = _inflate_raw(compressed, data_start_offset, display_name, options.max_content_size)
        else:
            _check_content_size(uncompressed_size, data_start_offset, options.max_content_size)
            content, pos = read_bytes(buffer, pos, uncompressed_size, 'stored data')

        header = LocalFileHeader(
            signature=LOCAL_FILE_HEADER_SIGNATURE,
            version=version,
            bitflag=bitflag,
            compression_method=method,
            raw_compression_method=raw_method,
            last_modified=decode_dos_datetime(raw_mod_date, raw_mod_time),
            raw_mod_date=raw_mod_date,
            raw_mod_time=raw_mod_time,
            crc32=crc32,
            compressed_size=compressed_size,
            uncompressed_size=uncompressed_size,
            raw_file_name=raw_file_name,
            extra_field=extra_field,
            content=content,
            entry_start_offset=entry_start_offset,
            data_start_offset=data_start_offset,
            next_offset=pos,
        )

        if options.verify_integrity:
            header.verify()

        return header


def parse_local_file_header(
    buffer: Buffer, offset: int, options: Optional[ScanOptions] = None
) -> Tuple[LocalFileHeader, int]:
    """
    Decodes the local file header (and the entry content) starting at a given offset.

    Args:
        buffer: The archive data.
        offset: The position at which the header is expected to start.
        options: A `ScanOptions` object, or None for the defaults.

    Returns:
        A ``(header, next_offset)`` tuple, where `next_offset` is the position immediately following the last content
        byte consumed.

    Raises:
        NotAZipEntryError: If the data at `offset` does not start with the local file header signature.
        BufferOverrunError: If any field, the name, the extra field or the content extends past the end of the buffer.
        DecompressionError: If the entry is deflated and its data is not a valid, complete raw deflate stream.
        UnsupportedCompressionMethodError: Only in strict mode, for methods other than store and deflate.
        ScanLimitExceededError: If the decoded content exceeds ``options.max_content_size``.
        EntryIntegrityError: Only if ``options.verify_integrity`` is set, on a size or CRC mismatch.
    """
    header = LocalFileHeader.read_from_buffer(buffer, offset, options)

    return header, header.next_offset


def check_local_file_header_signature(buffer: Buffer, offset: int) -> int:
    """
    Checks that a local file header starts at the given offset, without decoding anything past its signature.

    Returns:
        The position just after the signature.

    Raises:
        NotAZipEntryError: If the data at `offset` is some other structure.
        BufferOverrunError: If fewer than 4 bytes are available at `offset`.
    """
    signature, next_offset = read_u32(buffer, offset, 'local file header signature')
    if signature != LOCAL_FILE_HEADER_SIGNATURE:
        raise NotAZipEntryError(offset, signature.to_bytes(4, 'little'))

    return next_offset


def _interpret_compression_method(raw_method: int, position: int, strict: bool) -> ZipCompressionMethod:
    if raw_method == ZipCompressionMethod.DEFLATE:
        return ZipCompressionMethod.DEFLATE

    if strict and (raw_method != ZipCompressionMethod.STORE):
        raise UnsupportedCompressionMethodError(position, raw_method)

    return ZipCompressionMethod.STORE


def _check_content_size(size: int, position: int, max_size: Optional[int]):
    if (max_size is not None) and (size > max_size):
        raise ScanLimitExceededError('content size', max_size, position)


@contextmanager
def _raw_inflater(position: int, file_name: str) -> ContextManager['zlib._Decompress']:
    """
    Provides a raw deflate decompressor (no zlib/gzip framing) for a single entry. Zlib errors raised within the context
    are converted to `DecompressionError`. The decompressor is released when the context exits, however it exits.
    """
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)

    try:
        yield decompressor
    except zlib.error as e:
        raise DecompressionError(position, file_name, str(e)) from e
    finally:
        del decompressor


def _inflate_raw(data: bytes, position: int, file_name: str, max_size: Optional[int]) -> bytes:
    with _raw_inflater(position, file_name) as decompressor:
        if max_size is None:
            content = decompressor.decompress(data)
        else:
            content = decompressor.decompress(data, max_size + 1)
            _check_content_size(len(content), position, max_size)

        content += decompressor.flush()

        if not decompressor.eof:
            raise DecompressionError(position, file_name, "the data ends in the middle of a compressed block")

        if len(decompressor.unused_data) > 0:
            LOG.debug(
                "Ignoring %d bytes after the end of the deflate stream for '%s'",
                len(decompressor.unused_data), file_name
            )

    return content
