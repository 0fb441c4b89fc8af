"""
Sequential scanning of the local file headers at the start of a ZIP archive held in memory.

Since the central directory is not consulted, entries are found purely by walking: each header is decoded, and the
next one is expected to start right after its data. The walk ends normally when some structure other than a local
header (usually the central directory) is encountered, or when the buffer is exhausted.
"""

import logging

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from atmfjstc.lib.zip_scan.errors import NotAZipEntryError, NotAZipFileError, ScanLimitExceededError
from atmfjstc.lib.zip_scan.field_readers import Buffer
from atmfjstc.lib.zip_scan.local_file_header import LocalFileHeader, parse_local_file_header, \
    check_local_file_header_signature
from atmfjstc.lib.zip_scan.options import ScanOptions, DEFAULT_SCAN_OPTIONS


LOG = logging.getLogger(__name__)


class LocalFileWalker:
    """
    Walks the local file headers in a buffer, yielding a `LocalFileHeader` for each entry, in file order.

    Use it like::

        walker = LocalFileWalker(data)
        for header in walker:
            print(header.file_name)

        print(walker.offset, walker.trailing_size)

    Errors are never swallowed, with one exception: a signature mismatch after the first entry simply ends the walk.
    If the very first header is missing, `NotAZipFileError` is raised. Any other error (truncation, corrupt deflate
    data, limits exceeded) aborts the walk; the headers already yielded are the only usable output.

    A walker can only be iterated once.
    """

    _buffer: Buffer
    _options: ScanOptions
    _source_name: Optional[str]

    _offset: int = 0
    _entries_read: int = 0
    _started: bool = False
    _finished: bool = False

    def __init__(self, buffer: Buffer, options: Optional[ScanOptions] = None, source_name: Optional[str] = None):
        """
        Args:
            buffer: The archive data, starting with the first local file header.
            options: A `ScanOptions` object, or None for the defaults.
            source_name: Optional name of the data source (e.g. a file name), used in error messages.
        """
        self._buffer = buffer
        self._options = options or DEFAULT_SCAN_OPTIONS
        self._source_name = source_name

    @property
    def offset(self) -> int:
        """
        The position just after the last entry decoded so far (0 before the walk).
        """
        return self._offset

    @property
    def entries_read(self) -> int:
        return self._entries_read

    @property
    def finished(self) -> bool:
        """
        True once the walk has ended normally.
        """
        return self._finished

    @property
    def trailing_size(self) -> int:
        """
        The number of bytes after the last entry, i.e. the central directory and whatever else follows.
        """
        return len(self._buffer) - self._offset

    def __iter__(self) -> Iterator[LocalFileHeader]:
        if self._started:
            raise RuntimeError("A LocalFileWalker can only be iterated once")
        self._started = True

        while self._offset < len(self._buffer):
            try:
                if self._entry_limit_reached():
                    check_local_file_header_signature(self._buffer, self._offset)
                    raise ScanLimitExceededError('entry count', self._options.max_entries, self._offset)

                header, next_offset = parse_local_file_header(self._buffer, self._offset, self._options)
            except NotAZipEntryError as e:
                if self._offset == 0:
                    raise NotAZipFileError(self._source_name) from e

                LOG.debug(
                    "No more local file headers after position %d (found 0x%s)", self._offset, e.found_magic.hex()
                )
                break

            LOG.debug(
                "Found entry '%s' at position %d (%d bytes)", header.file_name, self._offset, header.total_entry_size
            )

            self._offset = next_offset
            self._entries_read += 1

            yield header

        self._finished = True

    def _entry_limit_reached(self) -> bool:
        return (self._options.max_entries is not None) and (self._entries_read >= self._options.max_entries)


def iter_local_file_headers(
    buffer: Buffer, options: Optional[ScanOptions] = None, source_name: Optional[str] = None
) -> Iterator[LocalFileHeader]:
    """
    Convenience generator equivalent to iterating over a new `LocalFileWalker`.
    """
    yield from LocalFileWalker(buffer, options, source_name)


@dataclass(frozen=True)
class ZipScanResult:
    """
    The outcome of a complete walk.

    Attributes:
        entries: The decoded headers, in file order.
        end_offset: The position just after the last entry. Equals the buffer length if nothing follows the entries.
        trailing_size: The number of bytes after the last entry (central directory, etc.)
    """

    entries: Tuple[LocalFileHeader, ...]
    end_offset: int
    trailing_size: int


def scan_local_file_headers(
    buffer: Buffer, options: Optional[ScanOptions] = None, source_name: Optional[str] = None
) -> ZipScanResult:
    """
    Walks all the local file headers in a buffer and collects the results.

    Raises:
        NotAZipFileError: If the buffer does not start with a local file header.
        ZipScanError: Any other error encountered during the walk (see `parse_local_file_header`).
    """
    walker = LocalFileWalker(buffer, options, source_name)
    entries = tuple(walker)

    return ZipScanResult(entries=entries, end_offset=walker.offset, trailing_size=walker.trailing_size)
