"""
Sequential decoder for the local file headers of ZIP archives held in memory.

This package reads a ZIP archive the "naive" way: starting at offset 0, it decodes each local file header in turn
(fixed fields, MS-DOS timestamp, file name, extra field) and materializes the entry's content, either by copying stored
bytes or by inflating raw deflate data. The central directory is never consulted; the scan simply stops when it no
longer finds a local header signature.

Typical use::

    with open('archive.zip', 'rb') as f:
        data = f.read()

    for header in iter_local_file_headers(data):
        print(header.last_modified, header.file_name, len(header.content))

Limitations:

- Only the store and deflate methods are supported (other methods are read as stored data, unless
  ``ScanOptions(strict_compression=True)`` is used)
- Zip64 archives and entries whose sizes are deferred to a data descriptor cannot be decoded
- A corrupt length field ends the scan with an error; there is no attempt to resynchronize
"""

__version__ = '0.1.0'


from atmfjstc.lib.zip_scan.errors import ZipScanError, BufferOverrunError, NotAZipEntryError, NotAZipFileError, \
    DecompressionError, UnsupportedCompressionMethodError, ScanLimitExceededError, EntryIntegrityError
from atmfjstc.lib.zip_scan.options import ScanOptions
from atmfjstc.lib.zip_scan.local_file_header import LocalFileHeader, ZipCompressionMethod, ZipEntryFlags, \
    parse_local_file_header
from atmfjstc.lib.zip_scan.walker import LocalFileWalker, ZipScanResult, iter_local_file_headers, \
    scan_local_file_headers
