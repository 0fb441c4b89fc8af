from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ScanOptions:
    """
    Settings that control how strictly the local headers of an archive are decoded.

    The defaults reproduce the plain behavior of the scanner: every compression method other than deflate is read as
    stored data, nothing is verified and there are no limits.

    Attributes:
        strict_compression: If True, entries using a compression method other than store (0) or deflate (8) cause an
            `UnsupportedCompressionMethodError` instead of being read as stored data.
        verify_integrity: If True, the size and CRC-32 of each decoded entry are checked against the values declared
            in its header, and an `EntryIntegrityError` is raised on a mismatch.
        max_entries: If not None, the maximum number of entries a scan may produce before failing with a
            `ScanLimitExceededError`. Useful against corrupt or adversarial inputs.
        max_content_size: If not None, the maximum decoded size of a single entry, in bytes. Decompression stops as soon
            as the limit is passed.
    """

    strict_compression: bool = False
    verify_integrity: bool = False
    max_entries: Optional[int] = None
    max_content_size: Optional[int] = None

    def __post_init__(self):
        for name in ('max_entries', 'max_content_size'):
            value = getattr(self, name)
            if (value is not None) and (value < 0):
                raise ValueError(f"{name} must be non-negative! (is: {value})")


DEFAULT_SCAN_OPTIONS = ScanOptions()
