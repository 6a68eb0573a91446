"""WAD format constants and per-version layouts."""
from __future__ import annotations

from dataclasses import dataclass

WAD_MAGIC = b"RW"

# Header field positions
MAJOR_OFFSET = 2
MINOR_OFFSET = 3
HEADER_BODY_OFFSET = 4      # First version-specific byte

V2_ECDSA_REGION = 83        # Signature length byte at 4, padded signature at 5..88
V3_ECDSA_SIZE = 256


@dataclass(frozen=True, slots=True)
class ContentLayout:
    """Where the content table starts and how wide each record is."""
    data_start: int
    entry_size: int
    compression_width: int  # Byte width of the compression type field
    has_extension: bool     # is_duplicate + sha256 present


# The table starts right after the header's file_count field.
CONTENT_LAYOUTS: dict[int, ContentLayout] = {
    1: ContentLayout(data_start=4 + 2 + 2 + 4, entry_size=24,
                     compression_width=4, has_extension=False),
    2: ContentLayout(data_start=4 + 1 + V2_ECDSA_REGION + 8 + 2 + 2 + 4, entry_size=32,
                     compression_width=1, has_extension=True),
    3: ContentLayout(data_start=4 + V3_ECDSA_SIZE + 8 + 4, entry_size=32,
                     compression_width=1, has_extension=True),
}

# Content record sub-offsets
CONTENT_HASH = 0
CONTENT_DATA_OFFSET = 8
CONTENT_COMPRESSED_SIZE = 12
CONTENT_UNCOMPRESSED_SIZE = 16
CONTENT_COMPRESSION = 20
CONTENT_DUPLICATE = 21
CONTENT_SHA256 = 24
