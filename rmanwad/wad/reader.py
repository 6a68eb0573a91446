"""WAD archive table-of-contents decoder (versions 1, 2 and 3).

Header layouts (little-endian, after 'RW' + major(1) + minor(1)):
  v1: entry_offset(2) + entry_size(2) + file_count(4)                    -> 12 bytes
  v2: ecdsa_len(1) + ecdsa(83, padded) + checksum(8) + entry_offset(2)
      + entry_size(2) + file_count(4)                                    -> 104 bytes
  v3: ecdsa(256) + checksum(8) + file_count(4)                           -> 272 bytes

Content records follow the header: 24 bytes for v1, 32 bytes for v2/v3.
"""
from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Optional

from rmanwad.errors import Truncated, UnsupportedVersion
from rmanwad.flat.reader import (
    check_bounds,
    read_bytes,
    read_tag,
    read_u8,
    read_u32,
)
from rmanwad.wad.constants import (
    CONTENT_COMPRESSION,
    CONTENT_DUPLICATE,
    CONTENT_HASH,
    CONTENT_LAYOUTS,
    CONTENT_SHA256,
    HEADER_BODY_OFFSET,
    MAJOR_OFFSET,
    MINOR_OFFSET,
    V2_ECDSA_REGION,
    V3_ECDSA_SIZE,
    WAD_MAGIC,
    ContentLayout,
)
from rmanwad.wad.enums import CompressionType
from rmanwad.wad.records import (
    Content,
    ContentV1,
    ContentV2,
    WadFile,
    WadHeader,
    WadHeaderV1,
    WadHeaderV2,
    WadHeaderV3,
)

logger = logging.getLogger(__name__)

_V1_TAIL = struct.Struct("<HHI")     # entry_offset(2) + entry_size(2) + file_count(4)
_V2_TAIL = struct.Struct("<QHHI")    # checksum(8) + entry_offset(2) + entry_size(2) + file_count(4)
_V3_TAIL = struct.Struct("<QI")      # checksum(8) + file_count(4)
_CONTENT = struct.Struct("<QIII")    # hash(8) + data_offset(4) + compressed(4) + uncompressed(4)


def _unpack(fmt: struct.Struct, data: bytes, position: int) -> tuple:
    check_bounds(data, position, fmt.size)
    return fmt.unpack_from(data, position)


def content_layout(major: int) -> ContentLayout:
    """Content table start and stride for a major version."""
    layout = CONTENT_LAYOUTS.get(major)
    if layout is None:
        raise UnsupportedVersion(f"unsupported WAD major version {major}", major, MAJOR_OFFSET)
    return layout


def decode_wad_header(data: bytes) -> WadHeader:
    """Decode the magic, version bytes and the version-specific header."""
    read_tag(data, 0, WAD_MAGIC)
    major = read_u8(data, MAJOR_OFFSET)
    minor = read_u8(data, MINOR_OFFSET)
    pos = HEADER_BODY_OFFSET

    if major == 1:
        entry_offset, entry_size, file_count = _unpack(_V1_TAIL, data, pos)
        version = WadHeaderV1(entry_offset=entry_offset, entry_size=entry_size)
    elif major == 2:
        ecdsa_length = read_u8(data, pos)
        if ecdsa_length > V2_ECDSA_REGION:
            raise Truncated(pos + 1, ecdsa_length, V2_ECDSA_REGION, region="ECDSA region")
        ecdsa = read_bytes(data, pos + 1, ecdsa_length)
        file_checksum, entry_offset, entry_size, file_count = \
            _unpack(_V2_TAIL, data, pos + 1 + V2_ECDSA_REGION)
        version = WadHeaderV2(
            ecdsa=ecdsa,
            file_checksum=file_checksum,
            entry_offset=entry_offset,
            entry_size=entry_size,
        )
    elif major == 3:
        ecdsa = read_bytes(data, pos, V3_ECDSA_SIZE)
        file_checksum, file_count = _unpack(_V3_TAIL, data, pos + V3_ECDSA_SIZE)
        version = WadHeaderV3(ecdsa=ecdsa, file_checksum=file_checksum)
    else:
        raise UnsupportedVersion(f"unsupported WAD major version {major}", major, MAJOR_OFFSET)

    return WadHeader(
        magic=WAD_MAGIC.decode("ascii"),
        major=major,
        minor=minor,
        file_count=file_count,
        version=version,
    )


def _decode_content(data: bytes, entry_offset: int, layout: ContentLayout) -> Content:
    check_bounds(data, entry_offset, layout.entry_size)
    hash_, data_offset, compressed_size, uncompressed_size = \
        _CONTENT.unpack_from(data, entry_offset + CONTENT_HASH)

    compression_position = entry_offset + CONTENT_COMPRESSION
    if layout.compression_width == 4:
        # v1 stores the type as a u32; only its low byte is meaningful
        compression_value = read_u32(data, compression_position) & 0xFF
    else:
        compression_value = read_u8(data, compression_position)
    compression_type = CompressionType.from_value(compression_value, compression_position)

    if layout.has_extension:
        is_duplicate = read_u8(data, entry_offset + CONTENT_DUPLICATE) > 0
        (sha256,) = struct.unpack_from("<Q", data, entry_offset + CONTENT_SHA256)
        version = ContentV2(is_duplicate=is_duplicate, sha256=sha256)
    else:
        version = ContentV1()

    return Content(
        hash=hash_,
        data_offset=data_offset,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        compression_type=compression_type,
        version=version,
    )


def decode_contents(data: bytes, header: WadHeader) -> list[Content]:
    """Decode ``header.file_count`` fixed-stride content records, in file order."""
    layout = content_layout(header.major)
    logger.debug(
        "WAD v%d.%d: %d entries of %d bytes from offset %d",
        header.major, header.minor, header.file_count, layout.entry_size, layout.data_start,
    )
    # Reject an oversized file_count before decoding any record.
    check_bounds(data, layout.data_start, header.file_count * layout.entry_size)

    return [
        _decode_content(data, layout.data_start + i * layout.entry_size, layout)
        for i in range(header.file_count)
    ]


def decode_wad(data: bytes) -> WadFile:
    """Decode a WAD header and its whole content table."""
    header = decode_wad_header(data)
    return WadFile(header=header, contents=tuple(decode_contents(data, header)))


class WADReader:
    """Reader for WAD archives on disk."""

    def __init__(self, path: Path):
        self.path = path
        self.wad = decode_wad(path.read_bytes())

    @property
    def header(self) -> WadHeader:
        return self.wad.header

    @property
    def contents(self) -> tuple[Content, ...]:
        return self.wad.contents

    def find_hash(self, path_hash: int) -> Optional[Content]:
        return self.wad.find_hash(path_hash)


def main():
    """Test: list content entries in a WAD archive."""
    import sys
    if len(sys.argv) < 2:
        print("Usage: python -m rmanwad.wad.reader <path/to/file.wad>")
        sys.exit(1)

    path = Path(sys.argv[1])
    print(f"Reading {path.name}...")
    reader = WADReader(path)
    print(f"WAD v{reader.header.major}.{reader.header.minor}: "
          f"{reader.header.file_count} entries\n")
    for content in reader.contents:
        size_kb = content.uncompressed_size / 1024
        print(f"  {content.hash_hex} {content.compression_type.name:<9} ({size_kb:.0f} KB)")


if __name__ == "__main__":
    main()
