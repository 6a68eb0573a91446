"""Vtable slot layouts for RMAN body tables.

Each enum lists a table's vtable slots in stored order. Unknown slots still
occupy a position and must stay in place.
"""
from __future__ import annotations

from enum import IntEnum


class BundleField(IntEnum):
    BUNDLE_ID = 0
    CHUNKS = 1
    UNKNOWN = 2
    HEADER_SIZE = 3


class ChunkField(IntEnum):
    UNKNOWN1 = 0
    UNKNOWN2 = 1
    CHUNK_ID = 2
    COMPRESSED_SIZE = 3
    UNCOMPRESSED_SIZE = 4


class LanguageField(IntEnum):
    NAME_OFFSET = 0
    UNKNOWN1 = 1
    LANGUAGE_ID = 2


class DirectoryField(IntEnum):
    UNKNOWN1 = 0
    UNKNOWN2 = 1
    DIRECTORY_ID = 2
    PARENT_ID = 3
    NAME_OFFSET = 4


class FileField(IntEnum):
    UNKNOWN1 = 0
    CHUNKS = 1
    FILE_ID = 2
    DIRECTORY_ID = 3
    FILE_SIZE = 4
    NAME_OFFSET = 5
    LANGUAGE_MASK = 6
    UNKNOWN2 = 7
    UNKNOWN3 = 8
    UNKNOWN4 = 9
    UNKNOWN5 = 10
    SYMLINK_OFFSET = 11
    UNKNOWN6 = 12
    UNKNOWN7 = 13
    UNKNOWN8 = 14


# Root table sections, by field index. A section's raw offset sits at
# header_offset + 4 * (index + 1) and is relative to that position.
class RootSection(IntEnum):
    BUNDLES = 0
    LANGUAGES = 1
    FILES = 2
    DIRECTORIES = 3


def section_constant(section: RootSection) -> int:
    """Byte position of a root section's offset field within the root table."""
    return 4 * (section + 1)
