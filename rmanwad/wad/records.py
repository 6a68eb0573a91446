"""Decoded WAD archive records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from rmanwad.wad.enums import CompressionType


@dataclass(frozen=True, slots=True)
class WadHeaderV1:
    entry_offset: int
    entry_size: int


@dataclass(frozen=True, slots=True)
class WadHeaderV2:
    ecdsa: bytes = field(repr=False)
    file_checksum: int
    entry_offset: int
    entry_size: int


@dataclass(frozen=True, slots=True)
class WadHeaderV3:
    ecdsa: bytes = field(repr=False)
    file_checksum: int


HeaderVersion = Union[WadHeaderV1, WadHeaderV2, WadHeaderV3]


@dataclass(frozen=True, slots=True)
class WadHeader:
    magic: str
    major: int
    minor: int
    file_count: int
    version: HeaderVersion


@dataclass(frozen=True, slots=True)
class ContentV1:
    pass


@dataclass(frozen=True, slots=True)
class ContentV2:
    is_duplicate: bool
    sha256: int         # Low 64 bits only, as stored


ContentVersion = Union[ContentV1, ContentV2]


@dataclass(frozen=True, slots=True)
class Content:
    """A file entry in the content table. data_offset is absolute in the WAD."""
    hash: int
    data_offset: int
    compressed_size: int
    uncompressed_size: int
    compression_type: CompressionType
    version: ContentVersion

    @property
    def hash_hex(self) -> str:
        return f"{self.hash:016x}"


@dataclass(frozen=True, slots=True)
class WadFile:
    header: WadHeader
    contents: tuple[Content, ...] = ()

    def find_hash(self, path_hash: int) -> Optional[Content]:
        """Return the first content entry with the given path hash."""
        for content in self.contents:
            if content.hash == path_hash:
                return content
        return None
