"""RMAN release manifest decoder.

Layout:
  Header (28 bytes): 'RMAN'(4) + major(1) + minor(1) + unknown(1) + signature_type(1)
                     + offset(4) + length(4) + manifest_id(8) + decompressed_length(4)
  Body: zstd frame at [offset, offset + length). Decompressed, it starts with a
        u32 root table offset; the root table holds relative offsets to four
        vectors of tables (bundles, languages, files, directories).
"""
from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Optional

from rmanwad.flat.reader import check_bounds, read_bytes, read_tag, read_u32
from rmanwad.flat.table import Table, decode_vector
from rmanwad.rman.compression import Decompressor, zstd_decompress
from rmanwad.rman.records import (
    Bundle,
    Chunk,
    Directory,
    FileEntry,
    Language,
    OffsetMap,
    RmanBody,
    RmanFile,
    RmanHeader,
)
from rmanwad.rman.schema import (
    BundleField,
    ChunkField,
    DirectoryField,
    FileField,
    LanguageField,
    RootSection,
    section_constant,
)

logger = logging.getLogger(__name__)

RMAN_MAGIC = b"RMAN"
_HEADER = struct.Struct("<4sBBBBIIQI")


def decode_header(data: bytes) -> RmanHeader:
    """Decode the fixed header at the start of the file."""
    read_tag(data, 0, RMAN_MAGIC)
    check_bounds(data, 0, _HEADER.size)
    (magic, major, minor, unknown, signature_type,
     offset, length, manifest_id, decompressed_length) = _HEADER.unpack_from(data, 0)
    return RmanHeader(
        magic=magic.decode("ascii"),
        major=major,
        minor=minor,
        unknown=unknown,
        signature_type=signature_type,
        offset=offset,
        length=length,
        manifest_id=manifest_id,
        decompressed_length=decompressed_length,
    )


def decode_offset_map(body: bytes) -> OffsetMap:
    """Resolve the root table into absolute section positions."""
    header_offset = read_u32(body, 0)

    def section(which: RootSection) -> int:
        field_position = header_offset + section_constant(which)
        return field_position + read_u32(body, field_position)

    return OffsetMap(
        bundle_offset=section(RootSection.BUNDLES),
        language_offset=section(RootSection.LANGUAGES),
        file_offset=section(RootSection.FILES),
        folder_offset=section(RootSection.DIRECTORIES),
    )


def _decode_chunk(table: Table) -> Chunk:
    return Chunk(
        chunk_id=table.u64(ChunkField.CHUNK_ID),
        compressed_size=table.u32(ChunkField.COMPRESSED_SIZE, 0),
        uncompressed_size=table.u32(ChunkField.UNCOMPRESSED_SIZE, 0),
    )


def _decode_bundle(table: Table) -> Bundle:
    return Bundle(
        bundle_id=table.u64(BundleField.BUNDLE_ID),
        chunks=tuple(table.vector(BundleField.CHUNKS, ChunkField, _decode_chunk, ())),
    )


def _decode_language(table: Table) -> Language:
    return Language(
        id=table.u8(LanguageField.LANGUAGE_ID),
        name=table.string(LanguageField.NAME_OFFSET),
    )


def _decode_directory(table: Table) -> Directory:
    # Absent ids mean 0; a parent_id of 0 marks the root.
    return Directory(
        id=table.u64(DirectoryField.DIRECTORY_ID, 0),
        parent_id=table.u64(DirectoryField.PARENT_ID, 0),
        name=table.string(DirectoryField.NAME_OFFSET, ""),
    )


def _decode_file(table: Table) -> FileEntry:
    return FileEntry(
        id=table.u64(FileField.FILE_ID),
        name=table.string(FileField.NAME_OFFSET),
        symlink=table.string(FileField.SYMLINK_OFFSET, ""),
        directory_id=table.u64(FileField.DIRECTORY_ID, 0),
        size=table.u32(FileField.FILE_SIZE, 0),
        language=table.u32(FileField.LANGUAGE_MASK, 0),
        chunk_ids=table.long_vector(FileField.CHUNKS, ()),
    )


def decode_bundles(body: bytes, start: int) -> list[Bundle]:
    return decode_vector(body, start, BundleField, _decode_bundle)


def decode_languages(body: bytes, start: int) -> list[Language]:
    return decode_vector(body, start, LanguageField, _decode_language)


def decode_directories(body: bytes, start: int) -> list[Directory]:
    return decode_vector(body, start, DirectoryField, _decode_directory)


def decode_files(body: bytes, start: int) -> list[FileEntry]:
    return decode_vector(body, start, FileField, _decode_file)


def decode_body(body: bytes) -> RmanBody:
    """Decode all four sections of a decompressed body."""
    offsets = decode_offset_map(body)
    logger.debug("Section offsets: %s", offsets)

    bundles = decode_bundles(body, offsets.bundle_offset)
    languages = decode_languages(body, offsets.language_offset)
    files = decode_files(body, offsets.file_offset)
    directories = decode_directories(body, offsets.folder_offset)
    logger.debug(
        "Decoded %d bundles, %d languages, %d files, %d directories",
        len(bundles), len(languages), len(files), len(directories),
    )

    return RmanBody(
        bundles=tuple(bundles),
        languages=tuple(languages),
        files=tuple(files),
        directories=tuple(directories),
    )


def decode_rman(data: bytes, decompress: Decompressor = zstd_decompress) -> RmanFile:
    """Decode a complete manifest. Any malformed part aborts the whole decode."""
    header = decode_header(data)
    logger.debug(
        "RMAN v%d.%d manifest 0x%016X, body at %d (+%d)",
        header.major, header.minor, header.manifest_id, header.offset, header.length,
    )

    compressed = read_bytes(data, header.offset, header.length)
    body = decompress(compressed)
    if header.decompressed_length and len(body) != header.decompressed_length:
        logger.debug(
            "Decompressed %d bytes, header declares %d",
            len(body), header.decompressed_length,
        )

    return RmanFile(header=header, body=decode_body(body))


class RMANReader:
    """Reader for RMAN manifest files on disk."""

    def __init__(self, path: Path, decompress: Decompressor = zstd_decompress):
        self.path = path
        self.manifest = decode_rman(path.read_bytes(), decompress)

    @property
    def header(self) -> RmanHeader:
        return self.manifest.header

    @property
    def files(self) -> tuple[FileEntry, ...]:
        return self.manifest.body.files

    def find(self, name_fragment: str) -> Optional[FileEntry]:
        return self.manifest.find(name_fragment)

    def find_all(self, name_fragment: str) -> list[FileEntry]:
        return self.manifest.find_all(name_fragment)

    def list_files(self) -> list[str]:
        return self.manifest.list_files()


def main():
    """Test: list files in a manifest."""
    import sys
    if len(sys.argv) < 2:
        print("Usage: python -m rmanwad.rman.reader <path/to/file.manifest>")
        sys.exit(1)

    path = Path(sys.argv[1])
    print(f"Reading {path.name}...")
    reader = RMANReader(path)
    body = reader.manifest.body
    print(f"Manifest 0x{reader.header.manifest_id:016X}: "
          f"{len(body.bundles)} bundles, {len(body.files)} files\n")
    for entry in body.files:
        size_kb = entry.size / 1024
        print(f"  {reader.manifest.file_path(entry)} ({size_kb:.0f} KB)")


if __name__ == "__main__":
    main()
