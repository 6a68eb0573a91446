"""Decoded RMAN manifest records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class RmanHeader:
    """Fixed 28-byte manifest header."""
    magic: str
    major: int
    minor: int
    unknown: int
    signature_type: int
    offset: int                 # Start of the compressed body in the file
    length: int                 # Compressed body length
    manifest_id: int
    decompressed_length: int    # Informational only


@dataclass(frozen=True, slots=True)
class OffsetMap:
    """Absolute section positions inside the decompressed body."""
    bundle_offset: int
    language_offset: int
    file_offset: int
    folder_offset: int


@dataclass(frozen=True, slots=True)
class Chunk:
    chunk_id: int
    compressed_size: int
    uncompressed_size: int


@dataclass(frozen=True, slots=True)
class Bundle:
    """A downloadable blob; chunks are in reassembly order."""
    bundle_id: int
    chunks: tuple[Chunk, ...] = ()


@dataclass(frozen=True, slots=True)
class Language:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Directory:
    id: int
    parent_id: int      # 0 for the root
    name: str


@dataclass(frozen=True, slots=True)
class FileEntry:
    id: int
    name: str
    symlink: str
    directory_id: int
    size: int
    language: int       # Bitmask over Language.id
    chunk_ids: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class RmanBody:
    bundles: tuple[Bundle, ...] = ()
    languages: tuple[Language, ...] = ()
    files: tuple[FileEntry, ...] = ()
    directories: tuple[Directory, ...] = ()


@dataclass(frozen=True, slots=True)
class RmanFile:
    """A fully decoded manifest."""
    header: RmanHeader
    body: RmanBody = field(default_factory=RmanBody)

    def directory_path(self, directory_id: int) -> str:
        """Join directory names from ``directory_id`` up to the root with '/'.

        The decoder does not validate the directory tree, so unknown ids and
        parent cycles are reported here as ValueError.
        """
        by_id = {d.id: d for d in self.body.directories}
        parts: list[str] = []
        seen: set[int] = set()
        current = directory_id
        while current != 0:
            if current in seen:
                raise ValueError(f"Directory cycle at id 0x{current:016X}")
            seen.add(current)
            directory = by_id.get(current)
            if directory is None:
                raise ValueError(f"Unknown directory id 0x{current:016X}")
            if directory.name:
                parts.append(directory.name)
            current = directory.parent_id
        return "/".join(reversed(parts))

    def file_path(self, entry: FileEntry) -> str:
        """Full path of a file entry, including its directory."""
        directory = self.directory_path(entry.directory_id)
        return f"{directory}/{entry.name}" if directory else entry.name

    def list_files(self) -> list[str]:
        """List full paths of all files."""
        return [self.file_path(e) for e in self.body.files]

    def find(self, name_fragment: str) -> Optional[FileEntry]:
        """Find first file whose path contains the fragment (case-insensitive)."""
        fragment_lower = name_fragment.lower()
        for entry in self.body.files:
            if fragment_lower in self.file_path(entry).lower():
                return entry
        return None

    def find_all(self, name_fragment: str) -> list[FileEntry]:
        """Find all files whose path contains the fragment."""
        fragment_lower = name_fragment.lower()
        return [e for e in self.body.files if fragment_lower in self.file_path(e).lower()]

    def chunk_index(self) -> dict[int, tuple[int, Chunk]]:
        """Map chunk_id -> (bundle_id, chunk) across all bundles."""
        index: dict[int, tuple[int, Chunk]] = {}
        for bundle in self.body.bundles:
            for chunk in bundle.chunks:
                index[chunk.chunk_id] = (bundle.bundle_id, chunk)
        return index

