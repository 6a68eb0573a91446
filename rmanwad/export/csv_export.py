"""Export file listings as CSV."""
from __future__ import annotations

import csv
import io
from typing import Optional

from rmanwad.detect import Decoded
from rmanwad.rman.records import RmanFile
from rmanwad.wad.records import ContentV2, WadFile


def _export_rman(manifest: RmanFile, writer) -> None:
    writer.writerow([
        "file_id", "path", "size", "language_mask", "symlink", "chunk_count",
    ])
    for entry in manifest.body.files:
        writer.writerow([
            f"0x{entry.id:016X}",
            manifest.file_path(entry),
            entry.size,
            f"0x{entry.language:08X}",
            entry.symlink,
            len(entry.chunk_ids),
        ])


def _export_wad(wad: WadFile, writer, names: dict[int, str]) -> None:
    writer.writerow([
        "hash", "name", "data_offset", "compressed_size", "uncompressed_size",
        "compression", "is_duplicate", "sha256",
    ])
    for content in wad.contents:
        version = content.version
        is_v2 = isinstance(version, ContentV2)
        writer.writerow([
            content.hash_hex,
            names.get(content.hash, ""),
            content.data_offset,
            content.compressed_size,
            content.uncompressed_size,
            content.compression_type.name,
            version.is_duplicate if is_v2 else "",
            f"{version.sha256:016x}" if is_v2 else "",
        ])


def export_csv(tree: Decoded, names: Optional[dict[int, str]] = None) -> str:
    """Export RMAN files or WAD contents as a CSV string.

    ``names`` maps WAD path hashes to names; RMAN paths come from the manifest.
    """
    output = io.StringIO()
    writer = csv.writer(output)

    if isinstance(tree, RmanFile):
        _export_rman(tree, writer)
    else:
        _export_wad(tree, writer, names or {})

    return output.getvalue()
