"""Zstandard decompression of RMAN bodies."""
from __future__ import annotations

from typing import Callable

import zstandard as zstd

from rmanwad.errors import DecompressionFailed

# (compressed bytes) -> decompressed bytes; raises DecompressionFailed on bad input.
Decompressor = Callable[[bytes], bytes]

ZSTD_MAGIC = b"\x28\xB5\x2F\xFD"


def zstd_decompress(data: bytes) -> bytes:
    """Decompress exactly one complete zstd frame.

    Uses the streaming decompressor so frames written without a content size
    in their header still decode.
    """
    if not data.startswith(ZSTD_MAGIC):
        raise DecompressionFailed(f"body is not a zstd frame: starts with {bytes(data[:4])!r}")
    try:
        dobj = zstd.ZstdDecompressor().decompressobj()
        output = dobj.decompress(data)
    except zstd.ZstdError as exc:
        raise DecompressionFailed(f"zstd body rejected: {exc}") from exc
    if not dobj.eof:
        raise DecompressionFailed(
            f"zstd frame is incomplete: {len(data)} compressed byte(s) gave {len(output)} byte(s)"
        )
    if dobj.unused_data:
        raise DecompressionFailed(
            f"{len(dobj.unused_data)} byte(s) follow the end of the zstd frame"
        )
    return output
