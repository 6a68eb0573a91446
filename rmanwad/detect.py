"""Pick a decoder from a buffer's leading magic bytes."""
from __future__ import annotations

from typing import Union

from rmanwad.errors import InvalidMagic
from rmanwad.rman.reader import RMAN_MAGIC, decode_rman
from rmanwad.rman.records import RmanFile
from rmanwad.wad.constants import WAD_MAGIC
from rmanwad.wad.reader import decode_wad
from rmanwad.wad.records import WadFile

Decoded = Union[RmanFile, WadFile]


def detect_format(data: bytes) -> str:
    """Return 'rman' or 'wad'."""
    if data[:len(RMAN_MAGIC)] == RMAN_MAGIC:
        return "rman"
    if data[:len(WAD_MAGIC)] == WAD_MAGIC:
        return "wad"
    raise InvalidMagic(RMAN_MAGIC + b" or " + WAD_MAGIC, bytes(data[:4]))


def decode_any(data: bytes) -> Decoded:
    if detect_format(data) == "rman":
        return decode_rman(data)
    return decode_wad(data)
