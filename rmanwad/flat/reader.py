"""Bounds-checked little-endian primitive reads over an immutable buffer."""
from __future__ import annotations

import struct

from rmanwad.errors import InvalidMagic, Truncated


_UINT8 = struct.Struct("<B")
_UINT16 = struct.Struct("<H")
_UINT32 = struct.Struct("<I")
_UINT64 = struct.Struct("<Q")
_INT32 = struct.Struct("<i")


def check_bounds(data: bytes, position: int, width: int) -> None:
    """Raise Truncated unless ``data[position:position + width]`` is fully in range."""
    if position < 0 or width < 0 or position + width > len(data):
        raise Truncated(position, width, len(data))


def _read(fmt: struct.Struct, data: bytes, position: int) -> int:
    check_bounds(data, position, fmt.size)
    return fmt.unpack_from(data, position)[0]


def read_u8(data: bytes, position: int) -> int:
    return _read(_UINT8, data, position)


def read_u16(data: bytes, position: int) -> int:
    return _read(_UINT16, data, position)


def read_u32(data: bytes, position: int) -> int:
    return _read(_UINT32, data, position)


def read_u64(data: bytes, position: int) -> int:
    return _read(_UINT64, data, position)


def read_i32(data: bytes, position: int) -> int:
    return _read(_INT32, data, position)


def read_bytes(data: bytes, position: int, length: int) -> bytes:
    """Return a copy of ``length`` bytes starting at ``position``."""
    check_bounds(data, position, length)
    return bytes(data[position:position + length])


def read_tag(data: bytes, position: int, literal: bytes) -> bytes:
    """Check that the bytes at ``position`` equal ``literal``.

    A buffer that ends inside a matching prefix is Truncated, any differing
    byte is InvalidMagic.
    """
    check_bounds(data, position, 0)
    found = bytes(data[position:position + len(literal)])
    if found != literal[:len(found)]:
        raise InvalidMagic(literal, found, position)
    check_bounds(data, position, len(literal))
    return literal
