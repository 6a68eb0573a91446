"""Enumerations for integer-coded WAD fields."""
from __future__ import annotations

from enum import IntEnum
from typing import Optional

from rmanwad.errors import InvalidEnum


class CompressionType(IntEnum):
    NONE = 0
    GZIP = 1
    REFERENCE = 2
    ZSTD = 3

    @classmethod
    def from_value(cls, value: int, position: Optional[int] = None) -> CompressionType:
        """Map a stored value, raising InvalidEnum for anything out of range."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidEnum(cls.__name__, value, position) from None
