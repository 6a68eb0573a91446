"""Typed decode errors shared by the RMAN and WAD readers.

Every error subclasses ValueError, so callers that already guard a reader
with ``except (ValueError, OSError)`` keep working.
"""
from __future__ import annotations

from typing import Optional


class DecodeError(ValueError):
    """Base class for all malformed-input errors."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at byte {position})"
        super().__init__(message)
        self.position = position


class InvalidMagic(DecodeError):
    """Leading tag bytes do not match the expected literal."""

    def __init__(self, expected: bytes, found: bytes, position: int = 0):
        super().__init__(f"bad magic: expected {expected!r}, found {found!r}", position)
        self.expected = expected
        self.found = found


class Truncated(DecodeError):
    """A read of ``width`` bytes at ``position`` would leave the buffer.

    ``region`` names what ``size`` bounds when that is narrower than the
    whole buffer.
    """

    def __init__(self, position: int, width: int, size: int, region: str = "buffer"):
        super().__init__(
            f"truncated: need {width} byte(s) at {position}, {region} holds {size}",
            position,
        )
        self.width = width
        self.size = size
        self.region = region


class UnsupportedVersion(DecodeError):
    """Unrecognized version byte."""

    def __init__(self, message: str, found: int, position: Optional[int] = None):
        super().__init__(message, position)
        self.found = found


class InvalidEnum(UnsupportedVersion):
    """A stored value is outside the range of its enumeration."""

    def __init__(self, enum_name: str, found: int, position: Optional[int] = None):
        super().__init__(f"invalid {enum_name} value {found}", found, position)
        self.enum_name = enum_name


class DecompressionFailed(DecodeError):
    """The decompression collaborator rejected the compressed body."""


class MissingField(DecodeError):
    """A required table field has no entry in its vtable."""

    def __init__(self, record: str, field: str, position: Optional[int] = None):
        super().__init__(f"{record} table is missing required field {field!r}", position)
        self.record = record
        self.field = field
