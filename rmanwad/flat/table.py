"""Flatbuffer-style table access: vtable resolution, vectors and strings.

A table starts with an i32 soffset; its vtable sits at ``table - soffset``
and holds one u16 field offset per schema slot, 0 meaning the field is
absent. Strings and vectors are reached through a u32 offset relative to the
position of the field that holds it:

    table --soffset--> vtable --u16--> field --u32--> vector / string
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional, TypeVar

from rmanwad.errors import MissingField
from rmanwad.flat.reader import (
    check_bounds,
    read_bytes,
    read_i32,
    read_u8,
    read_u32,
    read_u64,
)

T = TypeVar("T")

# Sentinel for "no default given": an absent field is then a MissingField.
_REQUIRED: Any = object()


@dataclass(frozen=True, slots=True)
class Table:
    """A resolved table instance: its position plus its vtable field offsets."""
    data: bytes = field(repr=False)
    position: int
    vtable_position: int
    schema: type[IntEnum]
    field_offsets: tuple[int, ...]

    @property
    def record_name(self) -> str:
        return self.schema.__name__.removesuffix("Field")

    def field_position(self, slot: IntEnum) -> Optional[int]:
        """Absolute position of a field's value, or None when it is absent."""
        offset = self.field_offsets[slot]
        if offset == 0:
            return None
        return self.position + offset

    def _locate(self, slot: IntEnum, default: Any) -> Optional[int]:
        position = self.field_position(slot)
        if position is None and default is _REQUIRED:
            raise MissingField(self.record_name, slot.name.lower(), self.position)
        return position

    def u8(self, slot: IntEnum, default: Any = _REQUIRED) -> int:
        position = self._locate(slot, default)
        return default if position is None else read_u8(self.data, position)

    def u32(self, slot: IntEnum, default: Any = _REQUIRED) -> int:
        position = self._locate(slot, default)
        return default if position is None else read_u32(self.data, position)

    def u64(self, slot: IntEnum, default: Any = _REQUIRED) -> int:
        position = self._locate(slot, default)
        return default if position is None else read_u64(self.data, position)

    def string(self, slot: IntEnum, default: Any = _REQUIRED) -> str:
        position = self._locate(slot, default)
        return default if position is None else decode_string(self.data, position)

    def vector(self, slot: IntEnum, schema: type[IntEnum],
               decode_element: Callable[[Table], T], default: Any = _REQUIRED) -> list[T]:
        """Decode a vector of tables referenced by this field."""
        position = self._locate(slot, default)
        if position is None:
            return list(default)
        start = position + read_u32(self.data, position)
        return decode_vector(self.data, start, schema, decode_element)

    def long_vector(self, slot: IntEnum, default: Any = _REQUIRED) -> tuple[int, ...]:
        """Decode a vector of inline u64 values referenced by this field."""
        position = self._locate(slot, default)
        if position is None:
            return tuple(default)
        start = position + read_u32(self.data, position)
        return decode_long_vector(self.data, start)


def resolve_table(data: bytes, table_position: int, schema: type[IntEnum]) -> Table:
    """Locate a table's vtable and read one field offset per schema slot."""
    soffset = read_i32(data, table_position)
    vtable_position = table_position - soffset
    slot_count = len(schema)
    check_bounds(data, vtable_position, 2 * slot_count)
    offsets = struct.unpack_from(f"<{slot_count}H", data, vtable_position)
    return Table(
        data=data,
        position=table_position,
        vtable_position=vtable_position,
        schema=schema,
        field_offsets=offsets,
    )


def decode_vector(data: bytes, vector_start: int, schema: type[IntEnum],
                  decode_element: Callable[[Table], T]) -> list[T]:
    """Decode a length-prefixed vector of relative table references, in order."""
    count = read_u32(data, vector_start)
    # Reject an oversized count before touching any element.
    check_bounds(data, vector_start + 4, 4 * count)

    elements: list[T] = []
    for i in range(count):
        entry_position = vector_start + 4 + 4 * i
        table_position = entry_position + read_u32(data, entry_position)
        elements.append(decode_element(resolve_table(data, table_position, schema)))
    return elements


def decode_long_vector(data: bytes, start: int) -> tuple[int, ...]:
    """Decode a length-prefixed vector of inline u64 values."""
    count = read_u32(data, start)
    check_bounds(data, start + 4, 8 * count)
    return struct.unpack_from(f"<{count}Q", data, start + 4)


def decode_string(data: bytes, field_position: int) -> str:
    """Follow a string field's relative offset to its length-prefixed UTF-8 bytes.

    Invalid UTF-8 is replaced rather than rejected.
    """
    length_position = field_position + read_u32(data, field_position)
    length = read_u32(data, length_position)
    raw = read_bytes(data, length_position + 4, length)
    return raw.decode("utf-8", errors="replace")
