"""Tests for vtable resolution and the vector/string decoders."""
import struct
from enum import IntEnum

import pytest

from builders import REF, FlatBuilder
from rmanwad.errors import MissingField, Truncated
from rmanwad.flat.table import (
    decode_long_vector,
    decode_string,
    decode_vector,
    resolve_table,
)


class PointField(IntEnum):
    X = 0
    Y = 1
    LABEL = 2


def _point(table):
    return (table.u32(PointField.X), table.u32(PointField.Y, 0), table.string(PointField.LABEL, ""))


class TestResolveTable:

    def test_field_offsets_resolved_once(self):
        b = FlatBuilder()
        table_pos, fields = b.table([("<I", 7), None, REF])
        b.ref(fields[2], b.string("p"))
        table = resolve_table(b.to_bytes(), table_pos, PointField)

        assert table.field_offsets == (4, 0, 8)
        assert table.vtable_position == table_pos - 6
        assert table.field_position(PointField.X) == table_pos + 4
        assert table.field_position(PointField.Y) is None
        assert _point(table) == (7, 0, "p")

    def test_vtable_after_table(self):
        # Negative soffset: the vtable follows the table.
        data = bytearray()
        table_pos = 0
        data += struct.pack("<i", -12)          # soffset
        data += struct.pack("<II", 11, 22)      # x @4, y @8
        data += struct.pack("<HHH", 4, 8, 0)    # vtable @12
        table = resolve_table(bytes(data), table_pos, PointField)

        assert table.vtable_position == 12
        assert table.u32(PointField.X) == 11
        assert table.u32(PointField.Y) == 22

    def test_absent_field_uses_default_not_table_start(self):
        b = FlatBuilder()
        table_pos, _ = b.table([None, None, None])
        table = resolve_table(b.to_bytes(), table_pos, PointField)
        # Reading at table_pos + 0 would return the soffset (6).
        assert table.u32(PointField.Y, 0) == 0
        assert table.u64(PointField.Y, 0) == 0
        assert table.string(PointField.LABEL, "") == ""

    def test_absent_required_field_is_missing(self):
        b = FlatBuilder()
        table_pos, _ = b.table([None, None, None])
        table = resolve_table(b.to_bytes(), table_pos, PointField)
        with pytest.raises(MissingField) as exc_info:
            table.u32(PointField.X)
        assert exc_info.value.record == "Point"
        assert exc_info.value.field == "x"
        assert exc_info.value.position == table_pos

    def test_vtable_before_buffer_start_is_truncated(self):
        data = struct.pack("<i", 100) + b"\x00" * 8
        with pytest.raises(Truncated):
            resolve_table(data, 0, PointField)

    def test_short_vtable_is_truncated(self):
        # vtable at 4 needs 6 bytes, the buffer ends 2 bytes in
        data = struct.pack("<i", -4) + b"\x00\x00"
        with pytest.raises(Truncated):
            resolve_table(data, 0, PointField)

    def test_field_past_end_is_truncated(self):
        b = FlatBuilder()
        table_pos, _ = b.table([("<I", 1), None, None])
        data = b.to_bytes()[:-2]
        table = resolve_table(data, table_pos, PointField)
        with pytest.raises(Truncated):
            table.u32(PointField.X)


def _vector_of_points(count: int) -> tuple[bytes, int]:
    b = FlatBuilder()
    vec, entries = b.vector_slots(count)
    for i, entry in enumerate(entries):
        table_pos, _ = b.table([("<I", i), ("<I", i * 2), None])
        b.ref(entry, table_pos)
    return b.to_bytes(), vec


class TestDecodeVector:

    @pytest.mark.parametrize("count", [0, 1, 10_000])
    def test_length_and_order(self, count):
        data, vec = _vector_of_points(count)
        points = decode_vector(data, vec, PointField, _point)
        assert len(points) == count
        assert points == [(i, i * 2, "") for i in range(count)]

    def test_oversized_count_fails_before_decoding(self):
        data = struct.pack("<I", 0xFFFFFFFF) + b"\x00" * 16
        seen = []
        with pytest.raises(Truncated):
            decode_vector(data, 0, PointField, seen.append)
        assert seen == []

    def test_entry_pointing_outside_is_truncated(self):
        data = struct.pack("<II", 1, 0x1000)
        with pytest.raises(Truncated):
            decode_vector(data, 0, PointField, _point)

    def test_missing_field_propagates(self):
        b = FlatBuilder()
        vec, entries = b.vector_slots(1)
        table_pos, _ = b.table([None, None, None])
        b.ref(entries[0], table_pos)
        with pytest.raises(MissingField):
            decode_vector(b.to_bytes(), vec, PointField, _point)

    def test_nested_vector_field(self):
        b = FlatBuilder()
        outer_pos, fields = b.table([("<I", 1), None, REF])
        inner, entries = b.vector_slots(2)
        b.ref(fields[2], inner)
        for i, entry in enumerate(entries):
            table_pos, _ = b.table([("<I", 10 + i), None, None])
            b.ref(entry, table_pos)

        table = resolve_table(b.to_bytes(), outer_pos, PointField)
        inner_points = table.vector(PointField.LABEL, PointField, _point)
        assert inner_points == [(10, 0, ""), (11, 0, "")]
        assert table.vector(PointField.Y, PointField, _point, ()) == []


class TestDecodeLongVector:

    @pytest.mark.parametrize("count", [0, 1, 10_000])
    def test_length_and_order(self, count):
        values = [(i * 0x9E3779B97F4A7C15) & 0xFFFFFFFFFFFFFFFF for i in range(count)]
        b = FlatBuilder()
        b.put("<I", 0xFFFF)  # leading junk so start is not 0
        start = b.long_vector(values)
        assert decode_long_vector(b.to_bytes(), start) == tuple(values)

    def test_count_beyond_buffer_is_truncated(self):
        data = struct.pack("<IQ", 2, 1)
        with pytest.raises(Truncated):
            decode_long_vector(data, 0)


class TestDecodeString:

    def test_indirect_string(self):
        b = FlatBuilder()
        field = b.put("<I", 0)
        b.raw(b"\xEE" * 5)
        b.ref(field, b.string("Annie"))
        assert decode_string(b.to_bytes(), field) == "Annie"

    def test_empty_string(self):
        b = FlatBuilder()
        field = b.put("<I", 0)
        b.ref(field, b.string(""))
        assert decode_string(b.to_bytes(), field) == ""

    def test_invalid_utf8_is_replaced(self):
        b = FlatBuilder()
        field = b.put("<I", 0)
        b.ref(field, b.string(b"bad\xff\xfename"))
        assert decode_string(b.to_bytes(), field) == "bad\ufffd\ufffdname"

    def test_length_past_end_is_truncated(self):
        data = struct.pack("<II", 4, 50) + b"short"
        with pytest.raises(Truncated):
            decode_string(data, 0)
