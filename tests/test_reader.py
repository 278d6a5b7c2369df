"""Tests for the param container decoder."""

import io
import struct

import pytest

from conftest import HEADER_SIZE, ENTRY_SIZE, build_param
from soulsparam.param.errors import MalformedContainerError, TruncatedInputError
from soulsparam.param.reader import ParamReader, parse_param, read_param


def test_parse_two_records(param_bytes):
    container = parse_param(param_bytes)

    assert container.struct_type_name == "TEST_PARAM"
    assert container.record_count == 2
    assert container.record_byte_size == 8
    assert container.ids() == [10, 20]
    assert all(len(rec.raw_data) == 8 for rec in container.records)
    assert container.records[0].raw_data[4] == 0xB4


def test_header_fields(param_bytes):
    container = parse_param(param_bytes)

    assert container.format_version == 5
    assert container.type_tag_1 == 1
    assert container.type_tag_2 == 2
    assert container.payload_offset == HEADER_SIZE + 2 * ENTRY_SIZE
    assert len(container.unknowns) == 11


def test_size_invariant(param_bytes):
    c = parse_param(param_bytes)
    declared = min(c.declared_size, c.declared_size_secondary)
    assert c.record_byte_size * c.record_count + ENTRY_SIZE * c.record_count + HEADER_SIZE == declared


def test_smaller_declared_size_wins(two_records):
    # Secondary size is larger; the primary one is authoritative
    data = build_param(two_records, size2_delta=1000)
    assert parse_param(data).record_byte_size == 8


def test_directory_entries_preserved(param_bytes):
    container = parse_param(param_bytes)
    first = container.directory[0]
    assert first.id == 10
    assert first.data_offset == HEADER_SIZE + 2 * ENTRY_SIZE


def test_get_by_id(param_bytes):
    container = parse_param(param_bytes)
    assert container.get(20).raw_data[:4] == struct.pack("<I", 7)
    assert container.get(99) is None


def test_negative_ids():
    data = build_param([(-1, b"\x01\x02"), (2**40, b"\x03\x04")])
    container = parse_param(data)
    assert container.ids() == [-1, 2**40]


def test_read_param_from_stream(param_bytes):
    assert read_param(io.BytesIO(param_bytes)).record_count == 2


def test_param_reader(param_file):
    container = ParamReader(param_file).read()
    assert container.struct_type_name == "TEST_PARAM"


def test_truncated_header():
    with pytest.raises(TruncatedInputError) as exc:
        parse_param(b"\x00" * 10)
    assert exc.value.offset == 0


def test_zero_record_count(two_records):
    data = build_param(two_records, count_override=0)
    with pytest.raises(MalformedContainerError):
        parse_param(data)


def test_negative_record_count(two_records):
    data = build_param(two_records, count_override=-3)
    with pytest.raises(MalformedContainerError):
        parse_param(data)


def test_non_exact_division(two_records):
    # One extra byte cannot be split across two records
    total = HEADER_SIZE + 2 * ENTRY_SIZE + 2 * 8 + 1
    data = build_param(two_records, size_override=total)
    with pytest.raises(MalformedContainerError):
        parse_param(data)


def test_declared_size_smaller_than_directory(two_records):
    data = build_param(two_records, size_override=HEADER_SIZE)
    with pytest.raises(MalformedContainerError):
        parse_param(data)


def test_truncated_payload(param_bytes):
    cut = HEADER_SIZE + 2 * ENTRY_SIZE + 10
    with pytest.raises(TruncatedInputError) as exc:
        parse_param(param_bytes[:cut])
    assert exc.value.what == "record data"


def test_truncated_directory(param_bytes):
    with pytest.raises(TruncatedInputError) as exc:
        parse_param(param_bytes[:HEADER_SIZE + 5])
    assert exc.value.what == "directory"


def test_missing_name_terminator(param_bytes):
    with pytest.raises(TruncatedInputError):
        parse_param(param_bytes[:-1])
