"""Shared fixtures for soulsparam tests."""

import struct
from pathlib import Path

import pytest

HEADER_SIZE = 64
ENTRY_SIZE = 24


def build_param(records, name=b"TEST_PARAM", version=5, type1=1, type2=2,
                size_override=None, size2_delta=0, count_override=None):
    """Build a synthetic param container from (id, payload) pairs."""
    count = len(records)
    record_size = len(records[0][1]) if records else 0
    total = HEADER_SIZE + count * ENTRY_SIZE + count * record_size
    if size_override is not None:
        total = size_override

    header = struct.pack(
        "<ihhhhii6iii3i",
        total, 0, type1, type2, count if count_override is None else count_override, 0,
        total + size2_delta, 0, 0, 0, 0, 0, 0,
        version, HEADER_SIZE + count * ENTRY_SIZE, 0, 0, 0,
    )
    directory = b""
    offset = HEADER_SIZE + count * ENTRY_SIZE
    for rec_id, payload in records:
        directory += struct.pack("<qqq", rec_id, offset, 0)
        offset += len(payload)
    payloads = b"".join(payload for _, payload in records)
    return header + directory + payloads + name + b"\x00"


def build_schema_xml(defs, param_type="TEST_PARAM_ST", extra=None):
    """Build a PARAMDEF document from field Def strings.

    ``extra`` maps a field index to inner XML placed inside that <Field>.
    """
    extra = extra or {}
    fields = "\n".join(
        f'    <Field Def="{d}">{extra.get(i, "")}</Field>' for i, d in enumerate(defs)
    )
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<PARAMDEF XmlVersion="1">\n'
        f"  <ParamType>{param_type}</ParamType>\n"
        "  <DataVersion>1</DataVersion>\n"
        "  <BigEndian>False</BigEndian>\n"
        "  <Unicode>True</Unicode>\n"
        "  <FormatVersion>203</FormatVersion>\n"
        "  <Fields>\n"
        f"{fields}\n"
        "  </Fields>\n"
        "</PARAMDEF>\n"
    )


# u32 + two u8:4 bit fields sharing one byte + 3 padding bytes = 8 bytes
TEST_DEFS = [
    "u32 hp = 100",
    "u8 low:4",
    "u8 high:4",
    "dummy8 pad[3]",
]


@pytest.fixture
def two_records() -> list[tuple[int, bytes]]:
    return [
        (10, struct.pack("<I", 500) + b"\xb4" + b"\x00\x00\x00"),
        (20, struct.pack("<I", 7) + b"\x21" + b"\x00\x00\x00"),
    ]


@pytest.fixture
def param_bytes(two_records) -> bytes:
    return build_param(two_records)


@pytest.fixture
def paramdex(tmp_path) -> Path:
    """A minimal Paramdex tree with one schema and one name list for DS3."""
    root = tmp_path / "Paramdex"
    defs = root / "DS3" / "Defs"
    names = root / "DS3" / "Names"
    defs.mkdir(parents=True)
    names.mkdir(parents=True)
    (defs / "TEST_PARAM.xml").write_text(
        build_schema_xml(TEST_DEFS, param_type="TEST_PARAM",
                         extra={0: "<DisplayName>Hit Points</DisplayName>"
                                   "<DisplayFormat>%05d</DisplayFormat>"}),
        encoding="utf-8",
    )
    (names / "TestParam.txt").write_text("10 Knight\n20 Hollow\n", encoding="utf-8")
    return root


@pytest.fixture
def param_file(tmp_path, param_bytes) -> Path:
    path = tmp_path / "TestParam.param"
    path.write_bytes(param_bytes)
    return path
