"""Low-level parser for param containers (header, directory, payloads, type name)."""
from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import BinaryIO

from soulsparam.config import DIRECTORY_ENTRY_SIZE, HEADER_SIZE
from soulsparam.param.errors import MalformedContainerError, TruncatedInputError
from soulsparam.param.records import DirectoryEntry, ParamContainer, ParamRecord

logger = logging.getLogger(__name__)


# Struct formats (little-endian)
_HEADER_FMT = struct.Struct("<ihhhhii6iii3i")  # size(4) + unk(2) + type1(2) + type2(2) + count(2) + unk(4) + size2(4) + 6 unk(24) + version(4) + data offset(4) + 3 unk(12)
_ENTRY_FMT = struct.Struct("<qqq")            # id(8) + data offset(8) + name offset(8)


def _require(data: bytes, pos: int, size: int, what: str) -> None:
    if pos + size > len(data):
        raise TruncatedInputError(what, pos, size, max(len(data) - pos, 0))


def parse_param(data: bytes) -> ParamContainer:
    """Parse a complete param container held in memory."""
    _require(data, 0, HEADER_SIZE, "header")
    (
        declared_size, unk_04, type_tag_1, type_tag_2, count, unk_0c,
        declared_size_2, unk_14, unk_18, unk_1c, unk_20, unk_24, unk_28,
        version, payload_offset, unk_34, unk_38, unk_3c,
    ) = _HEADER_FMT.unpack_from(data, 0)

    if count <= 0:
        raise MalformedContainerError(f"Invalid record count {count}")

    # The size is stored twice; the smaller value is authoritative
    total = min(declared_size, declared_size_2)
    payload_total = total - HEADER_SIZE - count * DIRECTORY_ENTRY_SIZE
    record_size, remainder = divmod(payload_total, count)
    if payload_total < 0 or remainder:
        raise MalformedContainerError(
            f"Unsupported layout: declared size {total} does not split into "
            f"{count} records (header {HEADER_SIZE}, directory {count} x {DIRECTORY_ENTRY_SIZE})"
        )

    logger.debug(
        "param header: version=%d types=%d/%d count=%d record_size=%d",
        version, type_tag_1, type_tag_2, count, record_size,
    )

    pos = HEADER_SIZE
    _require(data, pos, count * DIRECTORY_ENTRY_SIZE, "directory")
    directory = [
        DirectoryEntry(*_ENTRY_FMT.unpack_from(data, pos + i * DIRECTORY_ENTRY_SIZE))
        for i in range(count)
    ]
    pos += count * DIRECTORY_ENTRY_SIZE

    # Payloads are assumed contiguous and uniform; directory offsets are not consulted
    _require(data, pos, count * record_size, "record data")
    records = []
    for entry in directory:
        records.append(ParamRecord(id=entry.id, raw_data=data[pos:pos + record_size]))
        pos += record_size

    end = data.find(b"\x00", pos)
    if end == -1:
        raise TruncatedInputError("struct type name terminator", len(data), 1, 0)
    struct_type_name = data[pos:end].decode("ascii", errors="replace")

    return ParamContainer(
        struct_type_name=struct_type_name,
        format_version=version,
        type_tag_1=type_tag_1,
        type_tag_2=type_tag_2,
        record_byte_size=record_size,
        declared_size=declared_size,
        declared_size_secondary=declared_size_2,
        payload_offset=payload_offset,
        unknowns=(unk_04, unk_0c, unk_14, unk_18, unk_1c, unk_20, unk_24, unk_28,
                  unk_34, unk_38, unk_3c),
        directory=directory,
        records=records,
    )


def read_param(stream: BinaryIO) -> ParamContainer:
    """Read the remainder of a binary stream and parse it as a container."""
    return parse_param(stream.read())


class ParamReader:
    """Parser for .param files on disk."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> ParamContainer:
        with open(self.path, "rb") as f:
            return read_param(f)


def main():
    """Quick test: parse a param file and print its header and first ids."""
    import sys
    if len(sys.argv) < 2:
        print("Usage: python -m soulsparam.param.reader <path/to/file.param>")
        sys.exit(1)

    path = Path(sys.argv[1])
    container = ParamReader(path).read()

    print(f"{path.name}: {container.struct_type_name}")
    print(f"  version:     {container.format_version}")
    print(f"  types:       {container.type_tag_1}/{container.type_tag_2}")
    print(f"  records:     {container.record_count:,} x {container.record_byte_size} bytes")
    print("\nFirst ids:")
    for rec in container.records[:10]:
        print(f"  {rec.id}")


if __name__ == "__main__":
    main()
