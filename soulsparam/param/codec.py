"""Schema-driven decoding of record payloads into typed values.

Fields are decoded strictly in schema order. A byte cursor advances through
the record; runs of bit-packed fields share one carrier (a u8/u16/u32 read
once when the run starts) and step a bit offset through it instead of
advancing the cursor. Any non-bit field ends the run.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence, Union

from soulsparam.param.errors import CorruptRecordError
from soulsparam.param.fields import CARRIER_BITS, FieldDescriptor, FieldType
from soulsparam.param.records import ParamContainer, ParamRecord
from soulsparam.param.schema import ParamSchema


class ValueKind(Enum):
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    STRING = "string"
    PADDING = "padding"


@dataclass(frozen=True, slots=True)
class DecodedValue:
    """A decoded field value tagged with its kind."""
    kind: ValueKind
    value: Union[int, float, str]

    @classmethod
    def padding(cls) -> "DecodedValue":
        return cls(ValueKind.PADDING, 0)


@dataclass(frozen=True, slots=True)
class DecodedRecord:
    """A record id paired with its decoded values in schema order."""
    id: int
    values: tuple[DecodedValue, ...]


# Scalar formats (little-endian)
_SCALARS: dict[FieldType, tuple[struct.Struct, ValueKind]] = {
    FieldType.s8: (struct.Struct("<b"), ValueKind.SIGNED),
    FieldType.u8: (struct.Struct("<B"), ValueKind.UNSIGNED),
    FieldType.s16: (struct.Struct("<h"), ValueKind.SIGNED),
    FieldType.u16: (struct.Struct("<H"), ValueKind.UNSIGNED),
    FieldType.s32: (struct.Struct("<i"), ValueKind.SIGNED),
    FieldType.u32: (struct.Struct("<I"), ValueKind.UNSIGNED),
    FieldType.f32: (struct.Struct("<f"), ValueKind.FLOAT),
}

# Carrier formats for bit-packed runs
_CARRIERS: dict[FieldType, struct.Struct] = {
    FieldType.u8: struct.Struct("<B"),
    FieldType.dummy8: struct.Struct("<B"),
    FieldType.u16: struct.Struct("<H"),
    FieldType.u32: struct.Struct("<I"),
}

_NARROW_MASKS = {
    FieldType.u8: 0xFF,
    FieldType.dummy8: 0xFF,
    FieldType.u16: 0xFFFF,
}


def extract_bits(carrier: int, bit_offset: int, bit_width: int) -> int:
    """Extract ``bit_width`` bits at ``bit_offset`` from a 32-bit unsigned carrier."""
    shifted = (carrier << (CARRIER_BITS - bit_width - bit_offset)) & 0xFFFFFFFF
    return shifted >> (CARRIER_BITS - bit_width)


def _decode_string(raw: bytes, wide: bool) -> str:
    if wide:
        text = raw.decode("utf-16-le", errors="replace")
    else:
        text = raw.decode("ascii", errors="replace")
    return text.split("\x00", 1)[0]


def decode_fields(fields: Sequence[FieldDescriptor], data: bytes,
                  record_id: Optional[int] = None) -> list[DecodedValue]:
    """Decode one record's bytes against an ordered field list."""
    values: list[DecodedValue] = []
    pos = 0
    carrier: Optional[int] = None
    bit_offset = 0
    data_len = len(data)

    for index, f in enumerate(fields):
        if f.bit_width is not None:
            if carrier is None:
                fmt = _CARRIERS[f.type]
                if pos + fmt.size > data_len:
                    raise CorruptRecordError("Bit field carrier runs past end of record",
                                             record_id, index, pos)
                carrier = fmt.unpack_from(data, pos)[0]
                pos += fmt.size
                bit_offset = 0
            if bit_offset + f.bit_width > CARRIER_BITS:
                raise CorruptRecordError(
                    f"Bit field {f.internal_name!r} overruns its {CARRIER_BITS}-bit carrier",
                    record_id, index, pos,
                )
            bits = extract_bits(carrier, bit_offset, f.bit_width)
            bit_offset += f.bit_width
            mask = _NARROW_MASKS.get(f.type)
            if mask is not None:
                bits &= mask
            values.append(DecodedValue(ValueKind.UNSIGNED, bits))
            continue

        carrier = None
        size = f.byte_size
        if pos + size > data_len:
            raise CorruptRecordError(f"Field {f.internal_name!r} runs past end of record",
                                     record_id, index, pos)

        if f.type in _SCALARS:
            fmt, kind = _SCALARS[f.type]
            values.append(DecodedValue(kind, fmt.unpack_from(data, pos)[0]))
        elif f.type.is_string:
            raw = data[pos:pos + size]
            values.append(DecodedValue(ValueKind.STRING,
                                       _decode_string(raw, f.type is FieldType.fixstrW)))
        else:
            values.append(DecodedValue.padding())
        pos += size

    return values


def decode_record(schema: ParamSchema, record: ParamRecord) -> DecodedRecord:
    """Decode a single record."""
    return DecodedRecord(record.id, tuple(decode_fields(schema.fields, record.raw_data, record.id)))


def decode_container(container: ParamContainer, schema: ParamSchema) -> list[DecodedRecord]:
    """Decode every record; the first corrupt record aborts the whole decode."""
    return [decode_record(schema, rec) for rec in container.records]


def iter_decoded(container: ParamContainer, schema: ParamSchema
                 ) -> Iterator[tuple[ParamRecord, Union[DecodedRecord, CorruptRecordError]]]:
    """Decode records independently, yielding the error in place of a corrupt one."""
    for rec in container.records:
        try:
            yield rec, decode_record(schema, rec)
        except CorruptRecordError as e:
            yield rec, e


def field_values(schema: ParamSchema, decoded: DecodedRecord, raw: bool = False,
                 show_padding: bool = False) -> list[tuple[FieldDescriptor, Union[int, float, str]]]:
    """Pair each visible field with its value; formatted strings unless ``raw``."""
    items = []
    for f, value in zip(schema.fields, decoded.values):
        if f.is_padding and not show_padding:
            continue
        items.append((f, value.value if raw else f.format(value)))
    return items


def field_items(schema: ParamSchema, decoded: DecodedRecord, raw: bool = False,
                show_padding: bool = False) -> list[tuple[str, Union[int, float, str]]]:
    """Pair display names with values. Names may repeat, keep the list order."""
    return [(f.display_name or f.internal_name, value)
            for f, value in field_values(schema, decoded, raw, show_padding)]
