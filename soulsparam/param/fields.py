"""Field types, edit flags and the compact field definition parser.

A field definition is one line of the form::

    <type> <name>[:<bits>|[<length>]] [= <default>]

e.g. ``u8 isEnabled:1 = 0``, ``dummy8 pad[3]`` or ``f32 weight = 1.5``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag
from typing import Optional, Union

from soulsparam.param.errors import SchemaError

Scalar = Union[int, float, str]


class FieldType(Enum):
    s8 = "s8"
    u8 = "u8"
    s16 = "s16"
    u16 = "u16"
    s32 = "s32"
    u32 = "u32"
    f32 = "f32"
    dummy8 = "dummy8"    # Padding byte(s)
    fixstr = "fixstr"    # Fixed-width ASCII string
    fixstrW = "fixstrW"  # Fixed-width UTF-16 string

    @property
    def size(self) -> int:
        """Size in bytes of one element of this type."""
        return _SIZES[self]

    @property
    def is_string(self) -> bool:
        return self in (FieldType.fixstr, FieldType.fixstrW)

    @property
    def is_integer(self) -> bool:
        return self in _INT_RANGES

    @property
    def default_display_format(self) -> str:
        if self.is_integer:
            return "%d"
        if self is FieldType.f32:
            return "%f"
        if self.is_string:
            return "%s"
        return ""

    def parse(self, text: str) -> Scalar:
        """Parse a default value written in a schema using this type."""
        if self.is_integer:
            try:
                value = int(text.strip())
            except ValueError:
                raise SchemaError(f"Invalid {self.value} value {text!r}") from None
            lo, hi = _INT_RANGES[self]
            if not lo <= value <= hi:
                raise SchemaError(f"Value {value} out of range for {self.value}")
            return value
        if self is FieldType.f32:
            try:
                return float(text.strip())
            except ValueError:
                raise SchemaError(f"Invalid f32 value {text!r}") from None
        if self.is_string:
            return text
        return 0


_SIZES = {
    FieldType.s8: 1,
    FieldType.u8: 1,
    FieldType.s16: 2,
    FieldType.u16: 2,
    FieldType.s32: 4,
    FieldType.u32: 4,
    FieldType.f32: 4,
    FieldType.dummy8: 1,
    FieldType.fixstr: 1,
    FieldType.fixstrW: 2,
}

_INT_RANGES = {
    FieldType.s8: (-0x80, 0x7F),
    FieldType.u8: (0, 0xFF),
    FieldType.s16: (-0x8000, 0x7FFF),
    FieldType.u16: (0, 0xFFFF),
    FieldType.s32: (-0x80000000, 0x7FFFFFFF),
    FieldType.u32: (0, 0xFFFFFFFF),
}

# Types that may back a run of bit-packed fields
BITFIELD_TYPES = frozenset({FieldType.u8, FieldType.u16, FieldType.u32, FieldType.dummy8})
# Bits available to one run of bit fields
CARRIER_BITS = 32


class EditFlags(Flag):
    NONE = 0
    WRAP = 1    # Value wraps when stepping past min/max
    LOCK = 4    # Value is read-only

    @classmethod
    def parse(cls, text: Optional[str]) -> "EditFlags":
        """Parse a whitespace-separated list of edit flag tokens."""
        flags = cls.NONE
        for token in (text or "").split():
            flag = _EDIT_FLAG_TOKENS.get(token)
            if flag is None:
                raise SchemaError(f"Unrecognized edit flag {token!r}")
            flags |= flag
        return flags


_EDIT_FLAG_TOKENS = {
    "None": EditFlags.NONE,
    "Wrap": EditFlags.WRAP,
    "Lock": EditFlags.LOCK,
}


@dataclass(frozen=True)
class FieldDefinition:
    """The parsed form of one compact definition string."""
    type: FieldType
    name: str
    bit_width: Optional[int] = None
    array_length: Optional[int] = None
    default: Optional[Scalar] = None


def _read_digits(text: str, pos: int) -> tuple[str, int]:
    start = pos
    while pos < len(text) and text[pos].isdigit():
        pos += 1
    return text[start:pos], pos


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def parse_definition(text: str) -> FieldDefinition:
    """Parse a compact field definition such as ``u32 hp:8 = 100``."""
    text = text.strip()
    type_str, _, rest = text.partition(" ")
    try:
        field_type = FieldType(type_str)
    except ValueError:
        raise SchemaError(f"Unrecognized param def type {type_str!r}") from None

    pos = _skip_ws(rest, 0)
    start = pos
    while pos < len(rest) and not rest[pos].isspace() and rest[pos] not in ":[":
        pos += 1
    name = rest[start:pos]
    if not name:
        raise SchemaError(f"Missing field name in def {text!r}")

    bit_width = None
    array_length = None
    if pos < len(rest) and rest[pos] == ":":
        digits, pos = _read_digits(rest, pos + 1)
        if not digits:
            raise SchemaError(f"Expected bit width after ':' in def {text!r}")
        bit_width = int(digits)
    elif pos < len(rest) and rest[pos] == "[":
        digits, pos = _read_digits(rest, pos + 1)
        if not digits:
            raise SchemaError(f"Expected array length after '[' in def {text!r}")
        if pos >= len(rest) or rest[pos] != "]":
            raise SchemaError(f"Expected ']' after array length in def {text!r}")
        pos += 1
        array_length = int(digits)

    default = None
    pos = _skip_ws(rest, pos)
    if pos < len(rest):
        if rest[pos] != "=":
            raise SchemaError(f"Unexpected {rest[pos:]!r} in def {text!r}")
        default = field_type.parse(rest[_skip_ws(rest, pos + 1):])

    if bit_width is not None:
        if field_type not in BITFIELD_TYPES:
            raise SchemaError(f"Invalid field type for bit field: {field_type.value}")
        if bit_width > CARRIER_BITS:
            raise SchemaError(f"Bit width {bit_width} exceeds {CARRIER_BITS} bits in def {text!r}")
    if field_type.is_string and array_length is None:
        raise SchemaError(f"{field_type.value} field {name!r} needs an array length")

    return FieldDefinition(
        type=field_type,
        name=name,
        bit_width=bit_width,
        array_length=array_length,
        default=default,
    )


@dataclass(frozen=True)
class FieldDescriptor:
    """One schema field: decoding layout plus presentation metadata."""
    type: FieldType
    internal_name: str
    bit_width: Optional[int] = None
    array_length: Optional[int] = None
    default_value: Optional[Scalar] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    enum_reference: Optional[str] = None
    display_format: Optional[str] = None
    edit_flags: EditFlags = EditFlags.NONE
    minimum: float = 0.0
    maximum: float = 0.0
    increment: float = 0.0
    sort_key: int = 0

    @classmethod
    def from_definition(cls, text: str, **metadata) -> "FieldDescriptor":
        """Build a descriptor from a def string, defaulting display name and format."""
        d = parse_definition(text)
        if metadata.get("display_name") is None:
            metadata["display_name"] = d.name
        if metadata.get("display_format") is None:
            metadata["display_format"] = d.type.default_display_format
        return cls(
            type=d.type,
            internal_name=d.name,
            bit_width=d.bit_width,
            array_length=d.array_length,
            default_value=d.default,
            **metadata,
        )

    @property
    def is_bitfield(self) -> bool:
        return self.bit_width is not None

    @property
    def is_padding(self) -> bool:
        return self.type is FieldType.dummy8

    @property
    def byte_size(self) -> int:
        """Bytes consumed by a non-bit-packed read of this field."""
        if self.array_length is not None and (self.type.is_string or self.is_padding):
            return self.array_length * self.type.size
        return self.type.size

    def format(self, value) -> str:
        """Render a decoded value with this field's display format."""
        from soulsparam.param.formatter import format_value
        return format_value(value, self.display_format or "")
