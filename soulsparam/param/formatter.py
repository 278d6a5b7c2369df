"""C printf-compatible rendering of decoded values.

Display formats come from the schema and use C conventions (``%d``,
``%05d``, ``%.3f``, ``%s``...). A format string holds literal text and at
most one conversion, which receives the value the way a C varargs call
would: integers are promoted to a 32-bit ``int`` and reinterpreted by the
conversion (``%d`` signed, ``%u``/``%x`` unsigned), floats are passed as
doubles.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional, Union

from soulsparam.param.codec import DecodedValue, ValueKind
from soulsparam.param.errors import FormatError

# %[flags][width][.precision][length]conversion
_SPEC_RE = re.compile(
    r"%(?P<flags>[-+ #0]*)(?P<width>\*|\d+)?(?:\.(?P<precision>\*|\d*))?"
    r"(?P<length>hh|h|ll|l)?(?P<conv>.?)",
    re.DOTALL,
)

_INT_CONVERSIONS = frozenset("diuxX")
_FLOAT_CONVERSIONS = frozenset("fF")

_LENGTH_BITS = {"hh": 8, "h": 16, None: 32, "l": 32, "ll": 64}


@dataclass(frozen=True)
class ConversionSpec:
    """One parsed ``%`` conversion."""
    flags: str
    width: Optional[int]
    precision: Optional[int]
    length: Optional[str]
    conversion: str

    def to_python(self, conversion: str) -> str:
        spec = "%" + self.flags
        if self.width is not None:
            spec += str(self.width)
        if self.precision is not None:
            spec += f".{self.precision}"
        return spec + conversion


def parse_format(fmt: str) -> list[Union[str, ConversionSpec]]:
    """Split a format string into literal text and conversion specs."""
    parts: list[Union[str, ConversionSpec]] = []
    literal = []
    pos = 0
    while pos < len(fmt):
        ch = fmt[pos]
        if ch != "%":
            literal.append(ch)
            pos += 1
            continue
        if fmt.startswith("%%", pos):
            literal.append("%")
            pos += 2
            continue
        m = _SPEC_RE.match(fmt, pos)
        conv = m.group("conv")
        if not conv:
            raise FormatError(f"Incomplete conversion at end of format {fmt!r}")
        if m.group("width") == "*" or m.group("precision") == "*":
            raise FormatError(f"'*' width/precision is not supported in {fmt!r}")
        if conv not in _INT_CONVERSIONS and conv not in _FLOAT_CONVERSIONS and conv != "s":
            raise FormatError(f"Unsupported conversion '%{conv}' in {fmt!r}")
        if literal:
            parts.append("".join(literal))
            literal = []
        width = m.group("width")
        precision = m.group("precision")
        parts.append(ConversionSpec(
            flags=m.group("flags"),
            width=int(width) if width else None,
            # "%.f" means precision 0, as in C
            precision=int(precision or 0) if precision is not None else None,
            length=m.group("length"),
            conversion=conv,
        ))
        pos = m.end()
    if literal:
        parts.append("".join(literal))
    return parts


def _c_int(value: int, bits: int, signed: bool) -> int:
    """Reinterpret an integer as a C integer of the given width."""
    mask = (1 << bits) - 1
    value &= mask
    if signed and value >> (bits - 1):
        value -= 1 << bits
    return value


def _render_int(spec: ConversionSpec, value: int) -> str:
    conv = spec.conversion
    bits = _LENGTH_BITS[spec.length]
    flags = spec.flags
    if conv in "di":
        n = _c_int(value, bits, signed=True)
    else:
        # '+' and ' ' only apply to signed conversions
        n = _c_int(value, bits, signed=False)
        flags = flags.replace("+", "").replace(" ", "")
    if spec.precision is not None:
        # A precision disables zero padding
        flags = flags.replace("0", "")
    if n == 0:
        flags = flags.replace("#", "")
        if spec.precision == 0:
            # Zero printed with zero precision has no digits, only sign and padding
            sign = "+" if "+" in flags else " " if " " in flags else ""
            pad = ConversionSpec("-" if "-" in flags else "", spec.width, None, None, "s")
            return pad.to_python("s") % sign
    spec = replace(spec, flags=flags)
    return spec.to_python("d" if conv in "diu" else conv) % n


def _render(spec: ConversionSpec, value: DecodedValue) -> str:
    conv = spec.conversion
    kind = value.kind

    if kind in (ValueKind.SIGNED, ValueKind.UNSIGNED, ValueKind.PADDING):
        if conv not in _INT_CONVERSIONS:
            raise FormatError(f"Cannot format integer {value.value} with '%{conv}'")
        return _render_int(spec, value.value)

    if kind is ValueKind.FLOAT:
        if conv not in _FLOAT_CONVERSIONS:
            raise FormatError(f"Cannot format float {value.value} with '%{conv}'")
        return spec.to_python(conv) % value.value

    if kind is ValueKind.STRING:
        if conv != "s":
            raise FormatError(f"Cannot format string {value.value!r} with '%{conv}'")
        return spec.to_python("s") % value.value

    raise FormatError(f"Unknown value kind {kind}")


def format_value(value: DecodedValue, fmt: str) -> str:
    """Render a decoded value with a C-style display format."""
    parts = parse_format(fmt)
    specs = [p for p in parts if isinstance(p, ConversionSpec)]
    if len(specs) > 1:
        raise FormatError(f"Format {fmt!r} has {len(specs)} conversions, expected at most one")
    return "".join(p if isinstance(p, str) else _render(p, value) for p in parts)
