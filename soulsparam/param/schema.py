"""Paramdex-style XML schema ("PARAMDEF") loader.

A schema document looks like::

    <PARAMDEF XmlVersion="1">
      <ParamType>EQUIP_PARAM_WEAPON_ST</ParamType>
      <DataVersion>1</DataVersion>
      <BigEndian>False</BigEndian>
      <Unicode>True</Unicode>
      <FormatVersion>203</FormatVersion>
      <Fields>
        <Field Def="s32 behaviorVariationId">
          <DisplayName>Behavior Variation ID</DisplayName>
          <EditFlags>Wrap Lock</EditFlags>
        </Field>
        ...
      </Fields>
    </PARAMDEF>
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from soulsparam.config import GameVersion, derive_def_path
from soulsparam.param.errors import SchemaError
from soulsparam.param.fields import CARRIER_BITS, EditFlags, FieldDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParamSchema:
    """Ordered field list plus container-level metadata."""
    param_type_name: str
    data_version: int
    format_version: int
    is_big_endian: bool
    is_unicode: bool
    fields: tuple[FieldDescriptor, ...] = ()

    @property
    def byte_size(self) -> int:
        """Bytes one record occupies under this schema."""
        size = 0
        carrier = False
        for f in self.fields:
            if f.is_bitfield:
                if not carrier:
                    size += f.type.size
                    carrier = True
            else:
                size += f.byte_size
                carrier = False
        return size

    def get_field(self, internal_name: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.internal_name == internal_name:
                return f
        return None


def _text(node: ET.Element, tag: str) -> Optional[str]:
    child = node.find(tag)
    if child is None:
        return None
    return child.text or ""


def _required(root: ET.Element, *tags: str) -> str:
    for tag in tags:
        value = _text(root, tag)
        if value is not None:
            return value.strip()
    raise SchemaError(f"Missing <{tags[0]}> in PARAMDEF")


def _parse_bool(text: str, tag: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise SchemaError(f"Invalid boolean {text!r} in <{tag}>")


def _parse_number(text: Optional[str], tag: str, kind=float, index: Optional[int] = None):
    if text is None:
        return kind(0)
    try:
        return kind(text.strip())
    except ValueError:
        raise SchemaError(f"Invalid number {text!r} in <{tag}>", index) from None


def _parse_field(node: ET.Element, index: int) -> FieldDescriptor:
    definition = node.get("Def")
    if definition is None:
        raise SchemaError("Missing Def attribute", index)
    try:
        return FieldDescriptor.from_definition(
            definition,
            display_name=_text(node, "DisplayName"),
            enum_reference=_text(node, "Enum"),
            description=_text(node, "Description"),
            display_format=_text(node, "DisplayFormat"),
            edit_flags=EditFlags.parse(_text(node, "EditFlags")),
            minimum=_parse_number(_text(node, "Minimum"), "Minimum", index=index),
            maximum=_parse_number(_text(node, "Maximum"), "Maximum", index=index),
            increment=_parse_number(_text(node, "Increment"), "Increment", index=index),
            sort_key=_parse_number(_text(node, "SortID"), "SortID", int, index),
        )
    except SchemaError as e:
        if e.field_index is not None:
            raise
        raise SchemaError(str(e), index) from e


def _check_bit_runs(fields: tuple[FieldDescriptor, ...]) -> None:
    """Reject bit runs that do not fit one carrier."""
    run = 0
    for index, f in enumerate(fields):
        if not f.is_bitfield:
            run = 0
            continue
        run += f.bit_width
        if run > CARRIER_BITS:
            raise SchemaError(
                f"Bit field {f.internal_name!r} overruns its {CARRIER_BITS}-bit carrier", index)


def parse_schema(source: str | bytes) -> ParamSchema:
    """Parse a PARAMDEF XML document."""
    try:
        root = ET.fromstring(source)
    except ET.ParseError as e:
        raise SchemaError(f"Invalid schema XML: {e}") from e
    if root.tag != "PARAMDEF":
        raise SchemaError(f"Expected <PARAMDEF> root, found <{root.tag}>")

    fields = tuple(
        _parse_field(node, i) for i, node in enumerate(root.findall("Fields/Field"))
    )
    _check_bit_runs(fields)
    schema = ParamSchema(
        param_type_name=_required(root, "ParamType"),
        data_version=_parse_number(_text(root, "DataVersion"), "DataVersion", int),
        format_version=_parse_number(_required(root, "FormatVersion", "Version"), "FormatVersion", int),
        is_big_endian=_parse_bool(_required(root, "BigEndian"), "BigEndian"),
        is_unicode=_parse_bool(_required(root, "Unicode"), "Unicode"),
        fields=fields,
    )
    logger.debug("schema %s: %d fields, %d bytes",
                 schema.param_type_name, len(fields), schema.byte_size)
    return schema


def load_schema(path: Path) -> ParamSchema:
    """Load a PARAMDEF XML document from disk."""
    return parse_schema(path.read_bytes())


def find_schema(paramdex: Path, game: GameVersion, struct_type_name: str) -> Optional[ParamSchema]:
    """Look up and load the schema for a struct type, or None if there isn't one."""
    path = derive_def_path(paramdex, game, struct_type_name)
    if path is None or not path.exists():
        logger.debug("no schema for %s (%s)", struct_type_name, game.value)
        return None
    return load_schema(path)
