"""Tests for JSON / CSV export of decoded records."""

import csv
import io
import json

from conftest import TEST_DEFS, build_param, build_schema_xml
from soulsparam.export.csv_export import export_csv
from soulsparam.export.json_export import export_json
from soulsparam.param.codec import decode_container
from soulsparam.param.reader import parse_param
from soulsparam.param.schema import parse_schema

NAMES = {10: "Knight"}


def _decoded(param_bytes):
    schema = parse_schema(build_schema_xml(TEST_DEFS))
    return decode_container(parse_param(param_bytes), schema), schema


def test_export_json(param_bytes):
    decoded, schema = _decoded(param_bytes)
    data = json.loads(export_json(decoded, schema, NAMES.get))

    assert [e["id"] for e in data] == [10, 20]
    assert data[0]["name"] == "Knight"
    assert data[1]["name"] is None
    assert data[0]["fields"] == [
        {"name": "hp", "display_name": "hp", "value": "500"},
        {"name": "low", "display_name": "low", "value": "4"},
        {"name": "high", "display_name": "high", "value": "11"},
    ]


def test_export_json_raw_with_padding(param_bytes):
    decoded, schema = _decoded(param_bytes)
    data = json.loads(export_json(decoded, schema, raw=True, show_padding=True))
    assert [(f["name"], f["value"]) for f in data[1]["fields"]] == [
        ("hp", 7), ("low", 1), ("high", 2), ("pad", 0),
    ]


def test_export_csv(param_bytes):
    decoded, schema = _decoded(param_bytes)
    rows = list(csv.reader(io.StringIO(export_csv(decoded, schema, NAMES.get))))

    assert rows[0] == ["id", "name", "hp", "low", "high"]
    assert rows[1] == ["10", "Knight", "500", "4", "11"]
    assert rows[2] == ["20", "", "7", "1", "2"]


def _reserved_pair():
    reserved = "<DisplayName>Reserved</DisplayName>"
    schema = parse_schema(build_schema_xml(["u8 unk0", "u8 unk1"], extra={0: reserved, 1: reserved}))
    container = parse_param(build_param([(1, b"\x05\x06")]))
    return decode_container(container, schema), schema


def test_export_json_keeps_repeated_display_names():
    decoded, schema = _reserved_pair()
    fields = json.loads(export_json(decoded, schema))[0]["fields"]
    assert fields == [
        {"name": "unk0", "display_name": "Reserved", "value": "5"},
        {"name": "unk1", "display_name": "Reserved", "value": "6"},
    ]


def test_export_csv_keeps_repeated_display_names():
    decoded, schema = _reserved_pair()
    rows = list(csv.reader(io.StringIO(export_csv(decoded, schema))))
    assert rows == [["id", "name", "Reserved", "Reserved"], ["1", "", "5", "6"]]
