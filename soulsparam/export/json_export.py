"""Export decoded records as JSON."""
from __future__ import annotations

import json
from typing import Callable, Optional

from soulsparam.param.codec import DecodedRecord, field_values
from soulsparam.param.schema import ParamSchema


def export_json(decoded: list[DecodedRecord], schema: ParamSchema,
                names: Optional[Callable[[int], Optional[str]]] = None,
                raw: bool = False, show_padding: bool = False) -> str:
    """Export decoded records as JSON string.

    Fields are written as an ordered list, since display names repeat
    (e.g. several "Reserved" fields) and would collide as object keys.
    """
    data = []
    for rec in decoded:
        entry = {
            "id": rec.id,
            "name": names(rec.id) if names else None,
            "fields": [
                {"name": f.internal_name, "display_name": f.display_name, "value": value}
                for f, value in field_values(schema, rec, raw=raw, show_padding=show_padding)
            ],
        }
        data.append(entry)

    return json.dumps(data, indent=2, ensure_ascii=False)
