"""Export decoded records as CSV."""
from __future__ import annotations

import csv
import io
from typing import Callable, Optional

from soulsparam.param.codec import DecodedRecord, field_items
from soulsparam.param.schema import ParamSchema


def export_csv(decoded: list[DecodedRecord], schema: ParamSchema,
               names: Optional[Callable[[int], Optional[str]]] = None,
               raw: bool = False, show_padding: bool = False) -> str:
    """Export decoded records as CSV string, one column per visible field."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    # Header
    columns = [
        f.display_name or f.internal_name
        for f in schema.fields
        if show_padding or not f.is_padding
    ]
    writer.writerow(["id", "name", *columns])

    for rec in decoded:
        name = names(rec.id) if names else None
        values = [value for _, value in field_items(schema, rec, raw=raw, show_padding=show_padding)]
        writer.writerow([rec.id, name or "", *values])

    return output.getvalue()
