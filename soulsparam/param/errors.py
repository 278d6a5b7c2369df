"""Exceptions raised while decoding param containers, schemas and values."""
from __future__ import annotations

from typing import Optional


class ParamError(Exception):
    """Base class for every param decoding failure."""


class TruncatedInputError(ParamError):
    """The input ended before a required read could be satisfied."""

    def __init__(self, what: str, offset: int, needed: int, available: int):
        self.what = what
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"Truncated input reading {what} at offset 0x{offset:X}: "
            f"needed {needed} bytes, {available} available"
        )


class MalformedContainerError(ParamError):
    """Header values that cannot describe a supported container."""


class SchemaError(ParamError):
    """A schema document or field definition could not be parsed."""

    def __init__(self, message: str, field_index: Optional[int] = None):
        self.field_index = field_index
        if field_index is not None:
            message = f"Field #{field_index}: {message}"
        super().__init__(message)


class CorruptRecordError(ParamError):
    """A field decode ran past the end of a record's raw data."""

    def __init__(self, message: str, record_id: Optional[int], field_index: int, offset: int):
        self.record_id = record_id
        self.field_index = field_index
        self.offset = offset
        where = f"field #{field_index} at offset 0x{offset:X}"
        if record_id is not None:
            where = f"record {record_id}, {where}"
        super().__init__(f"{message} ({where})")


class FormatError(ParamError):
    """A value could not be rendered with a display format string."""
