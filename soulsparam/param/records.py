"""ParamContainer, ParamRecord and DirectoryEntry dataclasses."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A 24-byte directory entry preceding the payload blocks."""
    id: int
    data_offset: int    # Preserved, not used for reading
    name_offset: int    # Preserved, not used for reading


@dataclass(frozen=True, slots=True)
class ParamRecord:
    """One row of a param container: an id plus its opaque payload."""
    id: int
    raw_data: bytes


@dataclass(slots=True)
class ParamContainer:
    """A decoded param file: header values, directory and record payloads."""
    struct_type_name: str       # Trailing null-terminated name, selects the schema
    format_version: int
    type_tag_1: int             # Semantics unconfirmed
    type_tag_2: int             # Semantics unconfirmed
    record_byte_size: int
    declared_size: int          # Primary size field (0x00)
    declared_size_secondary: int  # Secondary size field (0x10)
    payload_offset: int         # Header value at 0x30, not used for reading
    unknowns: tuple[int, ...] = ()
    directory: list[DirectoryEntry] = field(default_factory=list)
    records: list[ParamRecord] = field(default_factory=list)

    _index: Optional[dict[int, ParamRecord]] = field(default=None, repr=False, compare=False)

    @property
    def record_count(self) -> int:
        return len(self.records)

    def get(self, record_id: int) -> Optional[ParamRecord]:
        """Get a record by id."""
        if self._index is None:
            self._index = {rec.id: rec for rec in self.records}
        return self._index.get(record_id)

    def ids(self) -> list[int]:
        return [rec.id for rec in self.records]
