"""Format constants, game variants and Paramdex path derivation."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class GameVersion(Enum):
    DARK_SOULS_2 = "ds2"
    DARK_SOULS_3 = "ds3"
    BLOODBORNE = "bb"
    SEKIRO = "sekiro"
    ELDEN_RING = "er"


# Paramdex keeps one folder per game, named by a short code
GAME_FOLDERS: dict[GameVersion, str] = {
    GameVersion.DARK_SOULS_2: "DS2S",
    GameVersion.DARK_SOULS_3: "DS3",
    GameVersion.BLOODBORNE: "BB",
    GameVersion.SEKIRO: "SDT",
    GameVersion.ELDEN_RING: "ER",
}


def folder_code(game: GameVersion) -> Optional[str]:
    """Return the Paramdex folder code for a game, or None if it has none."""
    return GAME_FOLDERS.get(game)


def derive_def_path(paramdex: Path, game: GameVersion, struct_type_name: str) -> Optional[Path]:
    """Path of the schema document for a struct type: <paramdex>/<code>/Defs/<name>.xml."""
    code = folder_code(game)
    if code is None:
        return None
    return paramdex / code / "Defs" / f"{struct_type_name}.xml"


def derive_names_path(paramdex: Path, game: GameVersion, file_name: str) -> Optional[Path]:
    """Path of the name list for a param file: <paramdex>/<code>/Names/<stem>.txt.

    ``file_name`` may include preceding directories; only its stem is used.
    """
    code = folder_code(game)
    if code is None:
        return None
    return paramdex / code / "Names" / f"{Path(file_name).stem}.txt"


# Container format constants
HEADER_SIZE = 64             # Fixed container header
DIRECTORY_ENTRY_SIZE = 24    # id(8) + data offset(8) + name offset(8)
