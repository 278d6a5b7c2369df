"""Named profiles pairing a Paramdex checkout with a default game.

Stored as TOML under the click app dir::

    default_profile = "er"

    [profiles.er]
    paramdex = 'D:\\Paramdex'
    game = "er"
"""
from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from soulsparam.config import GameVersion

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_PROFILE_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")

_NO_PARAMDEX = (
    "No Paramdex path provided. Either:\n"
    "  1. Run 'soulsparam init' to set up a profile\n"
    "  2. Pass --paramdex <path> explicitly\n"
    "  3. Pass --profile <name> to use a named profile"
)


@dataclass
class Profile:
    name: str
    paramdex: Path
    game: Optional[GameVersion] = None

    @classmethod
    def from_table(cls, name: str, table: dict) -> "Profile":
        game = table.get("game")
        return cls(name=name, paramdex=Path(table["paramdex"]),
                   game=GameVersion(game) if game else None)

    def to_lines(self) -> list[str]:
        # Literal (single-quoted) string keeps Windows backslashes as-is
        lines = [f"[profiles.{self.name}]", f"paramdex = '{self.paramdex}'"]
        if self.game is not None:
            lines.append(f'game = "{self.game.value}"')
        return lines


@dataclass
class Config:
    default_profile: str | None = None
    profiles: dict[str, Profile] = field(default_factory=dict)


def get_config_path() -> Path:
    """Return the TOML config file path via click.get_app_dir."""
    return Path(click.get_app_dir("soulsparam")) / "config.toml"


def load_config(path: Path | None = None) -> Config:
    """Read the profile file; a missing file is an empty Config."""
    path = path or get_config_path()
    if not path.exists():
        return Config()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    profiles = {}
    for name, table in data.get("profiles", {}).items():
        try:
            profiles[name] = Profile.from_table(name, table)
        except (KeyError, ValueError) as e:
            raise click.UsageError(f"Invalid profile '{name}' in {path}: {e}") from e
    return Config(default_profile=data.get("default_profile"), profiles=profiles)


def save_config(config: Config, path: Path | None = None) -> Path:
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [f'default_profile = "{config.default_profile}"'] if config.default_profile else []
    for profile in config.profiles.values():
        lines += ["", *profile.to_lines()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def validate_profile_name(name: str) -> bool:
    """Profile names become TOML bare keys."""
    return bool(_PROFILE_NAME_RE.match(name))


def resolve_profile(paramdex: Path | None, profile_name: str | None,
                    config_path: Path | None = None) -> Profile:
    """Pick the Paramdex root and game for a command.

    ``--paramdex`` overrides the profile's root but keeps its game. A profile
    named with ``--profile`` must exist; the default profile is optional when
    a root is given explicitly. Raises click.UsageError otherwise, or when the
    chosen root is not a directory.
    """
    config = load_config(config_path)
    name = profile_name or config.default_profile
    profile = config.profiles.get(name) if name else None

    if profile is None and (profile_name or paramdex is None):
        if name is None:
            raise click.UsageError(_NO_PARAMDEX)
        available = ", ".join(config.profiles) or "(none)"
        raise click.UsageError(f"Profile '{name}' not found. Available profiles: {available}")

    if paramdex is not None:
        profile = Profile(name="(cli)", paramdex=paramdex, game=profile.game if profile else None)

    if not profile.paramdex.is_dir():
        raise click.UsageError(
            f"Paramdex directory not found for profile '{profile.name}': {profile.paramdex}\n"
            "Pass --paramdex or run 'soulsparam init' to update the path."
        )
    return profile
