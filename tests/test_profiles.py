"""Tests for TOML config profiles."""

from pathlib import Path

import click
import pytest

from soulsparam.config import GameVersion
from soulsparam.profiles import (
    Config, Profile, load_config, resolve_profile, save_config, validate_profile_name,
)


def test_missing_config_is_empty(tmp_path):
    config = load_config(tmp_path / "config.toml")
    assert config.default_profile is None
    assert config.profiles == {}


def test_round_trip(tmp_path):
    path = tmp_path / "config.toml"
    config = Config(default_profile="ds3", profiles={
        "ds3": Profile(name="ds3", paramdex=tmp_path / "dex", game=GameVersion.DARK_SOULS_3),
        "any": Profile(name="any", paramdex=tmp_path / "dex2"),
    })
    save_config(config, path)

    loaded = load_config(path)
    assert loaded.default_profile == "ds3"
    assert loaded.profiles["ds3"].game is GameVersion.DARK_SOULS_3
    assert loaded.profiles["ds3"].paramdex == tmp_path / "dex"
    assert loaded.profiles["any"].game is None


def test_invalid_game_in_config(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[profiles.x]\nparamdex = '/tmp'\ngame = \"ds9\"\n", encoding="utf-8")
    with pytest.raises(click.UsageError):
        load_config(path)


def test_validate_profile_name():
    assert validate_profile_name("elden-ring_1")
    assert not validate_profile_name("bad name")


def test_resolve_explicit_paramdex(paramdex, tmp_path):
    profile = resolve_profile(paramdex, None, tmp_path / "none.toml")
    assert profile.paramdex == paramdex
    assert profile.game is None


def test_resolve_explicit_keeps_profile_game(paramdex, tmp_path):
    path = tmp_path / "config.toml"
    save_config(Config(default_profile="main", profiles={
        "main": Profile(name="main", paramdex=tmp_path / "elsewhere", game=GameVersion.SEKIRO),
    }), path)
    assert resolve_profile(paramdex, None, path).game is GameVersion.SEKIRO


def test_resolve_default_profile(paramdex, tmp_path):
    path = tmp_path / "config.toml"
    save_config(Config(default_profile="main", profiles={
        "main": Profile(name="main", paramdex=paramdex, game=GameVersion.DARK_SOULS_3),
    }), path)
    assert resolve_profile(None, None, path).paramdex == paramdex


def test_resolve_nothing_configured(tmp_path):
    with pytest.raises(click.UsageError, match="No Paramdex path"):
        resolve_profile(None, None, tmp_path / "none.toml")


def test_resolve_unknown_profile(tmp_path):
    with pytest.raises(click.UsageError, match="not found"):
        resolve_profile(None, "ghost", tmp_path / "none.toml")


def test_resolve_missing_directory(tmp_path):
    with pytest.raises(click.UsageError):
        resolve_profile(tmp_path / "missing", None, tmp_path / "none.toml")


def test_resolve_explicit_paramdex_with_unknown_profile(paramdex, tmp_path):
    with pytest.raises(click.UsageError, match="Profile 'ghost' not found"):
        resolve_profile(paramdex, "ghost", tmp_path / "none.toml")


def test_resolve_explicit_paramdex_ignores_dangling_default(paramdex, tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('default_profile = "gone"\n', encoding="utf-8")
    profile = resolve_profile(paramdex, None, path)
    assert profile.paramdex == paramdex
    assert profile.game is None


def test_resolve_profile_directory_missing(tmp_path):
    path = tmp_path / "config.toml"
    save_config(Config(default_profile="main", profiles={
        "main": Profile(name="main", paramdex=tmp_path / "moved"),
    }), path)
    with pytest.raises(click.UsageError, match="for profile 'main'"):
        resolve_profile(None, None, path)


def test_saved_file_layout(tmp_path):
    path = tmp_path / "config.toml"
    save_config(Config(default_profile="er", profiles={
        "er": Profile(name="er", paramdex=Path("C:\\Paramdex"), game=GameVersion.ELDEN_RING),
    }), path)
    assert path.read_text(encoding="utf-8") == (
        'default_profile = "er"\n'
        "\n"
        "[profiles.er]\n"
        "paramdex = 'C:\\Paramdex'\n"
        'game = "er"\n'
    )
    assert load_config(path).profiles["er"].paramdex == Path("C:\\Paramdex")
