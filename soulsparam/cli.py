"""Click CLI for decoding FromSoftware param files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from soulsparam.config import GameVersion
from soulsparam.param.errors import ParamError
from soulsparam.profiles import (
    Config,
    Profile,
    load_config,
    resolve_profile,
    save_config,
    validate_profile_name,
)

_GAME_CHOICE = click.Choice([g.value for g in GameVersion])


class Context:
    """Holds the Paramdex root and game resolved from options / config."""

    def __init__(self, paramdex: Path | None = None, profile: str | None = None,
                 game: str | None = None):
        self._explicit_paramdex = paramdex
        self._profile_name = profile
        self._explicit_game = GameVersion(game) if game else None
        self._profile: Profile | None = None

    def _resolve(self) -> Profile:
        if self._profile is None:
            self._profile = resolve_profile(self._explicit_paramdex, self._profile_name)
        return self._profile

    @property
    def paramdex(self) -> Path:
        return self._resolve().paramdex

    @property
    def game(self) -> GameVersion:
        if self._explicit_game is not None:
            return self._explicit_game
        game = self._resolve().game
        if game is None:
            raise click.UsageError("No game selected. Pass --game or set one in the profile.")
        return game


pass_ctx = click.make_pass_decorator(Context)


def _read_container(path: Path):
    from soulsparam.param.reader import ParamReader
    try:
        return ParamReader(path).read()
    except ParamError as e:
        raise click.ClickException(f"{path.name}: {e}") from e


def _find_schema(ctx: Context, struct_type_name: str):
    from soulsparam.param.schema import find_schema
    try:
        return find_schema(ctx.paramdex, ctx.game, struct_type_name)
    except ParamError as e:
        raise click.ClickException(f"Schema {struct_type_name}: {e}") from e


@click.group()
@click.option(
    "--paramdex", required=False, default=None,
    type=click.Path(exists=False, file_okay=False, path_type=Path),
    help="Path to a Paramdex checkout (optional if profiles configured)",
)
@click.option(
    "--profile", "-p", default=None, type=str,
    help="Named profile to use (from soulsparam init)",
)
@click.option("--game", "-g", default=None, type=_GAME_CHOICE,
              help="Game the param files come from (overrides the profile)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="soulsparam")
@click.pass_context
def cli(ctx, paramdex: Optional[Path], profile: Optional[str], game: Optional[str], verbose: bool):
    """soulsparam - FromSoftware param file decoder.

    Decode .param containers with Paramdex schemas and row names,
    and export typed, formatted values.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj = Context(paramdex=paramdex, profile=profile, game=game)


@cli.command()
def init():
    """Set up config profiles for Paramdex paths (interactive)."""
    config = load_config()

    # Show existing profiles
    if config.profiles:
        click.echo("Current profiles:")
        for name, p in config.profiles.items():
            default_marker = " (default)" if name == config.default_profile else ""
            click.echo(f"  {name}: {p.paramdex} [{p.game.value if p.game else '-'}]{default_marker}")
        click.echo()
        if not click.confirm("Overwrite existing configuration?", default=False):
            click.echo("Aborted.")
            return
        config = Config()

    click.echo("Set up soulsparam profiles. Each profile stores a Paramdex path and a game.\n")

    while True:
        default_name = "default" if not config.profiles else None
        name = click.prompt("Profile name", default=default_name).strip()
        if not validate_profile_name(name):
            click.echo(f"Invalid profile name '{name}'. Use letters, digits, hyphens, underscores.")
            continue

        while True:
            dex_str = click.prompt("Path to Paramdex").strip().strip('"').strip("'")
            dex_path = Path(dex_str)
            if dex_path.is_dir():
                break
            click.echo(f"Directory not found: {dex_path}")

        game = click.prompt("Game", type=_GAME_CHOICE)
        config.profiles[name] = Profile(name=name, paramdex=dex_path, game=GameVersion(game))

        if len(config.profiles) == 1:
            config.default_profile = name
        elif click.confirm(f"Set '{name}' as the default profile?", default=False):
            config.default_profile = name

        if not click.confirm("\nAdd another profile?", default=False):
            break
        click.echo()

    saved_path = save_config(config)
    click.echo(f"\nConfig saved to {saved_path}")


@cli.command()
@click.argument("param_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_ctx
def info(ctx: Context, param_file: Path):
    """Show the header of a param file."""
    container = _read_container(param_file)

    click.echo(f"Param {param_file.name}")
    click.echo(f"  Struct:      {container.struct_type_name}")
    click.echo(f"  Version:     {container.format_version}")
    click.echo(f"  Type tags:   {container.type_tag_1}/{container.type_tag_2}")
    click.echo(f"  Records:     {container.record_count:,}")
    click.echo(f"  Record size: {container.record_byte_size} bytes")

    try:
        schema = _find_schema(ctx, container.struct_type_name)
    except click.UsageError:
        # The header is still reportable without a Paramdex
        click.echo("  Schema:      (no Paramdex configured)")
        return
    if schema is None:
        click.echo("  Schema:      (none)")
        return
    click.echo(f"  Schema:      {schema.param_type_name} ({len(schema.fields)} fields, "
               f"{schema.byte_size} bytes)")
    if schema.byte_size != container.record_byte_size:
        click.echo("  Warning: schema size does not match record size", err=True)


@cli.command()
@click.argument("param_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(["text", "json", "csv"]), default="text")
@click.option("--raw", is_flag=True, help="Output typed values instead of display strings")
@click.option("--show-padding", is_flag=True, help="Include padding fields")
@click.option("--output", "-o", "output_path", type=click.Path(), default=None,
              help="Write output to a file instead of stdout")
@pass_ctx
def dump(ctx: Context, param_file: Path, fmt: str, raw: bool, show_padding: bool,
         output_path: Optional[str]):
    """Decode every record of a param file."""
    from soulsparam.export.csv_export import export_csv
    from soulsparam.export.json_export import export_json
    from soulsparam.names.loader import NameCache, resolve_name
    from soulsparam.param.codec import field_items, iter_decoded

    container = _read_container(param_file)
    schema = _find_schema(ctx, container.struct_type_name)

    cache = NameCache()
    paramdex, game = ctx.paramdex, ctx.game

    def names(record_id: int) -> Optional[str]:
        return resolve_name(cache, record_id, game, param_file.name, paramdex)

    if schema is None:
        click.echo(f"No schema for {container.struct_type_name}; listing records undecoded.", err=True)
        for rec in container.records:
            name = names(rec.id)
            click.echo(f"{rec.id}" + (f" {name}" if name else "") + f" {rec.raw_data.hex()}")
        return

    decoded = []
    for rec, result in iter_decoded(container, schema):
        if isinstance(result, ParamError):
            click.echo(f"Skipping corrupt record: {result}", err=True)
            continue
        decoded.append(result)

    try:
        if fmt == "json":
            output = export_json(decoded, schema, names, raw=raw, show_padding=show_padding)
        elif fmt == "csv":
            output = export_csv(decoded, schema, names, raw=raw, show_padding=show_padding)
        else:
            lines = []
            for rec in decoded:
                name = names(rec.id)
                lines.append(f"[{rec.id}]" + (f" {name}" if name else ""))
                for label, value in field_items(schema, rec, raw=raw, show_padding=show_padding):
                    lines.append(f"  {label:<32} = {value}")
            output = "\n".join(lines)
    except ParamError as e:
        raise click.ClickException(f"{param_file.name}: {e}") from e

    if output_path:
        Path(output_path).write_text(output, encoding="utf-8")
        click.echo(f"{len(decoded):,} records written to {output_path}")
    else:
        click.echo(output)


@cli.command()
@click.argument("struct_type_name")
@pass_ctx
def fields(ctx: Context, struct_type_name: str):
    """List the fields of a schema."""
    schema = _find_schema(ctx, struct_type_name)
    if schema is None:
        click.echo(f"No schema found for {struct_type_name}.")
        return

    click.echo(f"{schema.param_type_name} (format {schema.format_version}, "
               f"data {schema.data_version}, {schema.byte_size} bytes)\n")
    click.echo(f"{'Type':<8}  {'Name':<32}  {'Layout':<8}  {'Default':<10}  {'Display name'}")
    click.echo("-" * 90)
    for f in schema.fields:
        if f.bit_width is not None:
            layout = f":{f.bit_width}"
        elif f.array_length is not None:
            layout = f"[{f.array_length}]"
        else:
            layout = ""
        default = "" if f.default_value is None else str(f.default_value)
        click.echo(f"{f.type.value:<8}  {f.internal_name:<32}  {layout:<8}  {default:<10}  "
                   f"{f.display_name or ''}")


def main():
    cli()


if __name__ == "__main__":
    main()
