# inistore/cli.py

import json
import os
import re
import fnmatch
import click

from .exceptions import ErrorKind, GetError, MissingMandatoryConfig, ParseError
from .loader import INI_EXTENSIONS, Config
from .parser import read_file
from .store import Store
from .utils import DEFAULT_SECTION, join_key, normalize
from .writer import dumps, write_file

GETTERS = {
    "str": "get_string",
    "int": "get_int",
    "float": "get_float",
    "bool": "get_bool",
}

def _match(pattern: str, text: str, ignore_case: bool = False) -> bool:
    """
    Try glob first, then regex, then exact match.
      - Glob if pattern contains *, ?, [ or ]
      - Regex if pattern contains any of . + ^ $ ( ) { } | \
      - Exact otherwise
    Honors ignore_case by lowercasing both pattern & text.
    """
    if ignore_case:
        pattern = pattern.lower()
        text = text.lower()

    # 1) Glob
    if any(c in pattern for c in "*?[]"):
        return fnmatch.fnmatch(text, pattern)

    # 2) Regex
    if any(c in pattern for c in ".+^$(){}|\\"):
        flags = re.IGNORECASE if ignore_case else 0
        return re.search(pattern, text, flags) is not None

    # 3) Exact
    return pattern == text

def _flatten(store: Store) -> dict:
    """Flatten a store into { 'section.option': raw_value, … }."""
    return {
        join_key(section, option): value
        for section, options in store.items()
        for option, value in options.items()
    }

def _parse_overrides(overrides: str) -> dict:
    """Parse `section.option:value,…` pairs into a dict."""
    overrides_dict = {}
    for pair in overrides.split(","):
        if ":" in pair:
            k, raw = pair.split(":", 1)
            overrides_dict[k.strip()] = raw.strip()
    return overrides_dict

def _set_in_mapping(data: dict, section: str, option: str, value: str):
    """
    Set OPTION in SECTION of a JSON/TOML document, reusing existing keys
    case-insensitively. The default section is the document's top level.
    """
    if normalize(section) == DEFAULT_SECTION:
        table = data
    else:
        table = next((v for k, v in data.items()
                      if normalize(k) == normalize(section) and isinstance(v, dict)), None)
        if table is None:
            table = data[section] = {}
    key = next((k for k in table if normalize(k) == normalize(option)), option)
    table[key] = value

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-c", "--config",    "file_path",  help="INI/JSON/TOML file to load")
@click.option("-p", "--prefix",    help="Env-var prefix for overrides")
@click.option("--overrides",       help="Comma-sep `section.option:value` pairs")
@click.option("--defaults",        help="Path to an INI file of defaults (optional)")
@click.option("--mandatory",       help="Comma-sep list of mandatory section.option keys")
@click.pass_context
def cli(ctx, file_path, prefix, overrides, defaults, mandatory):
    """
    inistore CLI: query & edit INI configs by section and option.

    Load a file (`-c app.ini`), then run subcommands:
      • get       SECTION OPTION [--raw] [--type str|int|float|bool]
      • exists    SECTION [OPTION]
      • sections
      • options   SECTION
      • set       SECTION OPTION VALUE
      • search    [--key PAT] [--val PAT] [-i]
      • dump
      • convert   [--to ini|json|toml] [--out FILE]
    """
    try:
        defaults_dict = read_file(defaults, store_cls=Store).as_dict() if defaults else {}
        cfg = Config(
            defaults=defaults_dict,
            file_path=file_path,
            prefix=prefix,
            overrides_dict=_parse_overrides(overrides) if overrides else {},
            mandatory=[k.strip() for k in mandatory.split(",")] if mandatory else [],
        )
    except (MissingMandatoryConfig, ParseError, RuntimeError, FileNotFoundError) as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        ctx.exit(1)

    ctx.obj = {
        "cfg": cfg,
        "file_path": file_path,
    }

@cli.command()
@click.argument("section")
@click.argument("option")
@click.option("--raw", is_flag=True, help="Do not unfold %(name)s references")
@click.option("--type", "type_", type=click.Choice(list(GETTERS)), default="str",
              help="Convert the value before printing")
@click.pass_context
def get(ctx, section, option, raw, type_):
    """Print the value of OPTION in SECTION."""
    cfg = ctx.obj["cfg"]
    try:
        if raw:
            val = cfg.get_raw_string(section, option)
        else:
            val = getattr(cfg, GETTERS[type_])(section, option)
    except GetError as e:
        colour = "red" if e.kind is ErrorKind.MAX_DEPTH_REACHED else "yellow"
        click.secho(f"Error: {e}", fg=colour, err=True)
        ctx.exit(1)
    if isinstance(val, bool):
        val = "true" if val else "false"
    click.echo(val)

@cli.command()
@click.argument("section")
@click.argument("option", required=False)
@click.pass_context
def exists(ctx, section, option):
    """Exit 0 if SECTION (or OPTION within it) exists, 1 otherwise."""
    cfg = ctx.obj["cfg"]
    found = cfg.has_option(section, option) if option else cfg.has_section(section)
    click.echo("true" if found else "false")
    ctx.exit(0 if found else 1)

@cli.command()
@click.pass_context
def sections(ctx):
    """List section names, one per line."""
    for name in ctx.obj["cfg"].get_sections():
        click.echo(name)

@cli.command()
@click.argument("section")
@click.pass_context
def options(ctx, section):
    """List options visible from SECTION (including default ones)."""
    try:
        names = ctx.obj["cfg"].get_options(section)
    except GetError as e:
        click.secho(f"Error: {e}", fg="yellow", err=True)
        ctx.exit(1)
    for name in names:
        click.echo(name)

@cli.command(name="set")
@click.argument("section")
@click.argument("option")
@click.argument("value")
@click.pass_context
def set_(ctx, section, option, value):
    """
    Set OPTION in SECTION to VALUE in the source file.
    Writes back to disk in the file's own format (INI, JSON or TOML);
    comments in the file are not kept.
    """
    fp = ctx.obj["file_path"]
    if not fp:
        click.secho("Error: --config must be provided for `set`", fg="red", err=True)
        ctx.exit(1)

    # Re-read the file alone so defaults/env/overrides are not written back.
    ext = os.path.splitext(fp)[1].lower()
    try:
        if ext in INI_EXTENSIONS:
            store = read_file(fp, store_cls=Store)
            store.add_option(section, option, value)
            write_file(store, fp)
        elif ext in (".json", ".toml"):
            with open(fp, "r") as f:
                if ext == ".toml":
                    import toml as _toml
                    data = _toml.load(f)
                else:
                    data = json.load(f)
            _set_in_mapping(data, section, option, value)
            with open(fp, "w") as f:
                if ext == ".toml":
                    import toml as _toml
                    f.write(_toml.dumps(data))
                else:
                    json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config file type: {ext}")
    except ValueError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        ctx.exit(1)

    click.secho(f"Set [{section.lower()}] {option.lower()} = {value!r} in {fp}", fg="green")

@cli.command()
@click.option("--key", "key_pat",    help="Pattern for section.option keys (regex/glob/plain)")
@click.option("--val", "val_pat",    help="Pattern for raw values (regex/glob/plain)")
@click.option("-i", "--ignore-case", is_flag=True,
              help="Make key/value matching case-insensitive")
@click.pass_context
def search(ctx, key_pat, val_pat, ignore_case):
    """
    Search for keys/values matching patterns.
    At least one of --key or --val must be provided.
    """
    if not (key_pat or val_pat):
        click.secho("Error: supply --key or --val", fg="red", err=True)
        ctx.exit(1)

    flat = _flatten(ctx.obj["cfg"])
    found = {}
    for k, v in flat.items():
        ks = _match(key_pat, k, ignore_case) if key_pat else True
        vs = _match(val_pat, v, ignore_case) if val_pat else True
        if ks and vs:
            found[k] = v

    if not found:
        click.echo("No matches")
        ctx.exit(1)

    click.echo(json.dumps(found, indent=2))

@cli.command()
@click.pass_context
def dump(ctx):
    """Pretty-print the raw store as JSON."""
    click.echo(json.dumps(ctx.obj["cfg"].as_dict(), indent=2))

@cli.command()
@click.option("--to", "fmt", type=click.Choice(["ini", "json", "toml"]), default="ini",
              help="Format to convert to")
@click.option("--out", "out_file", help="Write to file (instead of stdout)")
@click.pass_context
def convert(ctx, fmt, out_file):
    """
    Convert the loaded config to INI, JSON or TOML (raw, un-unfolded values).
    """
    cfg = ctx.obj["cfg"]
    if fmt == "toml":
        import toml as _toml
        text = _toml.dumps(cfg.as_dict())
    elif fmt == "json":
        text = json.dumps(cfg.as_dict(), indent=2)
    else:
        try:
            text = dumps(cfg)
        except ValueError as e:
            click.secho(f"Error: {e}", fg="red", err=True)
            ctx.exit(1)

    if out_file:
        with open(out_file, "w") as f:
            f.write(text)
        click.secho(f"Wrote {fmt.upper()} to {out_file}", fg="green")
    else:
        click.echo(text)
