"""CLI entry point for bru2zod."""

import sys
from pathlib import Path

import click

from bru2zod.config import ConfigError, load_config
from bru2zod.generator.assembly import SchemaGenerator
from bru2zod.parser.base import BruFile
from bru2zod.parser.bru import parse_bru_file
from bru2zod.parser.discover import find_bru_files


def _parse_files(paths: list[Path], verbose: bool) -> list[BruFile]:
    """Parse every file, reporting and skipping the ones that fail."""
    parsed = []
    for path in paths:
        try:
            parsed.append(parse_bru_file(path))
        except Exception as e:
            click.echo(f"Error parsing {path}: {e}", err=True)
            continue
        if verbose:
            click.echo(f"  Parsed {path}")
    return parsed


@click.group()
def main():
    """bru2zod: generate Zod schemas and types from Bruno collections."""
    pass


@main.command()
@click.option("-i", "--in", "in_dir", required=True, type=click.Path(path_type=Path), help="Input path to the Bruno collection folder.")
@click.option("-o", "--out", "out_dir", required=True, type=click.Path(path_type=Path), help="Output directory for generated files.")
@click.option("--keep", is_flag=True, help="Keep existing files in the output directory.")
@click.option("--naming", default=None, type=click.Choice(["path", "name"]), help="Derive file and type names from the URL path or the request name.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML settings file.")
@click.option("-v", "--verbose", is_flag=True, help="Report every parsed and written file.")
def generate(in_dir: Path, out_dir: Path, keep: bool, naming: str | None, config_path: Path | None, verbose: bool):
    """Generate one Zod module per documented request."""
    try:
        config = load_config(config_path).with_overrides(keep=keep or None, naming=naming)
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--config")

    in_dir = in_dir.resolve()
    out_dir = out_dir.resolve()

    if not in_dir.exists():
        click.echo(f"Input directory does not exist: {in_dir}", err=True)
        sys.exit(1)

    try:
        paths = find_bru_files(in_dir)
    except OSError as e:
        click.echo(f"Error finding files: {e}", err=True)
        sys.exit(1)

    if not paths:
        click.echo("No .bru files found.")
        return

    if verbose:
        click.echo(f"Found {len(paths)} .bru files in {in_dir}.")
    files = _parse_files(paths, verbose)

    stats = SchemaGenerator(config).generate(files, out_dir, verbose=verbose)
    click.echo(f"Documented {stats.documented_endpoints} endpoints and created {stats.created_schemas} schemas.")


@main.command()
@click.argument("bru_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(bru_path: Path):
    """Print the parsed form of a single .bru file as JSON."""
    click.echo(parse_bru_file(bru_path).model_dump_json(indent=2))
