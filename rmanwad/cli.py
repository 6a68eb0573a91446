"""Click CLI for inspecting RMAN manifests and WAD archives."""
from __future__ import annotations

import logging
import time
from collections import Counter
from pathlib import Path
from typing import Optional

import click

from rmanwad.config import (
    EXPORT_FORMATS,
    Config,
    get_config_path,
    load_config,
    save_config,
)
from rmanwad.detect import Decoded, decode_any
from rmanwad.errors import DecodeError
from rmanwad.rman.records import RmanFile
from rmanwad.wad.hashes import load_hash_table
from rmanwad.wad.records import ContentV2, WadFile


class Context:
    """Holds the config file location; the config itself loads on first use."""

    def __init__(self, config_path: Path | None = None):
        self._config_path = config_path
        self._config: Config | None = None

    @property
    def config_path(self) -> Path:
        return self._config_path or get_config_path()

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = load_config(self._config_path)
        return self._config

    def hash_names(self) -> dict[int, str]:
        return load_hash_table(self.config.hash_tables)


pass_ctx = click.make_pass_decorator(Context)

_INPUT = click.Path(exists=True, dir_okay=False, path_type=Path)


def _decode_path(path: Path) -> Decoded:
    """Read and decode a file, turning decode and I/O errors into CLI errors."""
    t0 = time.perf_counter()
    try:
        tree = decode_any(path.read_bytes())
    except DecodeError as exc:
        raise click.ClickException(f"{path.name}: {exc}") from exc
    except OSError as exc:
        raise click.ClickException(f"Cannot read {path}: {exc}") from exc
    logging.getLogger(__name__).debug("Decoded %s in %.2fs", path.name, time.perf_counter() - t0)
    return tree


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log decoder progress to stderr")
@click.option(
    "--config", "config_path", default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: per-user rmanwad/config.toml)",
)
@click.version_option(package_name="rmanwad")
@click.pass_context
def cli(ctx, verbose: bool, config_path: Optional[Path]):
    """rmanwad - RMAN manifest and WAD archive inspector.

    Decode release manifests (bundles, chunks, files, directories) and WAD
    archive tables of contents, and export them as JSON or CSV.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj = Context(config_path=config_path)


@cli.command()
@pass_ctx
def init(ctx: Context):
    """Set up the config file (interactive)."""
    path = ctx.config_path
    if path.exists():
        click.echo(f"Existing config: {path}")
        if not click.confirm("Overwrite existing configuration?", default=False):
            click.echo("Aborted.")
            return

    config = Config()
    config.default_format = click.prompt(
        "Default export format", type=click.Choice(EXPORT_FORMATS), default="json",
    )
    config.json_indent = click.prompt("JSON indent", type=click.IntRange(min=0), default=2)

    click.echo("\nHash tables map WAD path hashes to names (e.g. hashes.game.txt).")
    while click.confirm("Add a hash table?", default=not config.hash_tables):
        table_str = click.prompt("Path to hash table").strip().strip('"').strip("'")
        table_path = Path(table_str)
        if not table_path.is_file():
            click.echo(f"File not found: {table_path}")
            continue
        config.hash_tables.append(table_path)

    saved_path = save_config(config, path)
    click.echo(f"\nConfig saved to {saved_path}")


@cli.command()
@click.argument("path", type=_INPUT)
def info(path: Path):
    """Show the header and entry counts of a manifest or archive."""
    tree = _decode_path(path)

    if isinstance(tree, RmanFile):
        h = tree.header
        body = tree.body
        click.echo(f"RMAN v{h.major}.{h.minor}  manifest 0x{h.manifest_id:016X}")
        click.echo(f"Signature type: {h.signature_type}")
        click.echo(f"Body: {h.length:,} bytes at {h.offset} "
                   f"({h.decompressed_length:,} decompressed)")
        chunk_count = sum(len(b.chunks) for b in body.bundles)
        click.echo(f"\n{'Bundles':<12} {len(body.bundles):>10,}")
        click.echo(f"{'Chunks':<12} {chunk_count:>10,}")
        click.echo(f"{'Languages':<12} {len(body.languages):>10,}")
        click.echo(f"{'Files':<12} {len(body.files):>10,}")
        click.echo(f"{'Directories':<12} {len(body.directories):>10,}")
        if body.languages:
            names = ", ".join(f"{lang.name} ({lang.id})" for lang in body.languages)
            click.echo(f"\nLanguages: {names}")
        return

    h = tree.header
    click.echo(f"WAD v{h.major}.{h.minor}  {h.file_count:,} entries")
    checksum = getattr(h.version, "file_checksum", None)
    if checksum is not None:
        click.echo(f"Checksum: 0x{checksum:016X}")

    counts = Counter(c.compression_type.name for c in tree.contents)
    duplicates = sum(
        1 for c in tree.contents
        if isinstance(c.version, ContentV2) and c.version.is_duplicate
    )
    click.echo(f"\n{'Compression':<12} {'Count':>10}")
    click.echo("-" * 23)
    for name, count in counts.most_common():
        click.echo(f"{name:<12} {count:>10,}")
    if duplicates:
        click.echo(f"\nDuplicates: {duplicates:,}")


@cli.command()
@click.argument("path", type=_INPUT)
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default=None,
              help="Output format (default: from config, else json)")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@pass_ctx
def dump(ctx: Context, path: Path, fmt: Optional[str], output: Optional[str]):
    """Export the decoded tree as JSON, or a file listing as CSV."""
    tree = _decode_path(path)
    fmt = fmt or ctx.config.default_format

    if fmt == "csv":
        from rmanwad.export.csv_export import export_csv
        names = ctx.hash_names() if isinstance(tree, WadFile) else None
        try:
            data = export_csv(tree, names)
        except ValueError as exc:
            # Broken directory tree in the manifest
            raise click.ClickException(str(exc)) from exc
    else:
        from rmanwad.export.json_export import export_json
        data = export_json(tree, indent=ctx.config.json_indent)

    if output:
        Path(output).write_text(data, encoding="utf-8")
        click.echo(f"Exported to {output}")
    else:
        click.echo(data)


@cli.command("files")
@click.argument("path", type=_INPUT)
@click.option("--find", "fragment", default=None, help="Only paths containing this (case-insensitive)")
@pass_ctx
def list_files(ctx: Context, path: Path, fragment: Optional[str]):
    """List manifest files with their directories, or archive entries by name."""
    tree = _decode_path(path)
    fragment_lower = fragment.lower() if fragment else None

    if isinstance(tree, RmanFile):
        try:
            entries = tree.find_all(fragment) if fragment else list(tree.body.files)
            rows = [(tree.file_path(e), e.size) for e in entries]
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
    else:
        names = ctx.hash_names()
        rows = []
        for content in tree.contents:
            name = names.get(content.hash, content.hash_hex)
            if fragment_lower is None or fragment_lower in name.lower():
                rows.append((name, content.uncompressed_size))

    if not rows:
        click.echo("No matching files.")
        return

    for name, size in rows:
        click.echo(f"{size:>12,}  {name}")
    click.echo(f"\n{len(rows):,} file(s)")
