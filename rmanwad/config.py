"""User configuration: default export format and WAD hash tables."""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import click

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

EXPORT_FORMATS = ("json", "csv")


@dataclass
class Config:
    default_format: str = "json"
    json_indent: int = 2
    hash_tables: list[Path] = field(default_factory=list)


def get_config_path() -> Path:
    """Return the TOML config file path via click.get_app_dir."""
    return Path(click.get_app_dir("rmanwad")) / "config.toml"


def validate_format(fmt: str) -> bool:
    return fmt in EXPORT_FORMATS


def load_config(path: Path | None = None) -> Config:
    """Read TOML config. Returns defaults if the file is missing.

    Raises click.UsageError for an unknown default_format, a bad indent or a
    hash_tables value that is not a list of paths.
    """
    path = path or get_config_path()
    if not path.exists():
        return Config()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    hash_tables = data.get("hash_tables", [])
    if not isinstance(hash_tables, list) or not all(isinstance(p, str) for p in hash_tables):
        raise click.UsageError(f"Invalid hash_tables {hash_tables!r} in {path}. Use a list of paths")

    config = Config(
        default_format=data.get("default_format", "json"),
        json_indent=data.get("json_indent", 2),
        hash_tables=[Path(p) for p in hash_tables],
    )
    if not validate_format(config.default_format):
        raise click.UsageError(
            f"Invalid default_format '{config.default_format}' in {path}. "
            f"Use one of: {', '.join(EXPORT_FORMATS)}"
        )
    if not isinstance(config.json_indent, int) or config.json_indent < 0:
        raise click.UsageError(f"Invalid json_indent {config.json_indent!r} in {path}")
    return config


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write config to TOML using literal strings for paths."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = [
        f"default_format = \"{config.default_format}\"",
        f"json_indent = {config.json_indent}",
    ]
    # TOML literal strings (single quotes) so backslashes aren't escapes
    tables = ", ".join(f"'{p}'" for p in config.hash_tables)
    lines.append(f"hash_tables = [{tables}]")
    lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")
    return path
