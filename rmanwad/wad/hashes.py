"""Path-hash name tables for WAD content entries.

Tables are plain text, one ``<hex hash> <path>`` pair per line, as published
by CommunityDragon (hashes.game.txt and friends).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def parse_hash_lines(lines: Iterable[str]) -> dict[int, str]:
    mapping: dict[int, str] = {}
    for line in lines:
        line = line.strip()
        if not line:
            continue
        hash_text, _, name = line.partition(" ")
        try:
            mapping[int(hash_text, 16)] = name
        except ValueError:
            logger.debug("Skipping malformed hash line: %r", line[:80])
    return mapping


def load_hash_table(paths: Iterable[Path]) -> dict[int, str]:
    """Merge hash tables; later files override earlier ones. Missing files are skipped."""
    mapping: dict[int, str] = {}
    for path in paths:
        if not path.exists():
            logger.debug("Hash table not found: %s", path)
            continue
        with open(path, encoding="utf-8", errors="replace") as f:
            mapping.update(parse_hash_lines(f))
    return mapping
