"""Export decoded manifests and archives as JSON."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

from rmanwad.detect import Decoded
from rmanwad.wad.records import ContentV1, ContentV2, WadHeaderV1, WadHeaderV2, WadHeaderV3

# Version variants are tagged so readers can tell them apart.
_VERSION_TAGS: dict[type, str] = {
    WadHeaderV1: "V1",
    WadHeaderV2: "V2",
    WadHeaderV3: "V3",
    ContentV1: "V1",
    ContentV2: "V2",
}


def to_plain(value: Any) -> Any:
    """Convert a decoded tree into JSON-compatible dicts and lists."""
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, bytes):
        return value.hex()
    if is_dataclass(value) and not isinstance(value, type):
        entry: dict[str, Any] = {}
        tag = _VERSION_TAGS.get(type(value))
        if tag is not None:
            entry["version"] = tag
        for f in fields(value):
            entry[f.name] = to_plain(getattr(value, f.name))
        return entry
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def export_json(tree: Decoded, indent: int = 2) -> str:
    """Export a decoded RMAN or WAD tree as a JSON string."""
    return json.dumps(to_plain(tree), indent=indent)
