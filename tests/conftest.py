import pytest

from builders import build_body, build_manifest
from rmanwad.rman.records import (
    Bundle,
    Chunk,
    Directory,
    FileEntry,
    Language,
    RmanBody,
)


@pytest.fixture
def sample_body() -> RmanBody:
    return RmanBody(
        bundles=(
            Bundle(bundle_id=0xB0000000000000A1, chunks=(
                Chunk(chunk_id=0xC1, compressed_size=100, uncompressed_size=250),
                Chunk(chunk_id=0xC2, compressed_size=80, uncompressed_size=90),
            )),
            Bundle(bundle_id=0xB0000000000000A2, chunks=(
                Chunk(chunk_id=0xC3, compressed_size=10, uncompressed_size=10),
            )),
        ),
        languages=(
            Language(id=1, name="en_US"),
            Language(id=2, name="ko_KR"),
        ),
        files=(
            FileEntry(id=0xF1, name="champion.wad.client", symlink="", directory_id=0xD2,
                      size=340, language=0, chunk_ids=(0xC1, 0xC2)),
            FileEntry(id=0xF2, name="readme.txt", symlink="docs/readme.txt", directory_id=0,
                      size=10, language=1, chunk_ids=(0xC3,)),
        ),
        directories=(
            Directory(id=0xD1, parent_id=0, name="DATA"),
            Directory(id=0xD2, parent_id=0xD1, name="FINAL"),
        ),
    )


@pytest.fixture
def sample_manifest(sample_body) -> bytes:
    return build_manifest(build_body(sample_body), padding=b"\xAA" * 12)


@pytest.fixture
def config_file(tmp_path):
    """Point a config at a temp directory with one hash table."""
    table = tmp_path / "hashes.game.txt"
    table.write_text(
        "00000000000000a1 data/characters/annie/annie.bin\n"
        "00000000000000b2 assets/ui/icon.dds\n",
        encoding="utf-8",
    )
    path = tmp_path / "config.toml"
    path.write_text(
        f"default_format = \"csv\"\njson_indent = 4\nhash_tables = ['{table}']\n",
        encoding="utf-8",
    )
    return path
