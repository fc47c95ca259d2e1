# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for SaveKeeper tests.

Provides a temporary working directory, a populated config store, a
resolver bound to a fake home directory, and a trash that moves into a
temporary folder instead of the real recycle bin.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, List

import pytest
import pytest_asyncio

# Set test environment variables
os.environ["SAVEKEEPER_API_KEY"] = "test-api-key-12345"

ENTITY = "Celeste"
ENTITY_TEMPLATE = "{Home}/saves/celeste"
ODD_ENTITY = "Hollow: Knight?"
ODD_TEMPLATE = "{Home}/saves/hollow"


class FakeTrash:
    """TrashFacility that moves paths into a local folder."""

    def __init__(self, trash_dir: Path):
        self.trash_dir = trash_dir
        self.trashed: List[Path] = []

    def move_to_trash(self, path: Path) -> None:
        self.trash_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(path), str(self.trash_dir / f"{len(self.trashed)}-{path.name}"))
        self.trashed.append(path)


class FailingTrash:
    """TrashFacility whose platform trash is unavailable."""

    def move_to_trash(self, path: Path) -> None:
        from savekeeper.exceptions import IoFailureError

        raise IoFailureError("Trash is not available on this system")


def make_save_tree(root: Path) -> Path:
    """Create a small save directory with nested files and an empty folder."""
    (root / "profiles" / "slot1").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "settings.ini").write_text("volume=7\n", encoding="utf-8")
    (root / "profiles" / "slot1" / "save.dat").write_bytes(bytes(range(256)) * 64)
    (root / "profiles" / "notes.txt").write_text("chapter 3", encoding="utf-8")
    return root


def read_tree(root: Path) -> Dict[str, bytes | None]:
    """Map of relative posix path -> file bytes (None for directories)."""
    tree: Dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        tree[rel] = None if path.is_dir() else path.read_bytes()
    return tree


def patch_entry_header(
    package: Path,
    member: str,
    *,
    method: int | None = None,
    flag_bits: int | None = None,
) -> Path:
    """
    Rewrite the compression method / flag bits of one entry in place.

    Patches both the local header and the central directory record. Only
    safe for stored entries whose data cannot contain header signatures.
    """
    data = bytearray(package.read_bytes())
    name = member.encode("utf-8")

    # (signature, flag offset, method offset, name length offset, name offset)
    layouts = (
        (b"PK\x03\x04", 6, 8, 26, 30),
        (b"PK\x01\x02", 8, 10, 28, 46),
    )
    for signature, flag_at, method_at, name_len_at, name_at in layouts:
        pos = data.find(signature)
        while pos != -1:
            length = int.from_bytes(data[pos + name_len_at:pos + name_len_at + 2], "little")
            if bytes(data[pos + name_at:pos + name_at + length]) == name:
                if method is not None:
                    data[pos + method_at:pos + method_at + 2] = method.to_bytes(2, "little")
                if flag_bits is not None:
                    data[pos + flag_at:pos + flag_at + 2] = flag_bits.to_bytes(2, "little")
            pos = data.find(signature, pos + 4)

    package.write_bytes(bytes(data))
    return package


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def home_dir(temp_dir: Path) -> Path:
    home = temp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def keeper_config(temp_dir: Path):
    """Create a test configuration."""
    from savekeeper.config import SaveKeeperConfig

    return SaveKeeperConfig(workdir=temp_dir / "workdir", compress_level=6)


@pytest.fixture
def resolver(home_dir: Path, temp_dir: Path):
    from savekeeper.paths import TemplatePathResolver

    return TemplatePathResolver(
        steam_dir=temp_dir / "steam",
        environ={"HOME": str(home_dir)},
    )


@pytest.fixture
def fake_trash(temp_dir: Path) -> FakeTrash:
    return FakeTrash(temp_dir / "trash")


@pytest_asyncio.fixture
async def json_store(keeper_config):
    """Config store with two registered entities."""
    from savekeeper.store import GameEntry, JsonConfigStore

    store = JsonConfigStore(keeper_config.config_path)
    document = await store.read()
    document.games = [
        GameEntry(name=ENTITY, path=ENTITY_TEMPLATE, icon="", kind="userdata"),
        GameEntry(name=ODD_ENTITY, path=ODD_TEMPLATE, icon="", kind="userdata"),
    ]
    await store.write(document)
    return store


@pytest_asyncio.fixture
async def keeper_state(keeper_config, json_store, resolver, fake_trash):
    """Create initialized runtime state for testing."""
    from savekeeper.core import initialize_state

    return initialize_state(
        keeper_config,
        store=json_store,
        resolver=resolver,
        trash=fake_trash,
    )


@pytest.fixture
def live_dir(home_dir: Path) -> Path:
    """Live save directory of ENTITY, populated."""
    return make_save_tree(home_dir / "saves" / "celeste")
