# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tests for creating backups through the public operations.
"""

import os
import re
import zipfile
from pathlib import Path

import pytest

from conftest import ENTITY, ENTITY_TEMPLATE, ODD_ENTITY, ODD_TEMPLATE, make_save_tree, read_tree
from savekeeper.core import backup, check_save_path, get_backup_dir, list_backups
from savekeeper.exceptions import ErrorKind, InvalidInputError, NotFoundError
from savekeeper.naming import decode_timestamp
from savekeeper.vault.archiver import unzip_archive

BACKUP_NAME_RE = re.compile(r"^Celeste-Backup-\d{8}-\d{6}\.zip$")


@pytest.mark.asyncio
async def test_backup_creates_named_archive(keeper_config, keeper_state, live_dir: Path, temp_dir: Path):
    result = await backup(keeper_config, keeper_state, ENTITY, ENTITY_TEMPLATE)

    assert BACKUP_NAME_RE.match(result.file_name)
    archive = Path(result.file_path)
    assert archive.parent == keeper_config.backup_path
    assert archive.is_file()
    assert result.remark_path is None
    assert not archive.with_suffix(".txt").exists()
    assert decode_timestamp(result.file_name) == result.timestamp

    # Archive holds the tree, not the root directory itself
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
    assert "settings.ini" in names
    assert not any(n.startswith("celeste") for n in names)

    restored = temp_dir / "check"
    unzip_archive(archive, restored)
    assert read_tree(restored) == read_tree(live_dir)


@pytest.mark.asyncio
async def test_backup_records_last_save(keeper_config, keeper_state, json_store, live_dir: Path):
    result = await backup(keeper_config, keeper_state, ENTITY, ENTITY_TEMPLATE)

    assert result.config.find_game(ENTITY).last_save == result.timestamp
    document = await json_store.read()
    assert document.find_game(ENTITY).last_save == result.timestamp


@pytest.mark.asyncio
async def test_backup_with_remark(keeper_config, keeper_state, live_dir: Path):
    result = await backup(
        keeper_config, keeper_state, ENTITY, ENTITY_TEMPLATE, remark="before final boss"
    )

    note = Path(result.file_path).with_suffix(".txt")
    assert result.remark_path == str(note)
    assert note.read_text(encoding="utf-8") == "before final boss"

    entries = await list_backups(keeper_config, ENTITY)
    assert [e.file_name for e in entries] == [result.file_name]
    assert entries[0].remark == "before final boss"


@pytest.mark.asyncio
async def test_blank_remark_writes_no_sidecar(keeper_config, keeper_state, live_dir: Path):
    result = await backup(
        keeper_config, keeper_state, ENTITY, ENTITY_TEMPLATE, remark="   "
    )

    assert result.remark_path is None
    assert not Path(result.file_path).with_suffix(".txt").exists()


@pytest.mark.asyncio
async def test_backup_sanitizes_entity_name(keeper_config, keeper_state, home_dir: Path):
    make_save_tree(home_dir / "saves" / "hollow")

    result = await backup(keeper_config, keeper_state, ODD_ENTITY, ODD_TEMPLATE)

    assert result.file_name.startswith("Hollow_ Knight_-Backup-")
    entries = await list_backups(keeper_config, ODD_ENTITY)
    assert len(entries) == 1


@pytest.mark.asyncio
async def test_backup_missing_source(keeper_config, keeper_state):
    with pytest.raises(NotFoundError) as exc_info:
        await backup(keeper_config, keeper_state, ENTITY, ENTITY_TEMPLATE)

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert list(keeper_config.backup_path.iterdir()) == []


@pytest.mark.asyncio
async def test_backup_missing_user_id(keeper_config, keeper_state):
    with pytest.raises(InvalidInputError):
        await backup(
            keeper_config, keeper_state, ENTITY, "{Steam}/userdata/{SteamUID}/504230"
        )


@pytest.mark.asyncio
async def test_backup_unknown_entity_keeps_archive(keeper_config, keeper_state, live_dir: Path):
    with pytest.raises(NotFoundError):
        await backup(keeper_config, keeper_state, "Not Registered", ENTITY_TEMPLATE)

    # The archive was written before the config update failed
    assert len(list(keeper_config.backup_path.glob("Not Registered-Backup-*.zip"))) == 1


def test_get_backup_dir(keeper_config):
    path = get_backup_dir(keeper_config)

    assert path == keeper_config.backup_path
    assert path.is_dir()


@pytest.mark.asyncio
async def test_check_save_path(keeper_state, live_dir: Path):
    assert check_save_path(keeper_state, ENTITY_TEMPLATE) is True
    assert check_save_path(keeper_state, "{Home}/saves/missing") is False
    assert check_save_path(keeper_state, "{Steam}/userdata/{SteamUID}/1") is False


@pytest.mark.asyncio
async def test_backup_of_files_dated_1970(keeper_config, keeper_state, live_dir: Path, temp_dir: Path):
    os.utime(live_dir / "profiles" / "slot1" / "save.dat", (0, 0))

    result = await backup(keeper_config, keeper_state, ENTITY, ENTITY_TEMPLATE)

    restored = temp_dir / "check"
    unzip_archive(Path(result.file_path), restored)
    assert read_tree(restored) == read_tree(live_dir)
