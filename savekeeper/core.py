# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Core - Runtime state and the public operations.

This module wires the collaborators (config store, path resolver, trash)
into a state dict and exposes backup, listing, remarks and restore as
plain coroutines. Each operation runs its steps strictly in sequence and
keeps no handles between calls.
"""

from pathlib import Path
from typing import List, TypedDict

import structlog

from savekeeper.config import SaveKeeperConfig
from savekeeper.paths import PathResolver, TemplatePathResolver
from savekeeper.store import ConfigStore, JsonConfigStore
from savekeeper.trash import SystemTrash, TrashFacility

logger = structlog.get_logger()


class SaveKeeperState(TypedDict):
    """Collaborators shared by all operations."""

    store: ConfigStore
    resolver: PathResolver
    trash: TrashFacility


def initialize_state(
    config: SaveKeeperConfig,
    store: ConfigStore | None = None,
    resolver: PathResolver | None = None,
    trash: TrashFacility | None = None,
) -> SaveKeeperState:
    """
    Create runtime state, filling in default collaborators.

    Creates the working, backup and snapshot directories.

    Args:
        config: SaveKeeper configuration
        store: Config store (default: JsonConfigStore on config.config_path)
        resolver: Path resolver (default: TemplatePathResolver)
        trash: Trash facility (default: SystemTrash)

    Returns:
        Initialized SaveKeeperState dictionary
    """
    config.workdir.mkdir(parents=True, exist_ok=True)
    config.backup_path.mkdir(parents=True, exist_ok=True)
    config.extra_backup_path.mkdir(parents=True, exist_ok=True)

    state = SaveKeeperState(
        store=store or JsonConfigStore(config.config_path),
        resolver=resolver or TemplatePathResolver(steam_dir=config.steam_dir),
        trash=trash or SystemTrash(),
    )

    logger.info("savekeeper_initialized", workdir=str(config.workdir))
    return state


async def backup(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    entity_name: str,
    path_template: str,
    user_id: str | None = None,
    remark: str | None = None,
):
    """Back up an entity's save directory. See backup.manager.perform_backup."""
    from savekeeper.backup.manager import perform_backup

    return await perform_backup(
        config, state, entity_name, path_template, user_id, remark
    )


async def list_backups(config: SaveKeeperConfig, entity_name: str) -> List:
    """List an entity's backups, newest first."""
    from savekeeper.backup.manager import backup_dir
    from savekeeper.vault.catalog import list_backups as list_catalog

    return await list_catalog(backup_dir(config), entity_name)


async def set_annotation(
    config: SaveKeeperConfig,
    entity_name: str,
    file_name: str,
    text: str,
) -> Path | None:
    """Set (or clear with blank text) the remark of a backup."""
    from savekeeper.backup.manager import backup_dir
    from savekeeper.vault.catalog import set_annotation as set_catalog_annotation

    return await set_catalog_annotation(backup_dir(config), entity_name, file_name, text)


async def restore(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    entity_name: str,
    path_template: str,
    archive_path: Path | str,
    user_id: str | None = None,
):
    """Restore an archive over the live save directory. See backup.restore."""
    from savekeeper.backup.restore import restore_backup

    return await restore_backup(
        config, state, entity_name, path_template, Path(archive_path), user_id
    )


def get_backup_dir(config: SaveKeeperConfig) -> Path:
    """Directory holding user backups (created if missing)."""
    from savekeeper.backup.manager import backup_dir

    return backup_dir(config)


def check_save_path(
    state: SaveKeeperState,
    path_template: str,
    user_id: str | None = None,
) -> bool:
    """True if the template resolves to an existing path; never raises."""
    from savekeeper.exceptions import SaveKeeperError

    if "{SteamUID}" in path_template and not user_id:
        return False
    try:
        return state["resolver"].resolve(path_template, user_id).exists()
    except SaveKeeperError:
        return False
