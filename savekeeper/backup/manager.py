# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Backup Manager - Creating backups.

A backup archives the resolved save directory into
{backup_dir}/{entity}-Backup-YYYYMMDD-HHMMSS.zip, optionally writes a
remark next to it, and records the time as the entity's last save.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog

from savekeeper.config import SaveKeeperConfig
from savekeeper.core import SaveKeeperState
from savekeeper.errors import explain_source_missing
from savekeeper.exceptions import IoFailureError, NotFoundError
from savekeeper.naming import encode_backup_stem, now_timestamp, sanitize_filename
from savekeeper.store import AppConfig
from savekeeper.vault.archiver import ARCHIVE_SUFFIX, archive_directory
from savekeeper.vault.catalog import write_annotation

logger = structlog.get_logger()


@dataclass
class BackupResult:
    """Result of a backup operation."""

    file_name: str
    file_path: str
    timestamp: int  # epoch millis
    remark_path: str | None
    config: AppConfig


def _ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IoFailureError(
            f"Failed to create directory: {e}",
            details={"path": str(path)},
        ) from e
    return path


def backup_dir(config: SaveKeeperConfig) -> Path:
    """Directory for user backups, created on demand."""
    return _ensure_dir(config.backup_path)


def extra_backup_dir(config: SaveKeeperConfig) -> Path:
    """Directory for pre-restore snapshots, created on demand."""
    return _ensure_dir(config.extra_backup_path)


async def perform_backup(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    entity_name: str,
    path_template: str,
    user_id: str | None = None,
    remark: str | None = None,
) -> BackupResult:
    """
    Back up an entity's save directory.

    Args:
        config: SaveKeeper configuration
        state: Runtime state
        entity_name: Entity (game) name as stored in the config document
        path_template: Save path template (see savekeeper.paths)
        user_id: Value for {SteamUID}, if the template needs it
        remark: Free text stored next to the archive (blank = none)

    Returns:
        BackupResult with the archive location and updated config

    Raises:
        InvalidInputError: If the template cannot be resolved
        NotFoundError: If the save directory does not exist
        IoFailureError: If archiving or writing the remark fails
    """
    source_path = state["resolver"].resolve(path_template, user_id)
    if not source_path.exists():
        raise NotFoundError(
            explain_source_missing(source_path),
            details={"entity": entity_name, "source": str(source_path)},
        )

    target_dir = backup_dir(config)
    now = datetime.now()
    _, ts_millis = now_timestamp(now)
    file_stem = encode_backup_stem(sanitize_filename(entity_name), now)
    archive_path = target_dir / f"{file_stem}{ARCHIVE_SUFFIX}"

    await archive_directory(source_path, archive_path, config.compress_level)

    remark_path: str | None = None
    if remark and remark.strip():
        remark_path = str(await write_annotation(archive_path, remark))

    updated = await state["store"].record_timestamp(entity_name, ts_millis)

    logger.info(
        "backup_created",
        entity=entity_name,
        archive=str(archive_path),
        size=archive_path.stat().st_size,
        has_remark=remark_path is not None,
    )

    return BackupResult(
        file_name=archive_path.name,
        file_path=str(archive_path),
        timestamp=ts_millis,
        remark_path=remark_path,
        config=updated,
    )
