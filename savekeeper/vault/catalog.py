# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Catalog - Listing backups and managing their remarks.

A backup's display time comes from its file name when possible, else from
the file's modification time. Remarks live in a sidecar .txt file next to
the archive.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List

import aiofiles
import structlog

from savekeeper.errors import explain_archive_missing, explain_name_mismatch
from savekeeper.exceptions import InvalidInputError, IoFailureError, NotFoundError
from savekeeper.naming import backup_prefix, decode_timestamp, sidecar_path
from savekeeper.vault.archiver import LISTED_SUFFIXES

logger = structlog.get_logger()


class TimeSource(str, Enum):
    """Where a backup's timestamp came from."""

    FROM_NAME = "file-name"
    FROM_MODIFIED_TIME = "modified-time"
    UNKNOWN = "unknown"


@dataclass
class BackupEntry:
    """One archive found in the backup directory."""

    file_name: str
    file_path: str
    timestamp: int | None  # epoch millis
    remark: str | None
    size: int
    time_source: TimeSource


def file_modified_millis(path: Path) -> int | None:
    """Modification time in epoch millis, or None if it cannot be read."""
    try:
        return int(path.stat().st_mtime * 1000)
    except OSError:
        return None


async def read_annotation(archive_path: Path) -> str | None:
    """
    Read the remark belonging to an archive.

    Returns None when there is no sidecar or it cannot be read; a broken
    sidecar must never hide the archive itself.
    """
    note_path = sidecar_path(archive_path)
    if not note_path.is_file():
        return None

    try:
        async with aiofiles.open(note_path, "r", encoding="utf-8") as f:
            return await f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(
            "remark_read_failed",
            path=str(note_path),
            error=str(e),
        )
        return None


async def write_annotation(archive_path: Path, text: str) -> Path:
    """
    Write (overwrite) the remark sidecar of an archive.

    Returns:
        Path to the sidecar file
    """
    note_path = sidecar_path(archive_path)
    try:
        async with aiofiles.open(note_path, "w", encoding="utf-8") as f:
            await f.write(text)
    except OSError as e:
        raise IoFailureError(
            f"Failed to write remark: {e}",
            details={"path": str(note_path)},
        ) from e
    return note_path


async def list_backups(backup_dir: Path, entity_name: str) -> List[BackupEntry]:
    """
    List the backups of one entity, newest first.

    Args:
        backup_dir: Directory holding user backups
        entity_name: Entity (game) name, sanitized before matching

    Returns:
        Entries sorted by timestamp descending; entries without a timestamp
        come last in file-name order. Empty if the directory is unreadable.
    """
    prefix = backup_prefix(entity_name)

    try:
        children = sorted(backup_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning(
            "backup_dir_unreadable",
            backup_dir=str(backup_dir),
            error=str(e),
        )
        return []

    backups: List[BackupEntry] = []

    for path in children:
        if not path.is_file():
            continue

        file_name = path.name
        if path.suffix.lower() not in LISTED_SUFFIXES:
            continue
        if not file_name.startswith(prefix):
            continue

        timestamp = decode_timestamp(file_name)
        if timestamp is not None:
            time_source = TimeSource.FROM_NAME
        else:
            timestamp = file_modified_millis(path)
            time_source = (
                TimeSource.FROM_MODIFIED_TIME
                if timestamp is not None
                else TimeSource.UNKNOWN
            )

        try:
            size = path.stat().st_size
        except OSError:
            size = 0

        backups.append(
            BackupEntry(
                file_name=file_name,
                file_path=str(path),
                timestamp=timestamp,
                remark=await read_annotation(path),
                size=size,
                time_source=time_source,
            )
        )

    # Stable sort keeps name order among equal / missing timestamps
    backups.sort(key=lambda b: (b.timestamp is None, -(b.timestamp or 0)))

    logger.debug(
        "backups_listed",
        entity=entity_name,
        count=len(backups),
    )

    return backups


async def set_annotation(
    backup_dir: Path,
    entity_name: str,
    file_name: str,
    text: str,
) -> Path | None:
    """
    Set or clear the remark of a backup.

    Blank text deletes the sidecar (no error if there is none).

    Returns:
        Path to the written sidecar, or None when the remark was cleared

    Raises:
        InvalidInputError: If file_name does not belong to the entity
        NotFoundError: If the archive does not exist
        IoFailureError: If the sidecar cannot be written or deleted
    """
    if (
        Path(file_name).name != file_name
        or not file_name.startswith(backup_prefix(entity_name))
        or Path(file_name).suffix.lower() not in LISTED_SUFFIXES
    ):
        raise InvalidInputError(
            explain_name_mismatch(file_name, entity_name),
            details={"file_name": file_name, "entity": entity_name},
        )

    archive_path = backup_dir / file_name
    if not archive_path.is_file():
        raise NotFoundError(
            explain_archive_missing(archive_path),
            details={"file_name": file_name},
        )

    if not text.strip():
        note_path = sidecar_path(archive_path)
        try:
            note_path.unlink(missing_ok=True)
        except OSError as e:
            raise IoFailureError(
                f"Failed to delete remark: {e}",
                details={"path": str(note_path)},
            ) from e
        logger.info("remark_cleared", file_name=file_name)
        return None

    note_path = await write_annotation(archive_path, text)
    logger.info("remark_updated", file_name=file_name, length=len(text))
    return note_path
