# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Restore Manager - Replacing a live save directory with a backup.

A restore runs five stages in a fixed order:

    Check             archive exists and is a .zip; target path resolves
    ProtectiveBackup  snapshot the live directory (policy-gated)
    Remove            move the live directory to the trash
    Extract           recreate the directory and unpack the archive
    Finalize          record the restored save time

Nothing is touched before ProtectiveBackup, the snapshot is always taken
before Remove, and Remove always happens before Extract. If Extract fails
the partial directory is removed and the snapshot, when there is one, is
unpacked in its place. The caller always gets the original Extract error.

The restore replaces the directory wholesale: files that exist live but
not in the archive are gone afterwards (they remain in the trash and in
the snapshot).
"""

import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Tuple

import structlog
from ulid import ULID

from savekeeper.backup.manager import extra_backup_dir
from savekeeper.config import RESTORE_EXTRA_BACKUP_KEY, SaveKeeperConfig
from savekeeper.core import SaveKeeperState
from savekeeper.errors import explain_archive_missing, explain_unsupported_archive
from savekeeper.exceptions import (
    IoFailureError,
    NotFoundError,
    PolicyViolationError,
    RestoreError,
    RestoreStage,
    SaveKeeperError,
)
from savekeeper.naming import (
    decode_timestamp,
    encode_extra_backup_stem,
    now_timestamp,
    sanitize_filename,
)
from savekeeper.store import AppConfig
from savekeeper.vault.archiver import (
    ARCHIVE_SUFFIX,
    archive_directory,
    extract_archive,
    is_restorable,
)
from savekeeper.vault.catalog import file_modified_millis, write_annotation

logger = structlog.get_logger()


@dataclass
class RestoreOutcome:
    """Result of a successful restore."""

    target_path: str
    archive_path: str
    extra_backup_path: str | None
    timestamp: int  # epoch millis now associated with the entity
    config: AppConfig


@dataclass
class RestoreContext:
    """Values one stage hands to the next."""

    entity_name: str
    path_template: str
    archive_path: Path
    user_id: str | None
    log: Any
    target_path: Path | None = None
    extra_backup_path: Path | None = None
    timestamp: int | None = None
    config: AppConfig | None = None


StageFunc = Callable[[SaveKeeperConfig, SaveKeeperState, RestoreContext], Awaitable[None]]


async def _check(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    ctx: RestoreContext,
) -> None:
    if not ctx.archive_path.is_file():
        raise NotFoundError(
            explain_archive_missing(ctx.archive_path),
            details={"archive": str(ctx.archive_path)},
        )

    if not is_restorable(ctx.archive_path):
        raise PolicyViolationError(
            explain_unsupported_archive(ctx.archive_path, ARCHIVE_SUFFIX),
            details={"archive": str(ctx.archive_path)},
        )

    ctx.target_path = state["resolver"].resolve(ctx.path_template, ctx.user_id)


async def _protective_backup(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    ctx: RestoreContext,
) -> None:
    enabled = await state["store"].read_policy_flag(RESTORE_EXTRA_BACKUP_KEY, True)
    if not enabled:
        ctx.log.info("restore_extra_backup_disabled")
        return

    if not ctx.target_path.exists():
        # Nothing live to protect
        return

    now = datetime.now()
    stem = encode_extra_backup_stem(sanitize_filename(ctx.entity_name), now)
    snapshot = extra_backup_dir(config) / f"{stem}{ARCHIVE_SUFFIX}"

    await archive_directory(ctx.target_path, snapshot, config.compress_level)
    ctx.extra_backup_path = snapshot

    tag, _ = now_timestamp(now)
    await write_annotation(
        snapshot,
        f"Automatic backup taken at {tag} before restoring {ctx.archive_path.name}.\n"
        f"Source: {ctx.target_path}\n",
    )

    ctx.log.info("restore_extra_backup_created", snapshot=str(snapshot))


async def _remove(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    ctx: RestoreContext,
) -> None:
    if not ctx.target_path.exists():
        return

    state["trash"].move_to_trash(ctx.target_path)
    ctx.log.info("restore_target_trashed", target=str(ctx.target_path))


async def _rollback(ctx: RestoreContext) -> None:
    """
    Best effort: remove the partial tree, then unpack the snapshot.

    Outcomes are only logged; the caller reports the extraction error.
    """
    target = ctx.target_path

    try:
        if target.exists():
            shutil.rmtree(target)
    except OSError as e:
        ctx.log.warning("restore_cleanup_failed", target=str(target), error=str(e))

    if ctx.extra_backup_path is None:
        ctx.log.warning("restore_rollback_unavailable", target=str(target))
        return

    try:
        target.mkdir(parents=True, exist_ok=True)
        await extract_archive(ctx.extra_backup_path, target)
    except (SaveKeeperError, OSError) as e:
        ctx.log.error(
            "restore_rollback_failed",
            snapshot=str(ctx.extra_backup_path),
            error=str(e),
        )
        return

    ctx.log.info("restore_rolled_back", snapshot=str(ctx.extra_backup_path))


async def _extract(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    ctx: RestoreContext,
) -> None:
    try:
        try:
            ctx.target_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoFailureError(
                f"Failed to create save directory: {e}",
                details={"target": str(ctx.target_path)},
            ) from e
        entries = await extract_archive(ctx.archive_path, ctx.target_path)
    except SaveKeeperError:
        await _rollback(ctx)
        raise
    except Exception as e:
        await _rollback(ctx)
        raise IoFailureError(
            f"Failed to extract backup archive: {e}",
            details={"archive": str(ctx.archive_path)},
        ) from e

    ctx.log.info("restore_extracted", entries=entries)


async def _finalize(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    ctx: RestoreContext,
) -> None:
    timestamp = decode_timestamp(ctx.archive_path.name)
    if timestamp is None:
        timestamp = file_modified_millis(ctx.archive_path)
    if timestamp is None:
        _, timestamp = now_timestamp()

    ctx.config = await state["store"].record_timestamp(ctx.entity_name, timestamp)
    ctx.timestamp = timestamp


# Order is the safety contract: snapshot -> trash -> extract
RESTORE_PIPELINE: Tuple[Tuple[RestoreStage, StageFunc], ...] = (
    (RestoreStage.CHECK, _check),
    (RestoreStage.PROTECTIVE_BACKUP, _protective_backup),
    (RestoreStage.REMOVE, _remove),
    (RestoreStage.EXTRACT, _extract),
    (RestoreStage.FINALIZE, _finalize),
)


async def restore_backup(
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    entity_name: str,
    path_template: str,
    archive_path: Path,
    user_id: str | None = None,
) -> RestoreOutcome:
    """
    Restore an archive over an entity's live save directory.

    Args:
        config: SaveKeeper configuration
        state: Runtime state
        entity_name: Entity (game) name as stored in the config document
        path_template: Save path template (see savekeeper.paths)
        archive_path: The .zip to restore (never modified or deleted)
        user_id: Value for {SteamUID}, if the template needs it

    Returns:
        RestoreOutcome describing the restored directory

    Raises:
        RestoreError: Tagged with the stage that failed; its kind and
            message come from the underlying error
    """
    restore_id = str(ULID())
    log = logger.bind(restore_id=restore_id, entity=entity_name)

    ctx = RestoreContext(
        entity_name=entity_name,
        path_template=path_template,
        archive_path=archive_path,
        user_id=user_id,
        log=log,
    )

    log.info("restore_started", archive=str(archive_path))

    for stage, step in RESTORE_PIPELINE:
        log.debug("restore_stage_started", stage=stage.value)
        try:
            await step(config, state, ctx)
        except SaveKeeperError as e:
            log.error("restore_stage_failed", stage=stage.value, error=e.message)
            raise RestoreError(stage, e) from e
        except OSError as e:
            log.error("restore_stage_failed", stage=stage.value, error=str(e))
            raise RestoreError(stage, IoFailureError(str(e))) from e

    log.info(
        "restore_completed",
        target=str(ctx.target_path),
        extra_backup=str(ctx.extra_backup_path) if ctx.extra_backup_path else None,
        timestamp=ctx.timestamp,
    )

    return RestoreOutcome(
        target_path=str(ctx.target_path),
        archive_path=str(archive_path),
        extra_backup_path=str(ctx.extra_backup_path) if ctx.extra_backup_path else None,
        timestamp=ctx.timestamp,
        config=ctx.config,
    )
