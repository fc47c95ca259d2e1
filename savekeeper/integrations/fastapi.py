# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper FastAPI Integration - HTTP access to backup and restore.

This module exposes the public operations as protected endpoints:
- Backup, list, remark and restore
- Backup directory and save-path checks
- The persisted config document
"""

import os
from contextlib import asynccontextmanager
from dataclasses import asdict

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from savekeeper.config import SaveKeeperConfig
from savekeeper.core import (
    SaveKeeperState,
    backup,
    check_save_path,
    get_backup_dir,
    initialize_state,
    list_backups,
    restore,
    set_annotation,
)
from savekeeper.exceptions import ErrorKind, RestoreError, SaveKeeperError

logger = structlog.get_logger()

# Security
security = HTTPBearer(auto_error=False)

# HTTP status per error kind
STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.POLICY_VIOLATION: 422,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.IO_FAILURE: 500,
}


class BackupRequest(BaseModel):
    entity_name: str
    path_template: str
    user_id: str | None = None
    remark: str | None = None


class RemarkRequest(BaseModel):
    file_name: str
    remark: str = ""


class RestoreRequest(BaseModel):
    entity_name: str
    path_template: str
    archive_path: str
    user_id: str | None = None


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> bool:
    """
    Verify API key from Authorization header.

    The API key is read from the SAVEKEEPER_API_KEY environment variable.
    Requests must include: Authorization: Bearer <api_key>

    Raises:
        HTTPException: If API key is missing or invalid
    """
    api_key = os.getenv("SAVEKEEPER_API_KEY")

    if not api_key:
        raise HTTPException(
            status_code=500,
            detail="SAVEKEEPER_API_KEY environment variable not set",
        )

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Authorization header required",
        )

    if credentials.credentials != api_key:
        raise HTTPException(
            status_code=403,
            detail="Invalid API key",
        )

    return True


def _http_error(exc: SaveKeeperError) -> HTTPException:
    """Translate a savekeeper error into an HTTP error with a readable body."""
    detail = {"kind": exc.kind.value, "message": exc.message}
    if isinstance(exc, RestoreError):
        detail["stage"] = exc.stage.value
    return HTTPException(status_code=STATUS_BY_KIND[exc.kind], detail=detail)


def register_savekeeper_routes(
    app: FastAPI,
    config: SaveKeeperConfig,
    state: SaveKeeperState,
    prefix: str = "/api/savekeeper",
) -> None:
    """
    Register SaveKeeper endpoints on a FastAPI app.

    All endpoints require Bearer token authentication.

    Args:
        app: FastAPI application
        config: SaveKeeper configuration
        state: Runtime state
        prefix: URL prefix for endpoints (default: /api/savekeeper)
    """

    @app.get(f"{prefix}/config", dependencies=[Depends(verify_api_key)])
    async def get_config() -> dict:
        """
        Get the persisted config document (settings + entities).
        """
        try:
            document = await state["store"].read()
        except SaveKeeperError as e:
            raise _http_error(e)
        return document.model_dump(by_alias=True)

    @app.get(f"{prefix}/backup-dir", dependencies=[Depends(verify_api_key)])
    async def backup_directory() -> dict:
        """
        Get the directory holding user backups.
        """
        try:
            return {"path": str(get_backup_dir(config))}
        except SaveKeeperError as e:
            raise _http_error(e)

    @app.get(f"{prefix}/check-path", dependencies=[Depends(verify_api_key)])
    async def check_path(path_template: str, user_id: str | None = None) -> dict:
        """
        Check whether a save-path template resolves to an existing path.
        """
        return {"exists": check_save_path(state, path_template, user_id)}

    @app.post(f"{prefix}/backups", dependencies=[Depends(verify_api_key)])
    async def create_backup(request: BackupRequest) -> dict:
        """
        Back up an entity's save directory.
        """
        try:
            result = await backup(
                config,
                state,
                request.entity_name,
                request.path_template,
                request.user_id,
                request.remark,
            )
        except SaveKeeperError as e:
            raise _http_error(e)

        return {
            "file_name": result.file_name,
            "file_path": result.file_path,
            "timestamp": result.timestamp,
            "remark_path": result.remark_path,
            "config": result.config.model_dump(by_alias=True),
        }

    @app.get(f"{prefix}/backups/{{entity_name}}", dependencies=[Depends(verify_api_key)])
    async def get_backups(entity_name: str) -> list:
        """
        List an entity's backups, newest first.
        """
        entries = await list_backups(config, entity_name)
        return [asdict(entry) for entry in entries]

    @app.put(
        f"{prefix}/backups/{{entity_name}}/remark",
        dependencies=[Depends(verify_api_key)],
    )
    async def update_remark(entity_name: str, request: RemarkRequest) -> dict:
        """
        Set a backup's remark; an empty remark deletes it.
        """
        try:
            note_path = await set_annotation(
                config, entity_name, request.file_name, request.remark
            )
        except SaveKeeperError as e:
            raise _http_error(e)
        return {"remark_path": str(note_path) if note_path else None}

    @app.post(f"{prefix}/restore", dependencies=[Depends(verify_api_key)])
    async def restore_entity(request: RestoreRequest) -> dict:
        """
        Restore a backup over the live save directory.

        Failures report the stage the restore stopped at.
        """
        try:
            outcome = await restore(
                config,
                state,
                request.entity_name,
                request.path_template,
                request.archive_path,
                request.user_id,
            )
        except SaveKeeperError as e:
            raise _http_error(e)

        return {
            "target_path": outcome.target_path,
            "archive_path": outcome.archive_path,
            "extra_backup_path": outcome.extra_backup_path,
            "timestamp": outcome.timestamp,
            "config": outcome.config.model_dump(by_alias=True),
        }


@asynccontextmanager
async def savekeeper_lifespan(
    app: FastAPI,
    config: SaveKeeperConfig,
    prefix: str = "/api/savekeeper",
):
    """
    Lifespan context manager for FastAPI.

        app = FastAPI(lifespan=lambda app: savekeeper_lifespan(app, config))

    Args:
        app: FastAPI application
        config: SaveKeeper configuration
        prefix: URL prefix for endpoints
    """
    logger.info("savekeeper_lifespan_starting", workdir=str(config.workdir))

    state = initialize_state(config)
    app.state.savekeeper_state = state
    app.state.savekeeper_config = config

    register_savekeeper_routes(app, config, state, prefix)

    logger.info("savekeeper_lifespan_started")

    try:
        yield
    finally:
        logger.info("savekeeper_lifespan_stopped")


def get_savekeeper_state(app: FastAPI) -> SaveKeeperState:
    """
    Get SaveKeeper state from a FastAPI app.

    Raises:
        RuntimeError: If SaveKeeper is not initialized
    """
    state = getattr(app.state, "savekeeper_state", None)
    if not state:
        raise RuntimeError("SaveKeeper not initialized. Use savekeeper_lifespan first.")
    return state
