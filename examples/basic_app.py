# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Example FastAPI Application with SaveKeeper Integration.

Serves the backup/restore endpoints for a local desktop frontend.

Run with:
    uvicorn examples.basic_app:app --reload

Environment variables:
    SAVEKEEPER_WORKDIR: Where config.json and backups live
    SAVEKEEPER_STEAM_DIR: Steam install directory (needed off Windows)
    SAVEKEEPER_API_KEY: API key for the endpoints
"""

from pathlib import Path

from fastapi import FastAPI

from savekeeper.builder import (
    build_config,
    create_empty_config,
    with_compress_level,
    with_workdir,
)
from savekeeper.env import create_config_from_env
from savekeeper.exceptions import ConfigurationError
from savekeeper.integrations.fastapi import savekeeper_lifespan


# Initialize configuration
try:
    savekeeper_config = create_config_from_env()
except ConfigurationError as e:
    print(f"Failed to create SaveKeeper config: {e}")
    # Use a local working directory for development
    savekeeper_config = build_config(
        with_compress_level(
            with_workdir(create_empty_config(), Path("./game-sl")),
            6,
        )
    )


app = FastAPI(
    title="SaveKeeper",
    description="Backup and restore for game save data",
    version="1.0.0",
    lifespan=lambda app: savekeeper_lifespan(app, savekeeper_config),
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "SaveKeeper is running",
        "docs": "/docs",
        "backups": "/api/savekeeper/backup-dir",
    }


# ============================================================================
# SaveKeeper Endpoints (registered on startup)
# ============================================================================
#
# GET  /api/savekeeper/config                    - Config document
# GET  /api/savekeeper/backup-dir                - Backup directory
# GET  /api/savekeeper/check-path                - Does a save path exist?
# POST /api/savekeeper/backups                   - Create a backup
# GET  /api/savekeeper/backups/{entity}          - List backups
# PUT  /api/savekeeper/backups/{entity}/remark   - Set / clear a remark
# POST /api/savekeeper/restore                   - Restore a backup
#
# All endpoints require: Authorization: Bearer <SAVEKEEPER_API_KEY>


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
