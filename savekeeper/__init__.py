# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper - Local backup and restore for application save data.

Archives a save directory into a timestamped .zip, lists and annotates
those archives, and restores them with a protective snapshot, trash
instead of delete, and rollback if extraction fails. Package name:
savekeeper.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from savekeeper.builder import create_config
from savekeeper.env import create_config_from_env

# Core functions
from savekeeper.core import (
    initialize_state,
    backup,
    list_backups,
    set_annotation,
    restore,
    get_backup_dir,
    check_save_path,
)

from savekeeper.exceptions import (
    ErrorKind,
    RestoreStage,
    SaveKeeperError,
    RestoreError,
)

__all__ = [
    # Version
    "__version__",
    # Configuration creation
    "create_config",
    "create_config_from_env",
    # Core operations
    "initialize_state",
    "backup",
    "list_backups",
    "set_annotation",
    "restore",
    "get_backup_dir",
    "check_save_path",
    # Errors
    "ErrorKind",
    "RestoreStage",
    "SaveKeeperError",
    "RestoreError",
]
