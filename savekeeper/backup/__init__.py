# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Engine - Creating backups and restoring them.
"""

from savekeeper.backup.manager import (
    BackupResult,
    backup_dir,
    extra_backup_dir,
    perform_backup,
)

from savekeeper.backup.restore import (
    RESTORE_PIPELINE,
    RestoreOutcome,
    restore_backup,
)

__all__ = [
    # Manager
    "BackupResult",
    "backup_dir",
    "extra_backup_dir",
    "perform_backup",
    # Restore
    "RESTORE_PIPELINE",
    "RestoreOutcome",
    "restore_backup",
]
