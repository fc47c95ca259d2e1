# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Vault - Archive format and the catalog of stored backups.
"""

from savekeeper.vault.archiver import (
    ARCHIVE_SUFFIX,
    archive_directory,
    extract_archive,
    unzip_archive,
    zip_directory,
)

from savekeeper.vault.catalog import (
    BackupEntry,
    TimeSource,
    list_backups,
    read_annotation,
    set_annotation,
)

__all__ = [
    # Archiver
    "ARCHIVE_SUFFIX",
    "archive_directory",
    "extract_archive",
    "unzip_archive",
    "zip_directory",
    # Catalog
    "BackupEntry",
    "TimeSource",
    "list_backups",
    "read_annotation",
    "set_annotation",
]
