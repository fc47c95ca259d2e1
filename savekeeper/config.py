# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Configuration - Immutable runtime configuration.

The configuration is frozen (immutable) after creation so the directory
layout cannot change between the stages of a backup or restore.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

# Name of the working directory created next to the program by default
WORK_DIR_NAME = "game-sl"

# Key of the restore safety switch inside the persisted settings
RESTORE_EXTRA_BACKUP_KEY = "restoreExtraBackup"


def _validate_dir_name(name: str) -> bool:
    """A directory name must be a single, non-empty path component."""
    if not name or name in (".", ".."):
        return False
    return "/" not in name and "\\" not in name


@dataclass(frozen=True)
class SaveKeeperConfig:
    """
    Immutable configuration for backup and restore.

    Layout under the working directory:
        {workdir}/{config_file_name}
        {workdir}/{backup_dir_name}/        user backups + remarks
        {workdir}/{extra_backup_dir_name}/  protective snapshots
    """

    # Root of all savekeeper files
    workdir: Path = field(default_factory=lambda: Path(WORK_DIR_NAME))

    # Persisted config document (settings + entities)
    config_file_name: str = "config.json"

    # User-initiated backups
    backup_dir_name: str = "backup"

    # Automatic snapshots taken before a restore
    extra_backup_dir_name: str = "extra_backup"

    # Deflate level for archive entries (0-9)
    compress_level: int = 6

    # Explicit Steam install directory (skips the registry lookup)
    steam_dir: Path | None = None

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        for attr in ("config_file_name", "backup_dir_name", "extra_backup_dir_name"):
            if not _validate_dir_name(getattr(self, attr)):
                errors.append(f"Invalid {attr}: {getattr(self, attr)!r}")

        if self.backup_dir_name == self.extra_backup_dir_name:
            errors.append("backup_dir_name and extra_backup_dir_name must differ")

        if not 0 <= self.compress_level <= 9:
            errors.append(f"compress_level must be 0-9, got {self.compress_level}")

        if errors:
            from savekeeper.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    @property
    def config_path(self) -> Path:
        return self.workdir / self.config_file_name

    @property
    def backup_path(self) -> Path:
        return self.workdir / self.backup_dir_name

    @property
    def extra_backup_path(self) -> Path:
        return self.workdir / self.extra_backup_dir_name

    def with_updates(self, **kwargs) -> "SaveKeeperConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return SaveKeeperConfig(**current)
