# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Builder - Functional builder pattern for configuration.

Each function takes a config dict and returns a new dict with the
modification applied (immutable updates).
"""

import sys
from pathlib import Path
from typing import Any, Callable, Dict

from savekeeper.config import WORK_DIR_NAME, SaveKeeperConfig


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def default_workdir() -> Path:
    """
    Working directory next to the running program, as a portable app keeps it.

    Falls back to the current directory when running from an interpreter
    without a script path (e.g. an interactive session).
    """
    program = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    base = program.resolve().parent if program and program.name else Path.cwd()
    return base / WORK_DIR_NAME


def create_empty_config() -> ConfigDict:
    """
    Create an initial configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "workdir": default_workdir(),
        "config_file_name": "config.json",
        "backup_dir_name": "backup",
        "extra_backup_dir_name": "extra_backup",
        "compress_level": 6,
        "steam_dir": None,
    }


def with_workdir(config: ConfigDict, workdir: Path | str) -> ConfigDict:
    """
    Set the working directory holding config and backups.

    Args:
        config: Current configuration dictionary
        workdir: Directory path

    Returns:
        New configuration dictionary with workdir set
    """
    return {**config, "workdir": Path(workdir)}


def with_compress_level(config: ConfigDict, level: int) -> ConfigDict:
    """
    Set the deflate level used for archive entries.

    Args:
        config: Current configuration dictionary
        level: 0 (store) to 9 (smallest)

    Returns:
        New configuration dictionary with compress_level set
    """
    if not 0 <= level <= 9:
        raise ValueError(f"compress_level must be 0-9, got {level}")
    return {**config, "compress_level": level}


def with_steam_dir(config: ConfigDict, steam_dir: Path | str) -> ConfigDict:
    """
    Pin the Steam install directory instead of reading the registry.
    """
    return {**config, "steam_dir": Path(steam_dir)}


def build_config(config_dict: ConfigDict) -> SaveKeeperConfig:
    """
    Validate and build an immutable SaveKeeperConfig from a dictionary.

    Raises:
        ConfigurationError: If validation fails
    """
    return SaveKeeperConfig(**config_dict)


def build_from_steps(*steps: BuilderFunc) -> SaveKeeperConfig:
    """
    Build config by applying a sequence of builder functions.

    Example:
        config = build_from_steps(
            lambda c: with_workdir(c, "/srv/saves"),
            lambda c: with_compress_level(c, 9),
        )
    """
    config = create_empty_config()
    for step in steps:
        config = step(config)
    return build_config(config)


def create_config(
    workdir: str | Path | None = None,
    *,
    compress_level: int = 6,
    steam_dir: str | Path | None = None,
    **kwargs: Any,
) -> SaveKeeperConfig:
    """
    Create SaveKeeper configuration from simple parameters.

    This is the recommended user-facing API for creating configurations.

    Args:
        workdir: Working directory (default: "game-sl" next to the program)
        compress_level: Deflate level 0-9 (default: 6)
        steam_dir: Steam install directory override (optional)
        **kwargs: Additional configuration options

    Returns:
        Validated, immutable SaveKeeperConfig instance
    """
    config_dict = create_empty_config()

    if workdir:
        config_dict = with_workdir(config_dict, workdir)

    config_dict = with_compress_level(config_dict, compress_level)

    if steam_dir:
        config_dict = with_steam_dir(config_dict, steam_dir)

    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)
