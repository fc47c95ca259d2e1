# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers.
"""

from __future__ import annotations

import os

from savekeeper.builder import create_config
from savekeeper.config import SaveKeeperConfig
from savekeeper.errors import explain_invalid_compress_level_env
from savekeeper.exceptions import ConfigurationError


def _parse_compress_level(value: str | None) -> int:
    if not value:
        return 6
    try:
        level = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_compress_level_env(value)) from exc
    if not 0 <= level <= 9:
        raise ConfigurationError(explain_invalid_compress_level_env(value))
    return level


def create_config_from_env() -> SaveKeeperConfig:
    """
    Create a SaveKeeperConfig from environment variables.

    Optional environment variables:
        - SAVEKEEPER_WORKDIR: Working directory (default: "game-sl" next to the program)
        - SAVEKEEPER_COMPRESS_LEVEL: Deflate level 0-9 (default: 6)
        - SAVEKEEPER_STEAM_DIR: Steam install directory override
    """

    return create_config(
        workdir=os.getenv("SAVEKEEPER_WORKDIR") or None,
        compress_level=_parse_compress_level(os.getenv("SAVEKEEPER_COMPRESS_LEVEL")),
        steam_dir=os.getenv("SAVEKEEPER_STEAM_DIR") or None,
    )
