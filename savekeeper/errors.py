# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for SaveKeeper.

These helpers centralize wording for common failures so that all modules
present consistent, actionable messages.
"""

from pathlib import Path


def explain_missing_user_id() -> str:
    """
    Explain that a template needs a user id that was not supplied.
    """

    return (
        "The path template contains {SteamUID} but no user id was given. "
        "Pick a Steam account (see list_user_ids()) and pass user_id=..."
    )


def explain_steam_unavailable(reason: str) -> str:
    """
    Explain that the Steam install directory could not be determined.
    """

    return (
        f"Could not determine the Steam install directory: {reason}. "
        "Set SAVEKEEPER_STEAM_DIR or pass steam_dir=... to the path resolver."
    )


def explain_home_unavailable() -> str:
    """
    Explain that the user's home directory is unknown.
    """

    return "Could not determine the user home directory (USERPROFILE / HOME unset)."


def explain_source_missing(path: Path) -> str:
    """
    Explain that the directory to back up does not exist.
    """

    return f"Save directory does not exist, nothing to back up: {path}"


def explain_archive_missing(path: Path) -> str:
    """
    Explain that the selected archive file is gone.
    """

    return f"Backup archive not found: {path}"


def explain_unsupported_archive(path: Path, supported: str) -> str:
    """
    Explain that only one archive format can be restored.
    """

    return (
        f"Unsupported backup format: {path.name}. "
        f"Only {supported} archives can be restored."
    )


def explain_name_mismatch(file_name: str, entity_name: str) -> str:
    """
    Explain that a backup file does not belong to the given entity.
    """

    return f"Backup file {file_name!r} does not belong to {entity_name!r}."


def explain_unknown_entity(entity_name: str) -> str:
    """
    Explain that the config document has no entry for the entity.
    """

    return f"No configuration entry found for {entity_name!r}."


def explain_invalid_compress_level_env(value: str | None) -> str:
    """
    Explain that SAVEKEEPER_COMPRESS_LEVEL is invalid.
    """

    return (
        f"Invalid SAVEKEEPER_COMPRESS_LEVEL value: {value!r}. "
        "It must be an integer between 0 and 9."
    )


def explain_archive_exists(path: Path) -> str:
    """
    Explain that an archive with the same name is already stored.
    """

    return (
        f"An archive named {path.name} already exists and will not be replaced. "
        "Wait a second and try again."
    )
