# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Config Store - The persisted settings/entities document.

The document lives in {workdir}/config.json:

    {
      "settings": {"restoreExtraBackup": true, "useRelativeTime": true},
      "games": [{"name": "...", "path": "{AppData}/...", "icon": "", "lastSave": 0, "type": "userdata"}],
      "version": 1
    }

Backup and restore only need two things from it (ConfigStore protocol):
the restore safety flag and a place to record the latest save time.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Protocol

import aiofiles
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from savekeeper.errors import explain_unknown_entity
from savekeeper.exceptions import ConfigurationError, IoFailureError, NotFoundError

logger = structlog.get_logger()

# Settings every document must carry; filled in on read when absent
DEFAULT_SETTINGS: Dict[str, Any] = {
    "restoreExtraBackup": True,
    "useRelativeTime": True,
}

DEFAULT_DOCUMENT: Dict[str, Any] = {
    "settings": dict(DEFAULT_SETTINGS),
    "games": [],
    "version": 1,
}


class GameEntry(BaseModel):
    """One backed-up application and where its saves live."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str
    icon: str = ""
    last_save: int | None = Field(default=None, alias="lastSave")
    kind: str | None = Field(default=None, alias="type")


class AppConfig(BaseModel):
    """The whole persisted document."""

    settings: Dict[str, Any] = Field(default_factory=dict)
    games: List[GameEntry] = Field(default_factory=list)
    version: int = 1

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_must_be_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    def find_game(self, name: str) -> GameEntry | None:
        return next((g for g in self.games if g.name == name), None)


class ConfigStore(Protocol):
    """What backup and restore need from configuration persistence."""

    async def read_policy_flag(self, key: str, default: bool) -> bool: ...

    async def record_timestamp(self, entity_name: str, millis: int) -> AppConfig: ...


def _ensure_settings_defaults(document: AppConfig) -> bool:
    """Fill in missing default settings. Returns True if anything changed."""
    changed = False
    for key, value in DEFAULT_SETTINGS.items():
        if key not in document.settings:
            document.settings[key] = value
            changed = True
    return changed


class JsonConfigStore:
    """ConfigStore backed by a pretty-printed JSON file."""

    def __init__(self, config_path: Path):
        self.config_path = config_path

    async def _ensure_file(self) -> None:
        """Create the default document if there is none yet."""
        if self.config_path.exists():
            return
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        await self._write_text(json.dumps(DEFAULT_DOCUMENT, indent=2))
        logger.info("config_file_created", path=str(self.config_path))

    async def _write_text(self, content: str) -> None:
        # Write atomically: temp file -> rename
        temp_path = self.config_path.with_name(self.config_path.name + ".tmp")
        try:
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(content)
            os.replace(temp_path, self.config_path)
        except OSError as e:
            raise IoFailureError(
                f"Failed to write config: {e}",
                details={"path": str(self.config_path)},
            ) from e

    async def read(self) -> AppConfig:
        """
        Load the document, creating it if missing.

        Missing default settings are added and written back so older files
        keep working.

        Raises:
            ConfigurationError: If the file is not a valid document
            IoFailureError: If the file cannot be read or written
        """
        await self._ensure_file()

        try:
            async with aiofiles.open(self.config_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise IoFailureError(
                f"Failed to read config: {e}",
                details={"path": str(self.config_path)},
            ) from e

        try:
            document = AppConfig.model_validate_json(content)
        except ValidationError as e:
            raise ConfigurationError(
                f"Failed to parse config: {e}",
                details={"path": str(self.config_path)},
            ) from e

        if _ensure_settings_defaults(document):
            await self.write(document)

        return document

    async def write(self, document: AppConfig) -> None:
        """Persist the document (pretty-printed, camelCase keys)."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        await self._write_text(document.model_dump_json(by_alias=True, indent=2))

    async def update_setting(self, key: str, value: Any) -> AppConfig:
        """Set one key in settings and persist. Returns the new document."""
        document = await self.read()
        document.settings[key] = value
        await self.write(document)
        logger.info("setting_updated", key=key)
        return document

    async def read_policy_flag(self, key: str, default: bool) -> bool:
        """Read a boolean setting; anything that is not a bool yields default."""
        document = await self.read()
        value = document.settings.get(key, default)
        return value if isinstance(value, bool) else default

    async def record_timestamp(self, entity_name: str, millis: int) -> AppConfig:
        """
        Store the latest save time of an entity.

        Raises:
            NotFoundError: If the entity has no entry in the document
        """
        document = await self.read()
        entry = document.find_game(entity_name)
        if entry is None:
            raise NotFoundError(
                explain_unknown_entity(entity_name),
                details={"entity": entity_name},
            )

        entry.last_save = millis
        await self.write(document)
        logger.debug("last_save_recorded", entity=entity_name, timestamp=millis)
        return document

    async def reorder_games(self, order: List[str]) -> AppConfig:
        """
        Reorder entries: names in `order` first, then every remaining entry
        in its previous order. Unknown names are ignored; nothing is lost.
        """
        document = await self.read()
        by_name = {g.name: g for g in document.games}

        reordered: List[GameEntry] = []
        for name in order:
            entry = by_name.pop(name, None)
            if entry is not None:
                reordered.append(entry)
        for entry in document.games:
            if entry.name in by_name:
                reordered.append(by_name.pop(entry.name))

        document.games = reordered
        await self.write(document)
        return document
