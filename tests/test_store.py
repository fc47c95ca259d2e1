# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tests for the config document and path template resolution.
"""

import json
import sys
from pathlib import Path

import pytest

from conftest import ENTITY, ODD_ENTITY
from savekeeper.exceptions import ConfigurationError, InvalidInputError, NotFoundError
from savekeeper.paths import TemplatePathResolver
from savekeeper.store import DEFAULT_SETTINGS, JsonConfigStore


class TestJsonConfigStore:
    """Tests for JsonConfigStore."""

    @pytest.mark.asyncio
    async def test_creates_default_document(self, temp_dir: Path):
        path = temp_dir / "nested" / "config.json"
        store = JsonConfigStore(path)

        document = await store.read()

        assert path.exists()
        assert document.settings == DEFAULT_SETTINGS
        assert document.games == []
        assert document.version == 1

    @pytest.mark.asyncio
    async def test_missing_settings_are_written_back(self, temp_dir: Path):
        path = temp_dir / "config.json"
        path.write_text(
            json.dumps({
                "settings": {"useRelativeTime": False},
                "games": [{"name": "A", "path": "{Home}/a", "lastSave": 5, "type": "userdata"}],
                "version": 1,
            }),
            encoding="utf-8",
        )
        store = JsonConfigStore(path)

        document = await store.read()

        assert document.settings == {"useRelativeTime": False, "restoreExtraBackup": True}
        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert on_disk["settings"]["restoreExtraBackup"] is True
        assert on_disk["games"][0]["lastSave"] == 5
        assert on_disk["games"][0]["type"] == "userdata"

    @pytest.mark.asyncio
    async def test_invalid_document(self, temp_dir: Path):
        path = temp_dir / "config.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            await JsonConfigStore(path).read()

    @pytest.mark.asyncio
    async def test_record_timestamp(self, json_store):
        document = await json_store.record_timestamp(ENTITY, 1700000000000)

        assert document.find_game(ENTITY).last_save == 1700000000000
        reread = await json_store.read()
        assert reread.find_game(ENTITY).last_save == 1700000000000
        assert reread.find_game(ODD_ENTITY).last_save is None

    @pytest.mark.asyncio
    async def test_record_timestamp_unknown_entity(self, json_store):
        with pytest.raises(NotFoundError):
            await json_store.record_timestamp("Unknown Game", 1)

    @pytest.mark.asyncio
    async def test_policy_flag(self, json_store):
        assert await json_store.read_policy_flag("restoreExtraBackup", True) is True

        await json_store.update_setting("restoreExtraBackup", False)
        assert await json_store.read_policy_flag("restoreExtraBackup", True) is False

    @pytest.mark.asyncio
    async def test_non_bool_policy_flag_uses_default(self, json_store):
        await json_store.update_setting("restoreExtraBackup", "no")

        assert await json_store.read_policy_flag("restoreExtraBackup", True) is True
        assert await json_store.read_policy_flag("missingKey", False) is False

    @pytest.mark.asyncio
    async def test_reorder_games(self, json_store):
        document = await json_store.read()
        document.games.append(document.games[0].model_copy(update={"name": "Third"}))
        await json_store.write(document)

        reordered = await json_store.reorder_games(["Third", "nope", ENTITY])

        assert [g.name for g in reordered.games] == ["Third", ENTITY, ODD_ENTITY]
        reread = await json_store.read()
        assert [g.name for g in reread.games] == ["Third", ENTITY, ODD_ENTITY]


class TestTemplatePathResolver:
    """Tests for TemplatePathResolver."""

    def test_home_and_user(self, temp_dir: Path):
        resolver = TemplatePathResolver(environ={"HOME": str(temp_dir)})

        assert resolver.resolve("{Home}/saves") == temp_dir / "saves"
        assert resolver.resolve("{User}/saves") == temp_dir / "saves"

    def test_userprofile_preferred(self, temp_dir: Path):
        resolver = TemplatePathResolver(
            environ={"USERPROFILE": str(temp_dir / "win"), "HOME": str(temp_dir)}
        )

        assert resolver.resolve("{Home}") == temp_dir / "win"

    def test_appdata(self, temp_dir: Path):
        roaming = temp_dir / "AppData" / "Roaming"
        resolver = TemplatePathResolver(
            environ={"HOME": str(temp_dir), "APPDATA": str(roaming)}
        )

        assert resolver.resolve("{AppData}/LocalLow/Game") == temp_dir / "AppData" / "LocalLow" / "Game"

    def test_appdata_falls_back_to_home(self, temp_dir: Path):
        resolver = TemplatePathResolver(environ={"HOME": str(temp_dir)})

        assert resolver.resolve("{AppData}/Roaming") == temp_dir / "AppData" / "Roaming"

    def test_steam_override_and_user_id(self, temp_dir: Path):
        resolver = TemplatePathResolver(steam_dir=temp_dir / "steam", environ={})

        path = resolver.resolve("{Steam}/userdata/{SteamUID}/504230", user_id="12345")

        assert path == temp_dir / "steam" / "userdata" / "12345" / "504230"

    def test_missing_user_id(self, temp_dir: Path):
        resolver = TemplatePathResolver(steam_dir=temp_dir / "steam", environ={})

        with pytest.raises(InvalidInputError):
            resolver.resolve("{Steam}/userdata/{SteamUID}/504230")

    def test_missing_home(self):
        resolver = TemplatePathResolver(environ={})

        with pytest.raises(InvalidInputError):
            resolver.resolve("{Home}/saves")

    @pytest.mark.skipif(sys.platform == "win32", reason="registry lookup exists on Windows")
    def test_steam_unavailable_without_override(self):
        resolver = TemplatePathResolver(environ={})

        with pytest.raises(InvalidInputError):
            resolver.resolve("{Steam}/userdata")

    def test_list_user_ids(self, temp_dir: Path):
        userdata = temp_dir / "steam" / "userdata"
        (userdata / "12345").mkdir(parents=True)
        (userdata / "67890").mkdir()
        (userdata / "anonymous").mkdir()
        (userdata / "99999.bak").write_text("x", encoding="utf-8")
        resolver = TemplatePathResolver(steam_dir=temp_dir / "steam", environ={})

        assert resolver.list_user_ids() == ["12345", "67890"]

    def test_list_user_ids_without_userdata(self, temp_dir: Path):
        resolver = TemplatePathResolver(steam_dir=temp_dir / "missing", environ={})

        assert resolver.list_user_ids() == []
