# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Paths - Resolving save-path templates.

Templates may contain these placeholders:

    {Steam}     Steam install directory (registry on Windows, or override)
    {SteamUID}  numeric Steam account id, supplied by the caller
    {AppData}   parent of %APPDATA% (holds Roaming/Local/LocalLow)
    {User}      user home directory
    {Home}      same as {User}
"""

import os
import sys
from pathlib import Path
from typing import List, Mapping, Protocol

import structlog

from savekeeper.errors import (
    explain_home_unavailable,
    explain_missing_user_id,
    explain_steam_unavailable,
)
from savekeeper.exceptions import InvalidInputError

logger = structlog.get_logger()


class PathResolver(Protocol):
    """Maps a path template to a concrete directory."""

    def resolve(self, template: str, user_id: str | None = None) -> Path: ...


class TemplatePathResolver:
    """
    PathResolver for the placeholders listed in the module docstring.

    Args:
        steam_dir: Steam install directory; skips the registry lookup
        environ: Environment to read USERPROFILE/HOME/APPDATA from
            (default: os.environ)
    """

    def __init__(
        self,
        steam_dir: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self.steam_dir = str(steam_dir) if steam_dir else None
        self.environ = os.environ if environ is None else environ

    def user_home(self) -> str:
        home = self.environ.get("USERPROFILE") or self.environ.get("HOME")
        if not home:
            raise InvalidInputError(explain_home_unavailable())
        return home

    def appdata_root(self) -> str:
        roaming = self.environ.get("APPDATA")
        if roaming:
            parent = Path(roaming).parent
            if parent != Path(roaming):
                return str(parent)
        return str(Path(self.user_home()) / "AppData")

    def steam_install_dir(self) -> str:
        """
        Steam install directory.

        Raises:
            InvalidInputError: If there is no override and the registry
                cannot be read (always the case off Windows)
        """
        if self.steam_dir:
            return self.steam_dir

        if sys.platform != "win32":
            raise InvalidInputError(explain_steam_unavailable("only supported on Windows"))

        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, r"Software\Valve\Steam") as key:
                value, _ = winreg.QueryValueEx(key, "SteamPath")
        except OSError as e:
            raise InvalidInputError(explain_steam_unavailable(str(e))) from e
        return str(value)

    def resolve(self, template: str, user_id: str | None = None) -> Path:
        """
        Replace placeholders in a template.

        Raises:
            InvalidInputError: If a placeholder is present but its value
                cannot be determined (e.g. {SteamUID} without user_id)
        """
        path_str = template

        if "{Steam}" in path_str:
            path_str = path_str.replace("{Steam}", self.steam_install_dir())

        if "{SteamUID}" in path_str:
            if not user_id:
                raise InvalidInputError(
                    explain_missing_user_id(),
                    details={"template": template},
                )
            path_str = path_str.replace("{SteamUID}", user_id)

        if "{AppData}" in path_str:
            path_str = path_str.replace("{AppData}", self.appdata_root())

        if "{User}" in path_str or "{Home}" in path_str:
            home = self.user_home()
            path_str = path_str.replace("{User}", home).replace("{Home}", home)

        return Path(path_str)

    def list_user_ids(self) -> List[str]:
        """
        Numeric account directories under {Steam}/userdata.

        Any failure (no Steam, no userdata) yields an empty list.
        """
        try:
            userdata = Path(self.steam_install_dir()) / "userdata"
            children = sorted(userdata.iterdir(), key=lambda p: p.name)
        except (InvalidInputError, OSError) as e:
            logger.debug("user_ids_unavailable", error=str(e))
            return []

        return [p.name for p in children if p.is_dir() and p.name.isdigit()]
