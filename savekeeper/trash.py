# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Trash - Removing live save directories recoverably.

Restore never deletes the live directory permanently; it goes to the
platform trash / recycle bin so a mistake can still be undone by hand.
"""

from pathlib import Path
from typing import Protocol

import structlog
from send2trash import send2trash
from send2trash.exceptions import TrashPermissionError

from savekeeper.exceptions import IoFailureError

logger = structlog.get_logger()


class TrashFacility(Protocol):
    """Moves a path to a place the user can recover it from."""

    def move_to_trash(self, path: Path) -> None: ...


class SystemTrash:
    """TrashFacility using the platform trash (via Send2Trash)."""

    def move_to_trash(self, path: Path) -> None:
        """
        Raises:
            IoFailureError: If the trash is unavailable or the move fails
        """
        try:
            send2trash(str(path))
        except (TrashPermissionError, OSError) as e:
            raise IoFailureError(
                f"Failed to move to trash: {e}",
                details={"path": str(path)},
            ) from e

        logger.info("moved_to_trash", path=str(path))
