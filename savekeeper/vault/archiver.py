# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Archiver - Directory tree <-> .zip package.

Archives store every file under its "/"-separated path relative to the
source root and every directory as an explicit "name/" entry, so empty
directories survive a round trip. File data is streamed in both
directions; memory use does not grow with the tree.

The blocking work runs on a single-worker thread pool: one archive job at
a time, without blocking the event loop.
"""

import asyncio
import os
import re
import shutil
import sys
import zipfile
import zlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Tuple

import structlog

from savekeeper.errors import explain_archive_exists
from savekeeper.exceptions import IoFailureError

logger = structlog.get_logger()

# Thread pool for blocking archive I/O
_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="savekeeper-archive")

# The one format restore supports; listing also shows reserved formats
ARCHIVE_SUFFIX = ".zip"
LISTED_SUFFIXES = (".zip", ".7z")

DEFAULT_COMPRESS_LEVEL = 6
COPY_CHUNK_SIZE = 1024 * 1024

_DRIVE_RE = re.compile(r"^[A-Za-z]:")

# What zipfile raises for entries it cannot read: unsupported
# compression (e.g. deflate64), encryption, corrupt headers
_READ_ERRORS = (
    OSError,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
    ValueError,
)


def _walk(root: Path) -> Iterator[Tuple[Path, str, bool]]:
    """
    Depth-first walk yielding (path, archive name, is_dir), root excluded.

    Entries are visited in name order so archives are reproducible.
    Symlinked directories are not followed.
    """
    stack: List[Tuple[Path, str]] = [(root, "")]
    while stack:
        directory, prefix = stack.pop()
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        subdirs: List[Tuple[Path, str]] = []
        for entry in entries:
            name = f"{prefix}{entry.name}"
            if entry.is_dir(follow_symlinks=False):
                yield Path(entry.path), name, True
                subdirs.append((Path(entry.path), f"{name}/"))
            elif entry.is_file():
                yield Path(entry.path), name, False

        # Reversed so the first subdirectory is walked first
        stack.extend(reversed(subdirs))


def zip_directory(
    src_dir: Path,
    dest: Path,
    compress_level: int = DEFAULT_COMPRESS_LEVEL,
) -> Path:
    """
    Archive a directory tree into a .zip file.

    The archive is written to a temporary sibling and renamed into place,
    so a listed archive is always complete. An existing archive at dest is
    never replaced. On failure the temporary file is left behind for the
    caller to inspect or remove.

    Args:
        src_dir: Directory to archive (the root itself is not an entry)
        dest: Path of the .zip to create
        compress_level: Deflate level 0-9

    Returns:
        dest

    Raises:
        IoFailureError: If the source is missing, dest already exists or
            any read/write fails
    """
    if not src_dir.is_dir():
        raise IoFailureError(
            f"Source directory does not exist: {src_dir}",
            details={"src_dir": str(src_dir)},
        )

    if dest.exists():
        raise IoFailureError(explain_archive_exists(dest), details={"dest": str(dest)})

    temp_path = dest.with_name(dest.name + ".tmp")
    file_count = 0
    dir_count = 0

    try:
        with zipfile.ZipFile(
            temp_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compress_level,
            strict_timestamps=False,
        ) as zf:
            for path, arcname, is_dir in _walk(src_dir):
                # ZipFile.write() stores a directory as an explicit "name/" entry
                zf.write(path, arcname=arcname)
                if is_dir:
                    dir_count += 1
                else:
                    file_count += 1

        if dest.exists():
            raise IoFailureError(explain_archive_exists(dest), details={"dest": str(dest)})
        os.replace(temp_path, dest)

    except (OSError, ValueError) as e:
        raise IoFailureError(
            f"Failed to create backup archive: {e}",
            details={"src_dir": str(src_dir), "dest": str(dest)},
        ) from e

    logger.debug(
        "archive_written",
        dest=str(dest),
        files=file_count,
        directories=dir_count,
        size=dest.stat().st_size,
    )

    return dest


def _safe_member_path(dest_dir: Path, member: str) -> Path | None:
    """
    Map an archive entry name to a path under dest_dir.

    Returns None for names that are absolute, start with a drive letter or
    climb out of dest_dir via "..". Colons elsewhere are legal file name
    characters except on Windows.
    """
    normalized = member.replace("\\", "/")
    if normalized.startswith("/"):
        return None

    parts = [p for p in PurePosixPath(normalized).parts if p not in ("", ".")]
    if not parts:
        return None
    if _DRIVE_RE.match(parts[0]) or ".." in parts:
        return None
    if sys.platform == "win32" and any(":" in p for p in parts):
        return None

    return dest_dir.joinpath(*parts)


def unzip_archive(package: Path, dest_dir: Path) -> int:
    """
    Extract a .zip package into a directory.

    Every entry name is checked before anything is written; one unsafe
    entry rejects the whole package. Existing files are overwritten.
    A partially extracted tree is NOT cleaned up on failure.

    Args:
        package: Path to the .zip file
        dest_dir: Directory to extract into (created if needed)

    Returns:
        Number of entries extracted

    Raises:
        IoFailureError: If the package is malformed or unsafe, or a
            read/write fails
    """
    try:
        with zipfile.ZipFile(package, "r") as zf:
            members = zf.infolist()

            targets: List[Tuple[zipfile.ZipInfo, Path]] = []
            for info in members:
                target = _safe_member_path(dest_dir, info.filename)
                if target is None:
                    raise IoFailureError(
                        f"Unsafe path in archive: {info.filename}",
                        details={"package": str(package)},
                    )
                targets.append((info, target))

            dest_dir.mkdir(parents=True, exist_ok=True)

            for info, target in targets:
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info, "r") as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)

    except IoFailureError:
        raise
    except _READ_ERRORS as e:
        raise IoFailureError(
            f"Failed to extract backup archive: {e}",
            details={"package": str(package), "dest_dir": str(dest_dir)},
        ) from e

    logger.debug(
        "archive_extracted",
        package=str(package),
        dest_dir=str(dest_dir),
        entries=len(targets),
    )

    return len(targets)


async def archive_directory(
    src_dir: Path,
    dest: Path,
    compress_level: int = DEFAULT_COMPRESS_LEVEL,
) -> Path:
    """Async wrapper around zip_directory()."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        _executor, zip_directory, src_dir, dest, compress_level
    )


async def extract_archive(package: Path, dest_dir: Path) -> int:
    """Async wrapper around unzip_archive()."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor, unzip_archive, package, dest_dir)


def is_restorable(path: Path) -> bool:
    """Check the extension against the one format restore supports."""
    return path.suffix.lower() == ARCHIVE_SUFFIX
