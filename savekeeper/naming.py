# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive naming convention.

    {entity}-Backup-YYYYMMDD-HHMMSS.zip       user backup
    {entity}-Backup-YYYYMMDD-HHMMSS.txt       its remark (sidecar)
    {entity}-ExtraBackup-YYYYMMDD-HHMMSS.zip  snapshot taken before a restore

Timestamps are local wall-clock time with second precision.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Tuple

BACKUP_MARKER = "-Backup-"
EXTRA_BACKUP_MARKER = "-ExtraBackup-"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# Characters that are illegal in a file name on at least one platform
RESERVED_CHARS = ("<", ">", ":", '"', "|", "?", "*", "/", "\\")

_TIMESTAMP_RE = re.compile(r"^\d{8}-\d{6}$")
_TRAILING_JUNK_RE = re.compile(r"[.\s]+$")


def sanitize_filename(name: str) -> str:
    """
    Turn an untrusted entity name into a safe file name fragment.

    Reserved characters become underscores; surrounding whitespace and any
    trailing run of dots/whitespace are removed.
    """
    safe = name
    for char in RESERVED_CHARS:
        safe = safe.replace(char, "_")
    return _TRAILING_JUNK_RE.sub("", safe.strip())


def now_timestamp(now: datetime | None = None) -> Tuple[str, int]:
    """
    Return (file name tag, epoch millis) for a local wall-clock instant.

    The millis are derived from the truncated-to-seconds instant so that the
    tag and the number always describe the same moment.
    """
    local = (now or datetime.now()).replace(microsecond=0)
    return local.strftime(TIMESTAMP_FORMAT), int(local.timestamp() * 1000)


def encode_backup_stem(safe_name: str, now: datetime | None = None) -> str:
    tag, _ = now_timestamp(now)
    return f"{safe_name}{BACKUP_MARKER}{tag}"


def encode_extra_backup_stem(safe_name: str, now: datetime | None = None) -> str:
    tag, _ = now_timestamp(now)
    return f"{safe_name}{EXTRA_BACKUP_MARKER}{tag}"


def backup_prefix(entity_name: str) -> str:
    """Prefix every user backup file of an entity starts with."""
    return f"{sanitize_filename(entity_name)}-Backup"


def decode_timestamp(file_name: str) -> int | None:
    """
    Recover epoch millis from a backup file name.

    Returns None when the marker is absent, the timestamp is malformed, or
    the local time falls into a DST gap or overlap.
    """
    # Last marker wins: the entity name itself may contain "-Backup-"
    _, marker, tail = file_name.rpartition(BACKUP_MARKER)
    if not marker:
        return None

    ts_part = tail.split(".")[0]
    if not _TIMESTAMP_RE.match(ts_part):
        return None

    try:
        naive = datetime.strptime(ts_part, TIMESTAMP_FORMAT)
    except ValueError:
        return None

    # Both folds map to the same instant only for unambiguous local times
    earlier = naive.replace(fold=0).timestamp()
    later = naive.replace(fold=1).timestamp()
    if earlier != later:
        return None

    return int(earlier * 1000)


def sidecar_path(archive_path: Path) -> Path:
    """Remark file belonging to an archive."""
    return archive_path.with_suffix(".txt")
