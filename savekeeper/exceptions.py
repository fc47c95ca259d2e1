# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
SaveKeeper Exceptions - Custom exceptions for the savekeeper package.

Every expected failure is raised as a SaveKeeperError subclass carrying an
ErrorKind, so callers can branch on the kind (e.g. disable retry for
invalid input) and otherwise show the message as-is.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure category shared by all savekeeper errors."""

    NOT_FOUND = "not_found"  # Archive or target missing
    INVALID_INPUT = "invalid_input"  # Bad extension, name mismatch, missing placeholder
    IO_FAILURE = "io_failure"  # Create/read/write/walk errors
    POLICY_VIOLATION = "policy_violation"  # Unsupported archive format for restore
    CONFIGURATION = "configuration"  # Invalid runtime config or config document


class RestoreStage(str, Enum):
    """Ordered stages of a restore. Values are the codes shown to users."""

    CHECK = "Check"
    PROTECTIVE_BACKUP = "ProtectiveBackup"
    REMOVE = "Remove"
    EXTRACT = "Extract"
    FINALIZE = "Finalize"


class SaveKeeperError(Exception):
    """Base exception for all SaveKeeper errors."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NotFoundError(SaveKeeperError):
    """Raised when an archive, target directory or entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidInputError(SaveKeeperError):
    """Raised when caller-supplied names, templates or extensions are invalid."""

    kind = ErrorKind.INVALID_INPUT


class IoFailureError(SaveKeeperError):
    """Raised when a filesystem or archive operation fails."""

    kind = ErrorKind.IO_FAILURE


class PolicyViolationError(SaveKeeperError):
    """Raised when an operation is refused by policy (e.g. unsupported format)."""

    kind = ErrorKind.POLICY_VIOLATION


class ConfigurationError(SaveKeeperError):
    """Raised when configuration is invalid."""

    kind = ErrorKind.CONFIGURATION


class RestoreError(SaveKeeperError):
    """
    Raised when a restore stops at one of its stages.

    The message is prefixed with the stage code, e.g. "[Extract] ...", and
    the kind is taken from the underlying cause.
    """

    def __init__(self, stage: RestoreStage, cause: SaveKeeperError):
        self.stage = stage
        self.cause = cause
        self.kind = cause.kind
        super().__init__(
            f"[{stage.value}] {cause.message}",
            details={**cause.details, "stage": stage.value},
        )
