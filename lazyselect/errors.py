"""Operation error taxonomy shared by the tree model and the mutation coordinator."""

from __future__ import annotations

import errno
from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    IN_USE = "in_use"
    NAME_COLLISION = "name_collision"
    INVALID_NAME = "invalid_name"
    SELF_CONTAINMENT = "self_containment"
    OTHER_IO = "other_io"
    UNEXPECTED = "unexpected"


class OperationError(Exception):
    """Base class for every failure surfaced to the presentation layer."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, path: Path | None, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.message = message

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


class NotFoundError(OperationError):
    kind = ErrorKind.NOT_FOUND


class AccessDeniedError(OperationError):
    kind = ErrorKind.ACCESS_DENIED


class InUseError(OperationError):
    kind = ErrorKind.IN_USE


class NameCollisionError(OperationError):
    kind = ErrorKind.NAME_COLLISION


class InvalidNameError(OperationError):
    kind = ErrorKind.INVALID_NAME


class EmptyNameError(InvalidNameError):
    pass


class ReservedCharacterError(InvalidNameError):
    pass


class UnchangedNameError(InvalidNameError):
    pass


class SelfContainmentError(OperationError):
    kind = ErrorKind.SELF_CONTAINMENT


class OtherIOError(OperationError):
    kind = ErrorKind.OTHER_IO


class UnexpectedError(OperationError):
    kind = ErrorKind.UNEXPECTED


# errno values raised while another process holds the file open
_IN_USE_ERRNOS = frozenset(
    code for code in (getattr(errno, "EBUSY", None), getattr(errno, "ETXTBSY", None)) if code is not None
)
# ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION
_IN_USE_WINERRORS = frozenset({32, 33})


def classify_os_error(exc: OSError, path: Path | None) -> OperationError:
    """Map an ``OSError`` raised by a disk operation onto the taxonomy."""
    detail = exc.strerror or str(exc) or exc.__class__.__name__
    winerror = getattr(exc, "winerror", None)
    if winerror in _IN_USE_WINERRORS or exc.errno in _IN_USE_ERRNOS:
        return InUseError(path, f"In use by another process ({detail})")
    if isinstance(exc, PermissionError):
        return AccessDeniedError(path, f"Access denied ({detail})")
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(path, "No longer exists")
    if isinstance(exc, FileExistsError):
        return NameCollisionError(path, "Already exists")
    return OtherIOError(path, f"I/O error ({detail})")


__all__ = [
    "AccessDeniedError",
    "EmptyNameError",
    "ErrorKind",
    "InUseError",
    "InvalidNameError",
    "NameCollisionError",
    "NotFoundError",
    "OperationError",
    "OtherIOError",
    "ReservedCharacterError",
    "SelfContainmentError",
    "UnchangedNameError",
    "UnexpectedError",
    "classify_os_error",
]
