"""Exception hierarchy for mongotab."""

from __future__ import annotations


class MongotabError(Exception):
    """Base class for all mongotab errors."""


class StorageError(MongotabError):
    """Raised when a persisted artifact cannot be read or written."""


class SnapshotError(MongotabError):
    """Raised when a session snapshot is corrupt or has an unknown shape."""


class ClipboardError(MongotabError):
    """Raised when text cannot be placed on the clipboard."""


class DriverError(MongotabError):
    """Raised by document drivers for connection and query failures."""


class MissingDriverError(DriverError):
    """Raised when the optional driver package is not installed."""

    def __init__(self, driver_name: str, package_name: str, extra_name: str | None = None) -> None:
        self.driver_name = driver_name
        self.package_name = package_name
        self.extra_name = extra_name
        hint = f"pip install 'mongotab[{extra_name}]'" if extra_name else f"pip install {package_name}"
        super().__init__(f"{driver_name} support requires the '{package_name}' package ({hint})")


def describe_error(error: BaseException) -> str:
    """Return a single-line, human-readable description of an error."""
    message = str(error).strip()
    if not message:
        return error.__class__.__name__
    first_line = message.splitlines()[0]
    if len(first_line) > 200:
        first_line = first_line[:197] + "..."
    return first_line
