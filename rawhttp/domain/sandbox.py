"""Filesystem sandbox utilities for safe path resolution."""

from pathlib import Path


class ForbiddenPath(Exception):
    """Raised when a requested name escapes the storage root."""


def resolve_storage_path(directory: str, name: str) -> Path:
    """Resolve a client-supplied file name inside the storage root."""
    if "\x00" in name:
        raise ForbiddenPath(name)

    directory_root = Path(directory).resolve()
    relative_part = name.lstrip("/")
    if not relative_part:
        raise ForbiddenPath(name)

    if ".." in Path(relative_part).parts:
        raise ForbiddenPath(name)

    target = (directory_root / relative_part).resolve()
    if directory_root not in target.parents:
        raise ForbiddenPath(name)

    return target
