"""Filesystem helpers used by the workspace organizer."""
from __future__ import annotations

import errno
import os
import re
from datetime import datetime
from pathlib import Path

_DUPLICATE_SUFFIX = re.compile(r"^(?P<base>.+) \((?P<counter>\d+)\)$")
_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


class WorkspacePathError(ValueError):
    """Raised when a requested path resolves outside the workspace root."""


def ensure_directory(path: Path) -> Path:
    """Ensure that *path* exists as a directory and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_unique_path(candidate: Path, *, source: Path | None = None) -> Path:
    """Return a path derived from *candidate* that nothing occupies.

    ``candidate`` is returned unchanged when it is free or when it is the
    *source* itself. Otherwise `` (1)``, `` (2)``, ... is inserted before the
    extension until a free name is found. Numbering restarts from the
    canonical name, so a taken ``a (1).txt`` yields ``a (2).txt`` rather than
    ``a (1) (1).txt``. Only existence is probed; nothing is created.
    """

    if source is not None and candidate == source:
        return candidate
    if not _occupied(candidate):
        return candidate

    base, extension = os.path.splitext(canonical_name(candidate.name))
    counter = 1
    while True:
        probe = candidate.with_name(f"{base} ({counter}){extension}")
        if source is not None and probe == source:
            return probe
        if not _occupied(probe):
            return probe
        counter += 1


def _occupied(path: Path) -> bool:
    # Broken symlinks still occupy the name.
    return os.path.lexists(path)


def split_duplicate_suffix(file_name: str) -> tuple[str, int | None]:
    """Split ``name (n).ext`` into ``("name.ext", n)``.

    Stacked suffixes such as ``name (1) (2).ext`` are all stripped and the
    outermost counter is returned. Names without a duplicate suffix are
    returned unchanged with ``None``.
    """

    stem, extension = os.path.splitext(file_name)
    counter: int | None = None
    match = _DUPLICATE_SUFFIX.match(stem)
    while match:
        if counter is None:
            counter = int(match.group("counter"))
        stem = match.group("base")
        match = _DUPLICATE_SUFFIX.match(stem)
    if counter is None:
        return file_name, None
    return f"{stem}{extension}", counter


def canonical_name(file_name: str) -> str:
    return split_duplicate_suffix(file_name)[0]


def date_bucket(path: Path) -> str:
    """Return ``YYYY/MM`` from the modification time, or ``Unknown``."""

    try:
        stat_result = path.stat()
    except OSError:
        return "Unknown"
    timestamp = stat_result.st_mtime or getattr(stat_result, "st_birthtime", None)
    if not timestamp:
        return "Unknown"
    try:
        moment = datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError):
        return "Unknown"
    return f"{moment.year:04d}/{moment.month:02d}"


def is_dir_empty(path: Path) -> bool:
    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except OSError:
        return False


def is_permission_error(error: BaseException) -> bool:
    if isinstance(error, PermissionError):
        return True
    return isinstance(error, OSError) and error.errno in _PERMISSION_ERRNOS


def resolve_workspace_path(workspace_root: Path, target: str) -> Path:
    """Resolve a workspace-relative *target* to an absolute path.

    Leading slashes and backslashes are accepted; the result must stay inside
    *workspace_root*.
    """

    root = Path(workspace_root).resolve()
    cleaned = target.replace("\\", "/").lstrip("/")
    absolute = Path(os.path.normpath(root / cleaned)) if cleaned else root
    try:
        absolute.relative_to(root)
    except ValueError:
        raise WorkspacePathError(f"Path escapes workspace root: {target}") from None
    return absolute


def to_workspace_relative(workspace_root: Path, path: Path) -> str:
    """Express *path* relative to the workspace, with one leading ``/``."""

    relative = os.path.relpath(path, workspace_root)
    if relative == ".":
        return "/"
    return "/" + Path(relative).as_posix()


__all__ = [
    "WorkspacePathError",
    "canonical_name",
    "date_bucket",
    "ensure_directory",
    "ensure_unique_path",
    "is_dir_empty",
    "is_permission_error",
    "resolve_workspace_path",
    "split_duplicate_suffix",
    "to_workspace_relative",
]
