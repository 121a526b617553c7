"""Side-effect free traversal of a workspace folder.

Every pass walks the tree through these iterators and applies its own
effects, so traversal order can be tested against a fixture tree without
moving anything. Directory listings are materialised and sorted before any
entry is yielded, so callers may rename or delete the yielded entry.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator

from .config import RuleSet
from .models import Entry, EntryKind, TopLevelDecision
from .utils.fs import split_duplicate_suffix, to_workspace_relative

ErrorHandler = Callable[[Path, OSError], None]


def entry_order(name: str) -> tuple[str, int, str]:
    """Sort key placing ``a.txt`` before ``a (1).txt`` before ``a (2).txt``."""

    canonical, counter = split_duplicate_suffix(name)
    return canonical, counter or 0, name


def list_directory(path: Path) -> list[os.DirEntry[str]]:
    """Return the entries of *path* in deterministic order. Raises ``OSError``."""

    with os.scandir(path) as iterator:
        entries = list(iterator)
    entries.sort(key=lambda entry: entry_order(entry.name))
    return entries


def iter_top_level(
    root: Path,
    rules: RuleSet,
    *,
    workspace_root: Path,
    include_nested: bool = False,
) -> Iterator[TopLevelDecision]:
    """Yield a decision for every direct entry of *root*.

    With *include_nested*, files directly inside unprotected subdirectories are
    yielded as if they were entries of *root*. A failure to list *root* itself
    propagates.
    """

    for item in list_directory(root):
        entry = _entry(Path(item.path), item, workspace_root, rules)
        name = item.name

        if rules.is_dotfile(name) and not rules.is_allowed_dotfile(name):
            yield TopLevelDecision(entry, True, "hidden", record_skip=entry.is_dir)
            continue

        if entry.is_dir:
            if entry.protected:
                yield TopLevelDecision(entry, True, "protected")
            elif include_nested:
                yield from _iter_nested(entry, rules, workspace_root)
            else:
                yield TopLevelDecision(entry, True, "nested")
            continue

        if entry.kind is EntryKind.FILE:
            yield TopLevelDecision(entry, False)


def _iter_nested(directory: Entry, rules: RuleSet, workspace_root: Path) -> Iterator[TopLevelDecision]:
    try:
        items = list_directory(directory.path)
    except OSError as exc:
        yield TopLevelDecision(directory, True, "unreadable", record_skip=False, error=exc)
        return
    for item in items:
        entry = _entry(Path(item.path), item, workspace_root, rules)
        if entry.kind is not EntryKind.FILE:
            continue
        if rules.is_dotfile(item.name) and not rules.is_allowed_dotfile(item.name):
            continue
        yield TopLevelDecision(entry, False)


def iter_tree_files(
    root: Path,
    rules: RuleSet,
    *,
    workspace_root: Path,
    on_error: ErrorHandler | None = None,
) -> Iterator[Entry]:
    """Yield every regular file under *root*, directory by directory.

    Skip-list and dot directories are not descended into; category
    directories are.
    """

    try:
        items = list_directory(root)
    except OSError as exc:
        if on_error is not None:
            on_error(root, exc)
        return

    subdirectories: list[Path] = []
    for item in items:
        if rules.is_excluded(item.name):
            continue
        entry = _entry(Path(item.path), item, workspace_root, rules)
        if entry.kind is EntryKind.FILE:
            yield entry
        elif entry.is_dir:
            subdirectories.append(entry.path)

    for subdirectory in subdirectories:
        yield from iter_tree_files(subdirectory, rules, workspace_root=workspace_root, on_error=on_error)


def iter_directories_bottom_up(
    root: Path,
    rules: RuleSet,
    *,
    workspace_root: Path,
    on_error: ErrorHandler | None = None,
) -> Iterator[Entry]:
    """Yield every directory below *root*, children before their parent.

    *root* itself is never yielded. Excluded names are neither yielded nor
    descended into.
    """

    try:
        items = list_directory(root)
    except OSError as exc:
        if on_error is not None:
            on_error(root, exc)
        return

    for item in items:
        if rules.is_excluded(item.name):
            continue
        entry = _entry(Path(item.path), item, workspace_root, rules)
        if not entry.is_dir:
            continue
        yield from iter_directories_bottom_up(entry.path, rules, workspace_root=workspace_root, on_error=on_error)
        yield entry


def _entry(path: Path, item: os.DirEntry[str], workspace_root: Path, rules: RuleSet) -> Entry:
    # Symlinks are reported as neither files nor directories.
    if item.is_dir(follow_symlinks=False):
        kind = EntryKind.DIRECTORY
        protected = rules.is_protected(item.name)
    elif item.is_file(follow_symlinks=False):
        kind = EntryKind.FILE
        protected = False
    else:
        kind = EntryKind.OTHER
        protected = True
    return Entry(
        path=path,
        relative=to_workspace_relative(workspace_root, path),
        kind=kind,
        protected=protected,
    )


__all__ = [
    "entry_order",
    "iter_directories_bottom_up",
    "iter_top_level",
    "iter_tree_files",
    "list_directory",
]
