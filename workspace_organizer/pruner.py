"""Removal of directories left empty by the other passes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from .config import DEFAULT_RULES, RuleSet
from .logger import log_event
from .models import ErrorRecord, Notifier
from .scanner import iter_directories_bottom_up
from .utils.fs import is_dir_empty, is_permission_error, to_workspace_relative


class EmptyDirectoryPruner:
    """Delete empty, unprotected directories strictly below a root folder."""

    def __init__(
        self,
        workspace_root: Path,
        root: Path,
        rules: RuleSet | None = None,
        *,
        notify: Optional[Notifier] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.root = Path(root)
        self.rules = rules or DEFAULT_RULES
        self.notify = notify
        self.logger = logger or logging.getLogger("workspace_organizer.pruner")

    def prune_touched(self, directories: Iterable[Path]) -> tuple[list[str], list[ErrorRecord]]:
        """Walk upward from each directory that lost a file, deleting while empty."""

        deleted: list[str] = []
        errors: list[ErrorRecord] = []
        ordered = sorted(set(directories), key=lambda path: (-len(path.parts), str(path)))
        for directory in ordered:
            current = directory
            while current != self.root and self._is_below_root(current):
                if self.rules.is_protected(current.name):
                    break
                if not self._remove_if_empty(current, deleted, errors):
                    break
                current = current.parent
        return deleted, errors

    def prune_tree(self) -> tuple[list[str], list[ErrorRecord]]:
        """Bottom-up pass over the whole tree below the root."""

        deleted: list[str] = []
        errors: list[ErrorRecord] = []

        def on_error(path: Path, exc: OSError) -> None:
            relative = to_workspace_relative(self.workspace_root, path)
            self._report_permission_error(exc, relative)
            errors.append(ErrorRecord(relative, str(exc)))

        for entry in iter_directories_bottom_up(
            self.root, self.rules, workspace_root=self.workspace_root, on_error=on_error
        ):
            if entry.protected:
                continue
            self._remove_if_empty(entry.path, deleted, errors)
        return deleted, errors

    def _remove_if_empty(self, directory: Path, deleted: list[str], errors: list[ErrorRecord]) -> bool:
        if not is_dir_empty(directory):
            return False
        relative = to_workspace_relative(self.workspace_root, directory)
        try:
            directory.rmdir()
        except OSError as exc:
            self._report_permission_error(exc, relative)
            log_event(
                self.logger,
                level=logging.WARNING,
                action="prune.error",
                message=f"Failed to remove {relative}: {exc}",
                path=relative,
            )
            errors.append(ErrorRecord(relative, str(exc)))
            return False
        deleted.append(relative)
        log_event(
            self.logger,
            level=logging.INFO,
            action="prune.rmdir",
            message=f"Removed empty folder {relative}",
            path=relative,
        )
        return True

    def _report_permission_error(self, exc: OSError, relative: str) -> None:
        if is_permission_error(exc) and self.notify is not None:
            self.notify("tool_error", {"path": relative})

    def _is_below_root(self, path: Path) -> bool:
        try:
            path.relative_to(self.root)
        except ValueError:
            return False
        return True


__all__ = ["EmptyDirectoryPruner"]
