"""Collapse ``name (n).ext`` back to ``name.ext`` when the name is free."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .config import DEFAULT_RULES, RuleSet
from .logger import log_event
from .models import Entry, ErrorRecord, Notifier, RenameOutcome, RenameRecord
from .scanner import iter_tree_files
from .utils.fs import ensure_unique_path, is_permission_error, split_duplicate_suffix, to_workspace_relative


class SuffixNormalizer:
    """Rename duplicate-suffixed files whose canonical sibling is missing.

    When several numbered copies compete for one canonical name, the first in
    traversal order (lowest counter) wins and the rest are left for the
    content-hash pass.
    """

    def __init__(
        self,
        workspace_root: Path,
        rules: RuleSet | None = None,
        *,
        notify: Optional[Notifier] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.rules = rules or DEFAULT_RULES
        self.notify = notify
        self.logger = logger or logging.getLogger("workspace_organizer.normalizer")

    def normalize(self, root: Path) -> tuple[list[RenameRecord], list[ErrorRecord]]:
        renamed: list[RenameRecord] = []
        errors: list[ErrorRecord] = []

        def on_error(path: Path, exc: OSError) -> None:
            relative = to_workspace_relative(self.workspace_root, path)
            self._report_permission_error(exc, relative)
            errors.append(ErrorRecord(relative, str(exc)))

        for entry in iter_tree_files(root, self.rules, workspace_root=self.workspace_root, on_error=on_error):
            outcome = self._apply(entry)
            if isinstance(outcome, RenameRecord):
                renamed.append(outcome)
            elif isinstance(outcome, ErrorRecord):
                errors.append(outcome)
        return renamed, errors

    def _apply(self, entry: Entry) -> RenameOutcome:
        canonical, counter = split_duplicate_suffix(entry.name)
        if counter is None:
            return None
        target = entry.path.with_name(canonical)
        if os.path.lexists(target):
            return None

        try:
            destination = ensure_unique_path(target, source=entry.path)
            if destination != target:
                return None
            entry.path.rename(destination)
        except OSError as exc:
            self._report_permission_error(exc, entry.relative)
            log_event(
                self.logger,
                level=logging.ERROR,
                action="rename.error",
                message=f"Failed to rename {entry.relative}: {exc}",
                path=entry.relative,
            )
            return ErrorRecord(entry.relative, str(exc))

        record = RenameRecord(entry.relative, to_workspace_relative(self.workspace_root, destination))
        log_event(
            self.logger,
            level=logging.INFO,
            action="rename.normalize",
            message=f"Renamed {record.source} -> {record.destination}",
            path=record.source,
        )
        return record

    def _report_permission_error(self, exc: OSError, relative: str) -> None:
        if is_permission_error(exc) and self.notify is not None:
            self.notify("tool_error", {"path": relative})


__all__ = ["SuffixNormalizer"]
