"""Move pass: sort the direct entries of a folder into category folders."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .classifier import ClassificationEngine
from .config import DEFAULT_RULES, RuleSet
from .logger import log_event
from .models import Entry, ErrorRecord, MoveOutcome, MoveRecord, MoveResult, Notifier
from .scanner import iter_top_level
from .utils.fs import date_bucket, ensure_directory, ensure_unique_path, is_permission_error, to_workspace_relative


class FileMover:
    """Relocate files from a folder into ``Category[/YYYY/MM]`` subfolders."""

    def __init__(
        self,
        workspace_root: Path,
        rules: RuleSet | None = None,
        *,
        classifier: ClassificationEngine | None = None,
        notify: Optional[Notifier] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.rules = rules or DEFAULT_RULES
        self.classifier = classifier or ClassificationEngine(self.rules)
        self.notify = notify
        self.logger = logger or logging.getLogger("workspace_organizer.mover")

    def reorganize_top_level(self, root: Path, include_nested: bool = False) -> MoveResult:
        """Classify and move every direct file of *root*.

        Failing to list *root* raises; any other failure is collected in
        ``MoveResult.errors``.
        """

        result = MoveResult()
        for decision in iter_top_level(
            root,
            self.rules,
            workspace_root=self.workspace_root,
            include_nested=include_nested,
        ):
            entry = decision.entry
            if decision.error is not None:
                self._report_permission_error(decision.error, entry.relative)
                result.errors.append(ErrorRecord(entry.relative, str(decision.error)))
                continue
            if decision.should_skip:
                if decision.record_skip:
                    result.skipped.append(entry.name)
                continue

            outcome = self._apply(root, entry)
            if isinstance(outcome, MoveRecord):
                result.moved.append(outcome)
                result.touched.add(entry.path.parent)
            elif isinstance(outcome, ErrorRecord):
                result.errors.append(outcome)
        return result

    def destination_for(self, root: Path, entry: Entry) -> Path:
        category = self.classifier.classify(entry.name)
        target_dir = root / category
        if self.rules.uses_date_bucket(category):
            target_dir = target_dir.joinpath(*date_bucket(entry.path).split("/"))
        return target_dir

    def _apply(self, root: Path, entry: Entry) -> MoveOutcome:
        source = entry.path
        try:
            target_dir = ensure_directory(self.destination_for(root, entry))
            destination = ensure_unique_path(target_dir / entry.name, source=source)
            if destination == source:
                return None
            shutil.move(str(source), str(destination))
        except OSError as exc:
            self._report_permission_error(exc, entry.relative)
            log_event(
                self.logger,
                level=logging.ERROR,
                action="move.error",
                message=f"Failed to move {entry.relative}: {exc}",
                path=entry.relative,
            )
            return ErrorRecord(entry.relative, str(exc))

        record = MoveRecord(entry.relative, to_workspace_relative(self.workspace_root, destination))
        log_event(
            self.logger,
            level=logging.INFO,
            action="move.rename",
            message=f"Moved {record.source} -> {record.destination}",
            path=record.source,
        )
        return record

    def _report_permission_error(self, exc: OSError, relative: str) -> None:
        if is_permission_error(exc) and self.notify is not None:
            self.notify("tool_error", {"path": relative})


__all__ = ["FileMover"]
