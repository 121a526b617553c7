"""Main workspace organizer orchestration."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Optional

from .classifier import ClassificationEngine
from .config import OrganizeOptions, RuleSet
from .dedup_index import DedupIndex
from .logger import LOGGER_NAME, log_event
from .models import Notifier, StatusEmitter, StatusEvent
from .mover import FileMover
from .normalizer import SuffixNormalizer
from .pruner import EmptyDirectoryPruner
from .report import OperationReport
from .utils.fs import is_permission_error, resolve_workspace_path, to_workspace_relative

TOOL_NAME = "organize_folder"


def create_notifier(
    tool_name: str,
    emit_status: Optional[StatusEmitter] = None,
    request_id: str | None = None,
) -> Notifier:
    """Bind *emit_status* to one tool invocation. A missing emitter is a no-op."""

    def notify(stage: str, detail: Any = None) -> None:
        if emit_status is not None:
            emit_status(StatusEvent(stage=stage, tool=tool_name, detail=detail, request_id=request_id))

    return notify


class WorkspaceOrganizer:
    """Coordinate moving, normalizing, deduplicating and pruning one folder.

    Passes run strictly in order and each sees the tree left by the previous
    one. The organizer assumes exclusive access to the folder for the
    duration of :meth:`organize`.
    """

    def __init__(
        self,
        workspace_root: str | Path,
        options: OrganizeOptions | None = None,
        *,
        rules: RuleSet | None = None,
        emit_status: Optional[StatusEmitter] = None,
        request_id: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self.options = options or OrganizeOptions()
        self.rules = rules or self.options.rules
        self.notify = create_notifier(TOOL_NAME, emit_status, request_id)
        self.request_id = request_id
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.classifier = ClassificationEngine(self.rules, logger=self.logger.getChild("classifier"))

    def organize(self, path: str = "/", include_nested: bool | None = None) -> OperationReport:
        """Reorganize the workspace-relative folder *path*.

        Raises ``OSError`` when the folder itself is missing or unreadable and
        :class:`~workspace_organizer.utils.fs.WorkspacePathError` when *path*
        escapes the workspace. Every other failure ends up in
        ``OperationReport.errors``.
        """

        if include_nested is None:
            include_nested = self.options.include_nested
        self.notify("tool_start", {"path": path, "includeNested": include_nested})
        started = time.perf_counter()

        root = resolve_workspace_path(self.workspace_root, path)
        self._check_root(root, path)

        report = OperationReport(path=to_workspace_relative(self.workspace_root, root))

        mover = FileMover(
            self.workspace_root,
            self.rules,
            classifier=self.classifier,
            notify=self.notify,
            logger=self.logger.getChild("mover"),
        )
        move_result = mover.reorganize_top_level(root, include_nested)
        report.add_moves(move_result)

        pruner = EmptyDirectoryPruner(
            self.workspace_root,
            root,
            self.rules,
            notify=self.notify,
            logger=self.logger.getChild("pruner"),
        )
        report.add_deleted(*pruner.prune_touched(move_result.touched))

        normalizer = SuffixNormalizer(
            self.workspace_root,
            self.rules,
            notify=self.notify,
            logger=self.logger.getChild("normalizer"),
        )
        report.add_renames(*normalizer.normalize(root))

        index = DedupIndex(
            self.workspace_root,
            self.rules,
            algorithm=self.options.hash_algorithm,
            chunk_size=self.options.hash_chunk_size,
            notify=self.notify,
            logger=self.logger.getChild("dedup"),
        )
        # Deleting a duplicate can free a canonical name for a numbered sibling,
        # and that rename can expose a new duplicate. Every round deletes at
        # least one file, so the loop ends.
        while True:
            deduped, dedup_errors = index.deduplicate(root)
            report.add_dedups(deduped, dedup_errors)
            if not deduped:
                break
            renamed, rename_errors = normalizer.normalize(root)
            report.add_renames(renamed, rename_errors)
            if not renamed:
                break

        report.add_deleted(*pruner.prune_tree())

        summary = report.summary
        log_event(
            self.logger,
            level=logging.INFO,
            action="organize.done",
            message=f"Organized {report.path}",
            request_id=self.request_id,
            path=report.path,
            extra={"summary": summary, "ms": round((time.perf_counter() - started) * 1000, 2)},
        )
        self.notify("tool_end", summary)
        return report

    def _check_root(self, root: Path, path: str) -> None:
        try:
            with os.scandir(root):
                pass
        except OSError as exc:
            if is_permission_error(exc):
                self.notify("tool_error", {"path": path})
            log_event(
                self.logger,
                level=logging.ERROR,
                action="organize.root_error",
                message=f"Cannot read {path}: {exc}",
                request_id=self.request_id,
                path=path,
            )
            raise


def organize_folder(
    workspace_root: str | Path,
    path: str = "/",
    include_nested: bool = False,
    *,
    rules: RuleSet | None = None,
    emit_status: Optional[StatusEmitter] = None,
    request_id: str | None = None,
) -> dict[str, object]:
    """Run one reorganization and return the JSON-ready report."""

    organizer = WorkspaceOrganizer(workspace_root, rules=rules, emit_status=emit_status, request_id=request_id)
    return organizer.organize(path, include_nested).to_dict()


__all__ = ["TOOL_NAME", "WorkspaceOrganizer", "create_notifier", "organize_folder"]
