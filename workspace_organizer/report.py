"""Aggregation of every pass into a single operation report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .models import DedupRecord, ErrorRecord, MoveRecord, MoveResult, RenameRecord


@dataclass
class OperationReport:
    """Everything one reorganization run did, in the order it happened."""

    path: str
    moved: list[MoveRecord] = field(default_factory=list)
    renamed: list[RenameRecord] = field(default_factory=list)
    deduped: list[DedupRecord] = field(default_factory=list)
    deleted_empty_folders: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[ErrorRecord] = field(default_factory=list)

    def add_moves(self, result: MoveResult) -> None:
        self.moved.extend(result.moved)
        self.skipped.extend(result.skipped)
        self.errors.extend(result.errors)

    def add_renames(self, renamed: Iterable[RenameRecord], errors: Iterable[ErrorRecord]) -> None:
        self.renamed.extend(renamed)
        self.errors.extend(errors)

    def add_dedups(self, deduped: Iterable[DedupRecord], errors: Iterable[ErrorRecord]) -> None:
        self.deduped.extend(deduped)
        self.errors.extend(errors)

    def add_deleted(self, folders: Iterable[str], errors: Iterable[ErrorRecord]) -> None:
        self.deleted_empty_folders.extend(folders)
        self.errors.extend(errors)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "moved": len(self.moved),
            "renamed": len(self.renamed),
            "deduped": len(self.deduped),
            "deletedEmptyFolders": len(self.deleted_empty_folders),
            "skipped": len(self.skipped),
            "errors": len(self.errors),
        }

    def to_dict(self) -> dict[str, object]:
        """Serialise the report for JSON output."""

        return {
            "path": self.path,
            "moved": [record.to_dict() for record in self.moved],
            "renamed": [record.to_dict() for record in self.renamed],
            "deduped": [record.to_dict() for record in self.deduped],
            "deletedEmptyFolders": list(self.deleted_empty_folders),
            "skipped": list(self.skipped),
            "errors": [record.to_dict() for record in self.errors],
            "summary": self.summary,
        }


__all__ = ["OperationReport"]
