"""Core dataclasses shared across workspace organizer modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Union


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(slots=True)
class Entry:
    """A filesystem node discovered under the target folder."""

    path: Path
    relative: str
    kind: EntryKind
    protected: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(slots=True)
class TopLevelDecision:
    """Decision produced by :func:`scanner.iter_top_level` for one entry."""

    entry: Entry
    should_skip: bool
    reason: str | None = None
    record_skip: bool = True
    error: OSError | None = None


@dataclass(slots=True)
class MoveRecord:
    source: str
    destination: str

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.destination}


@dataclass(slots=True)
class RenameRecord:
    source: str
    destination: str

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.destination}


@dataclass(slots=True)
class DedupRecord:
    """A file removed because an earlier file of the same name had equal content."""

    source: str
    kept: str
    reason: str = "hash-match"

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "kept": self.kept, "reason": self.reason}


@dataclass(slots=True)
class ErrorRecord:
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


# Effects return either their record or the failure, never raise.
MoveOutcome = Union[MoveRecord, ErrorRecord, None]
RenameOutcome = Union[RenameRecord, ErrorRecord, None]
DedupOutcome = Union[DedupRecord, ErrorRecord, None]


@dataclass(slots=True)
class MoveResult:
    """Output of the move pass."""

    moved: list[MoveRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[ErrorRecord] = field(default_factory=list)
    touched: set[Path] = field(default_factory=set)


@dataclass(slots=True)
class StatusEvent:
    """Lifecycle notification sent to the caller's status callback."""

    stage: str
    tool: str
    detail: Any = None
    request_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "tool": self.tool,
            "detail": self.detail,
            "requestId": self.request_id,
        }


StatusEmitter = Callable[[StatusEvent], None]

# Bound to one invocation: called as ``notify(stage, detail)``.
Notifier = Callable[[str, Any], None]


@dataclass(frozen=True)
class Leaf:
    """A folder with no children."""

    name: str


@dataclass(frozen=True)
class Node:
    """A folder with nested children."""

    name: str
    children: tuple[FolderSpec, ...] = ()


FolderSpec = Union[Leaf, Node]


__all__ = [
    "DedupOutcome",
    "DedupRecord",
    "Entry",
    "EntryKind",
    "ErrorRecord",
    "FolderSpec",
    "Leaf",
    "MoveOutcome",
    "MoveRecord",
    "MoveResult",
    "Node",
    "Notifier",
    "RenameOutcome",
    "RenameRecord",
    "StatusEmitter",
    "StatusEvent",
    "TopLevelDecision",
]
