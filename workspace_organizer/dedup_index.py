"""Content-hash deduplication of same-named files."""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import DEFAULT_RULES, RuleSet
from .logger import log_event
from .models import DedupOutcome, DedupRecord, Entry, ErrorRecord, Notifier
from .scanner import iter_tree_files
from .utils.fs import canonical_name, is_permission_error, to_workspace_relative

LOGGER = logging.getLogger("workspace_organizer.dedup")


@dataclass(slots=True)
class _Seen:
    entry: Entry
    size: int


class HashError(OSError):
    """Raised when a file cannot be read for hashing."""

    def __init__(self, entry: Entry, cause: OSError) -> None:
        super().__init__(cause.errno, str(cause))
        self.entry = entry


class DedupIndex:
    """First-seen index keyed by canonical file name.

    Only files sharing a canonical name (``a.txt``, ``a (1).txt``) are ever
    hashed. Files with the same name but different content all stay on disk
    and become further candidates for that name.
    """

    def __init__(
        self,
        workspace_root: Path,
        rules: RuleSet | None = None,
        *,
        algorithm: str = "md5",
        chunk_size: int = 1024 * 1024,
        notify: Optional[Notifier] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.rules = rules or DEFAULT_RULES
        self.algorithm = algorithm
        self.chunk_size = chunk_size
        self.notify = notify
        self.logger = logger or LOGGER
        self._seen: dict[str, list[_Seen]] = {}
        self._digests: dict[Path, str] = {}

    def deduplicate(self, root: Path) -> tuple[list[DedupRecord], list[ErrorRecord]]:
        deduped: list[DedupRecord] = []
        errors: list[ErrorRecord] = []
        self._seen.clear()
        self._digests.clear()

        def on_error(path: Path, exc: OSError) -> None:
            relative = to_workspace_relative(self.workspace_root, path)
            self._report_permission_error(exc, relative)
            errors.append(ErrorRecord(relative, str(exc)))

        for entry in iter_tree_files(root, self.rules, workspace_root=self.workspace_root, on_error=on_error):
            outcome = self._apply(entry)
            if isinstance(outcome, DedupRecord):
                deduped.append(outcome)
            elif isinstance(outcome, ErrorRecord):
                errors.append(outcome)
        return deduped, errors

    # -- helpers --------------------------------------------------------
    def _apply(self, entry: Entry) -> DedupOutcome:
        try:
            size = entry.path.stat().st_size
        except OSError as exc:
            self._report_permission_error(exc, entry.relative)
            return ErrorRecord(entry.relative, str(exc))

        candidates = self._seen.setdefault(canonical_name(entry.name), [])
        try:
            kept = self._find_match(entry, size, candidates)
        except HashError as exc:
            self._report_permission_error(exc, exc.entry.relative)
            log_event(
                self.logger,
                level=logging.WARNING,
                action="dedup.hash_error",
                message=f"Unable to hash {exc.entry.relative}: {exc.strerror}",
                path=exc.entry.relative,
            )
            if exc.entry is not entry:
                candidates[:] = [seen for seen in candidates if seen.entry is not exc.entry]
                candidates.append(_Seen(entry, size))
            return ErrorRecord(exc.entry.relative, exc.strerror or str(exc))

        if kept is None:
            candidates.append(_Seen(entry, size))
            return None

        try:
            entry.path.unlink()
        except OSError as exc:
            self._report_permission_error(exc, entry.relative)
            log_event(
                self.logger,
                level=logging.ERROR,
                action="dedup.delete_error",
                message=f"Failed to delete {entry.relative}: {exc}",
                path=entry.relative,
            )
            return ErrorRecord(entry.relative, str(exc))

        self._digests.pop(entry.path, None)
        record = DedupRecord(entry.relative, kept.relative)
        log_event(
            self.logger,
            level=logging.INFO,
            action="dedup.delete",
            message=f"Removed {record.source} (same content as {record.kept})",
            path=record.source,
        )
        return record

    def _find_match(self, entry: Entry, size: int, candidates: list[_Seen]) -> Entry | None:
        for seen in candidates:
            if seen.size != size:
                continue
            if self._hash(seen.entry) == self._hash(entry):
                return seen.entry
        return None

    def _hash(self, entry: Entry) -> str:
        cached = self._digests.get(entry.path)
        if cached is not None:
            return cached
        digest = hashlib.new(self.algorithm, usedforsecurity=False)
        try:
            with entry.path.open("rb") as fh:
                for chunk in iter(lambda: fh.read(self.chunk_size), b""):
                    digest.update(chunk)
        except OSError as exc:
            raise HashError(entry, exc) from exc
        value = digest.hexdigest()
        self._digests[entry.path] = value
        return value

    def _report_permission_error(self, exc: OSError, relative: str) -> None:
        if is_permission_error(exc) and self.notify is not None:
            self.notify("tool_error", {"path": relative})


__all__ = ["DedupIndex", "HashError"]
