"""Creation of nested folder structures inside a workspace."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

from .logger import log_event
from .models import ErrorRecord, FolderSpec, Leaf, Node
from .utils.fs import resolve_workspace_path, to_workspace_relative

LOGGER = logging.getLogger("workspace_organizer.folders")


@dataclass(slots=True)
class FolderCreationResult:
    created: list[str] = field(default_factory=list)
    errors: list[ErrorRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"created": list(self.created), "errors": [error.to_dict() for error in self.errors]}


def parse_folder_spec(raw: Any) -> FolderSpec:
    """Turn ``"name"`` or ``{"name": ..., "children": [...]}`` into a spec."""

    if isinstance(raw, str):
        return Leaf(_validate_name(raw))
    if isinstance(raw, dict):
        name = raw.get("name")
        if not isinstance(name, str):
            raise ValueError(f"Folder entry is missing a name: {raw!r}")
        children = raw.get("children") or []
        if not isinstance(children, list):
            raise ValueError(f"'children' of {name!r} must be a list")
        if not children:
            return Leaf(_validate_name(name))
        return Node(_validate_name(name), tuple(parse_folder_spec(child) for child in children))
    raise ValueError(f"Unsupported folder entry: {raw!r}")


def parse_folder_specs(raw: Sequence[Any]) -> list[FolderSpec]:
    if not isinstance(raw, list):
        raise ValueError("Folder structure must be a list")
    return [parse_folder_spec(item) for item in raw]


def create_folder_structure(
    workspace_root: str | Path,
    specs: Iterable[FolderSpec],
    base_path: str = "/",
) -> FolderCreationResult:
    """Create *specs* below *base_path*, recording per-folder failures."""

    root = Path(workspace_root).resolve()
    base = resolve_workspace_path(root, base_path)
    result = FolderCreationResult()
    _create(root, base, specs, result)
    log_event(
        LOGGER,
        level=logging.INFO,
        action="folders.create",
        message=f"Created {len(result.created)} folder(s) under {base_path}",
        path=base_path,
        extra={"errors": len(result.errors)},
    )
    return result


def _create(root: Path, parent: Path, specs: Iterable[FolderSpec], result: FolderCreationResult) -> None:
    for spec in specs:
        folder = parent / spec.name
        relative = to_workspace_relative(root, folder)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            result.errors.append(ErrorRecord(relative, str(exc)))
            continue
        result.created.append(relative)
        if isinstance(spec, Node):
            _create(root, folder, spec.children, result)


def _validate_name(name: str) -> str:
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"Invalid folder name: {name!r}")
    return name


__all__ = [
    "FolderCreationResult",
    "create_folder_structure",
    "parse_folder_spec",
    "parse_folder_specs",
]
