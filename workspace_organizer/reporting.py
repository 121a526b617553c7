"""Rendering helpers for operation reports."""
from __future__ import annotations

import json
from typing import Mapping, Sequence

_SECTIONS = (
    ("moved", "Moved"),
    ("renamed", "Renamed"),
    ("deduped", "Deduplicated"),
    ("deletedEmptyFolders", "Deleted empty folders"),
    ("skipped", "Skipped"),
    ("errors", "Errors"),
)


def render_report(raw: Mapping[str, object], fmt: str, *, detailed: bool = False) -> str:
    """Render a serialised :class:`~workspace_organizer.report.OperationReport`.

    ``fmt`` accepts ``"text"``, ``"markdown"`` or ``"json"``. Text and markdown
    only list individual files when *detailed* is set.
    """

    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(dict(raw), indent=2, ensure_ascii=False)

    summary = raw.get("summary", {})
    if not isinstance(summary, Mapping):
        summary = {}

    if fmt == "markdown":
        lines = [
            f"# Workspace Organizer Report: `{raw.get('path', '/')}`",
            "",
            "| Action | Count |",
            "| --- | --- |",
        ]
        for key, label in _SECTIONS:
            lines.append(f"| {label} | {summary.get(key, 0)} |")
        if detailed:
            for key, label in _SECTIONS:
                items = raw.get(key) or []
                if not items:
                    continue
                lines.extend(["", f"## {label}"])
                lines.extend(f"- {_describe(item)}" for item in _as_list(items))
        return "\n".join(lines)

    if fmt != "text":
        raise ValueError(f"Unsupported report format: {fmt}")

    lines = [
        f"Workspace Organizer Report ({raw.get('path', '/')})",
        "==========================",
    ]
    for key, label in _SECTIONS:
        lines.append(f"{label}: {summary.get(key, 0)}")
    if detailed:
        for key, label in _SECTIONS:
            items = raw.get(key) or []
            if not items:
                continue
            lines.extend(["", f"{label}:"])
            lines.extend(f"  - {_describe(item)}" for item in _as_list(items))
    return "\n".join(lines)


def _as_list(items: object) -> Sequence[object]:
    return items if isinstance(items, Sequence) else []


def _describe(item: object) -> str:
    if not isinstance(item, Mapping):
        return str(item)
    if "kept" in item:
        return f"{item['from']} (same as {item['kept']})"
    if "from" in item:
        return f"{item['from']} -> {item['to']}"
    if "message" in item:
        return f"{item['path']}: {item['message']}"
    return json.dumps(dict(item), ensure_ascii=False)


__all__ = ["render_report"]
