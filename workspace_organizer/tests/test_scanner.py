from __future__ import annotations

from pathlib import Path

import pytest

from workspace_organizer.config import DEFAULT_RULES
from workspace_organizer.models import EntryKind
from workspace_organizer.scanner import (
    entry_order,
    iter_directories_bottom_up,
    iter_top_level,
    iter_tree_files,
)


@pytest.fixture()
def fixture_tree(tmp_path: Path) -> Path:
    for relative in (
        "b.txt",
        "a (1).txt",
        "a.txt",
        ".hidden",
        ".env",
        "Downloads/inner.pdf",
        "Downloads/deeper/ignored.txt",
        "Notes/old.md",
        "node_modules/pkg/index.js",
        ".git/HEAD",
    ):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(relative, encoding="utf-8")
    (tmp_path / "Empty" / "Deep").mkdir(parents=True)
    return tmp_path


def test_entry_order_puts_canonical_name_first() -> None:
    names = ["a (2).txt", "b.txt", "a (1).txt", "a.txt"]
    assert sorted(names, key=entry_order) == ["a.txt", "a (1).txt", "a (2).txt", "b.txt"]


def test_top_level_without_nested(fixture_tree: Path) -> None:
    decisions = list(iter_top_level(fixture_tree, DEFAULT_RULES, workspace_root=fixture_tree))
    processed = [d.entry.name for d in decisions if not d.should_skip]
    skipped = {d.entry.name: d.reason for d in decisions if d.should_skip and d.record_skip}

    assert processed == [".env", "a.txt", "a (1).txt", "b.txt"]
    assert skipped == {
        ".git": "hidden",
        "Downloads": "nested",
        "Empty": "nested",
        "Notes": "protected",
        "node_modules": "protected",
    }
    hidden_file = next(d for d in decisions if d.entry.name == ".hidden")
    assert hidden_file.should_skip and not hidden_file.record_skip


def test_top_level_with_nested_yields_one_level(fixture_tree: Path) -> None:
    decisions = list(
        iter_top_level(fixture_tree, DEFAULT_RULES, workspace_root=fixture_tree, include_nested=True)
    )
    processed = [d.entry.relative for d in decisions if not d.should_skip]
    assert "/Downloads/inner.pdf" in processed
    assert "/Downloads/deeper/ignored.txt" not in processed
    assert "/Notes/old.md" not in processed


def test_tree_files_descend_into_categories_but_not_excluded(fixture_tree: Path) -> None:
    entries = list(iter_tree_files(fixture_tree, DEFAULT_RULES, workspace_root=fixture_tree))
    files = [entry.relative for entry in entries]
    assert all(entry.kind is EntryKind.FILE for entry in entries)
    assert files[:4] == ["/.env", "/a.txt", "/a (1).txt", "/b.txt"]
    assert "/Notes/old.md" in files
    assert "/Downloads/deeper/ignored.txt" in files
    assert not any(path.startswith(("/node_modules", "/.git", "/.hidden")) for path in files)


def test_directories_are_yielded_children_first(fixture_tree: Path) -> None:
    entries = list(iter_directories_bottom_up(fixture_tree, DEFAULT_RULES, workspace_root=fixture_tree))
    order = [entry.relative for entry in entries]
    assert order.index("/Empty/Deep") < order.index("/Empty")
    assert order.index("/Downloads/deeper") < order.index("/Downloads")
    assert "/node_modules" not in order
    assert "/.git" not in order
    assert "/" not in order
    protected = {entry.relative for entry in entries if entry.protected}
    assert protected == {"/Notes"}


def test_tree_errors_are_reported_not_raised(tmp_path: Path) -> None:
    errors: list[Path] = []
    missing = tmp_path / "missing"
    files = list(
        iter_tree_files(
            missing,
            DEFAULT_RULES,
            workspace_root=tmp_path,
            on_error=lambda path, exc: errors.append(path),
        )
    )
    assert files == []
    assert errors == [missing]
