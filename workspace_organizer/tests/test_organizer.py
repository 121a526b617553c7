from __future__ import annotations

import os
from pathlib import Path

import pytest

from workspace_organizer.config import CategoryRule, OrganizeOptions, RuleSet
from workspace_organizer.models import StatusEvent
from workspace_organizer.organizer import WorkspaceOrganizer, create_notifier, organize_folder
from workspace_organizer.utils.fs import WorkspacePathError


def test_status_events_wrap_the_run(tmp_path: Path) -> None:
    (tmp_path / "Downloads").mkdir()
    (tmp_path / "Downloads" / "a.pdf").write_text("pdf", encoding="utf-8")
    events: list[StatusEvent] = []

    organizer = WorkspaceOrganizer(tmp_path, emit_status=events.append, request_id="req-1")
    report = organizer.organize("Downloads")

    assert [event.stage for event in events] == ["tool_start", "tool_end"]
    assert events[0].detail == {"path": "Downloads", "includeNested": False}
    assert events[0].tool == "organize_folder"
    assert events[1].detail == report.summary
    assert events[1].to_dict()["requestId"] == "req-1"
    assert report.path == "/Downloads"
    assert [record.to_dict() for record in report.moved] == [
        {"from": "/Downloads/a.pdf", "to": "/Downloads/PDFs/a.pdf"}
    ]


def test_missing_root_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        WorkspaceOrganizer(tmp_path).organize("missing")


def test_file_as_root_is_fatal(tmp_path: Path) -> None:
    (tmp_path / "file.txt").write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        WorkspaceOrganizer(tmp_path).organize("file.txt")


def test_escaping_path_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(WorkspacePathError):
        WorkspaceOrganizer(tmp_path / "ws").organize("../")


def test_permission_denied_on_root_notifies_and_raises(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "Locked").mkdir()
    real_scandir = os.scandir

    def guarded_scandir(path="."):
        if Path(path).name == "Locked":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded_scandir)
    events: list[StatusEvent] = []

    with pytest.raises(PermissionError):
        WorkspaceOrganizer(tmp_path, emit_status=events.append).organize("/Locked")

    assert [event.stage for event in events] == ["tool_start", "tool_error"]
    assert events[1].detail == {"path": "/Locked"}


def test_injected_rules_drive_every_pass(tmp_path: Path) -> None:
    rules = RuleSet(categories=(CategoryRule.of("Books", [".epub"]),), date_bucket_categories=frozenset())
    (tmp_path / "novel.epub").write_text("book", encoding="utf-8")
    (tmp_path / "photo.png").write_text("png", encoding="utf-8")

    report = WorkspaceOrganizer(tmp_path, OrganizeOptions(rules=rules)).organize("/")

    moves = {record.source: record.destination for record in report.moved}
    assert moves == {"/novel.epub": "/Books/novel.epub", "/photo.png": "/Other/photo.png"}


def test_include_nested_option_is_default(tmp_path: Path) -> None:
    (tmp_path / "inbox").mkdir()
    (tmp_path / "inbox" / "a.txt").write_text("a", encoding="utf-8")

    report = WorkspaceOrganizer(tmp_path, OrganizeOptions(include_nested=True)).organize()

    assert [record.destination for record in report.moved] == ["/Notes/a.txt"]
    assert report.deleted_empty_folders == ["/inbox"]


def test_create_notifier_without_emitter_is_noop() -> None:
    notify = create_notifier("organize_folder")
    notify("tool_start", {"path": "/"})


def test_organize_folder_returns_json_ready_dict(tmp_path: Path) -> None:
    (tmp_path / "song.mp3").write_bytes(b"ID3")
    payload = organize_folder(tmp_path, "/", False)
    assert payload["summary"]["moved"] == 1
    assert payload["moved"][0]["to"].startswith("/Audio/")
    assert set(payload) == {
        "path",
        "moved",
        "renamed",
        "deduped",
        "deletedEmptyFolders",
        "skipped",
        "errors",
        "summary",
    }


def test_permission_failure_in_later_pass_notifies(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "Notes").mkdir()
    (tmp_path / "Notes" / "a (1).txt").write_text("a", encoding="utf-8")
    real_rename = Path.rename

    def guarded_rename(self, target):
        if self.name == "a (1).txt":
            raise PermissionError(13, "Permission denied", str(self))
        return real_rename(self, target)

    monkeypatch.setattr(Path, "rename", guarded_rename)
    events: list[StatusEvent] = []

    report = WorkspaceOrganizer(tmp_path, emit_status=events.append).organize("/")

    assert [error.path for error in report.errors] == ["/Notes/a (1).txt"]
    assert [event.stage for event in events] == ["tool_start", "tool_error", "tool_end"]
    assert events[1].detail == {"path": "/Notes/a (1).txt"}


@pytest.mark.parametrize(("requested", "expected"), [("/", "/"), ("Inbox", "/Inbox"), ("\\Inbox\\", "/Inbox")])
def test_report_path_is_workspace_relative(tmp_path: Path, requested: str, expected: str) -> None:
    (tmp_path / "Inbox").mkdir()

    report = WorkspaceOrganizer(tmp_path).organize(requested)

    assert report.path == expected
