from __future__ import annotations

import os
import shutil
from datetime import datetime
from pathlib import Path

import pytest

from workspace_organizer.mover import FileMover


def _write(path: Path, content: str = "content") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _set_mtime(path: Path, moment: datetime) -> None:
    os.utime(path, (moment.timestamp(), moment.timestamp()))


def test_files_move_into_categories(tmp_path: Path) -> None:
    _write(tmp_path / "report.pdf")
    _write(tmp_path / "notes.txt")
    photo = _write(tmp_path / "photo.png")
    _set_mtime(photo, datetime(2024, 2, 10, 9, 30))

    result = FileMover(tmp_path).reorganize_top_level(tmp_path)

    moves = {record.source: record.destination for record in result.moved}
    assert moves == {
        "/report.pdf": "/PDFs/report.pdf",
        "/notes.txt": "/Notes/notes.txt",
        "/photo.png": "/Images/2024/02/photo.png",
    }
    assert (tmp_path / "Images" / "2024" / "02" / "photo.png").exists()
    assert result.errors == []
    assert result.touched == {tmp_path}


def test_collisions_get_numbered_names(tmp_path: Path) -> None:
    _write(tmp_path / "Notes" / "a.txt", "existing")
    _write(tmp_path / "a.txt", "incoming")

    result = FileMover(tmp_path).reorganize_top_level(tmp_path)

    assert [record.destination for record in result.moved] == ["/Notes/a (1).txt"]
    assert (tmp_path / "Notes" / "a.txt").read_text(encoding="utf-8") == "existing"
    assert (tmp_path / "Notes" / "a (1).txt").read_text(encoding="utf-8") == "incoming"
    assert result.skipped == ["Notes"]


def test_nested_files_are_sorted_at_root(tmp_path: Path) -> None:
    _write(tmp_path / "Downloads" / "invoice.pdf")
    _write(tmp_path / "Downloads" / "sub" / "deep.pdf")

    flat = FileMover(tmp_path).reorganize_top_level(tmp_path, include_nested=False)
    assert flat.moved == []
    assert flat.skipped == ["Downloads"]

    nested = FileMover(tmp_path).reorganize_top_level(tmp_path, include_nested=True)
    assert [(r.source, r.destination) for r in nested.moved] == [
        ("/Downloads/invoice.pdf", "/PDFs/invoice.pdf"),
    ]
    assert nested.touched == {tmp_path / "Downloads"}
    assert (tmp_path / "Downloads" / "sub" / "deep.pdf").exists()


def test_permission_failure_is_recorded_and_run_continues(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / "locked.pdf")
    _write(tmp_path / "free.txt")
    real_move = shutil.move

    def fake_move(src: str, dst: str):
        if src.endswith("locked.pdf"):
            raise PermissionError(13, "Permission denied", src)
        return real_move(src, dst)

    monkeypatch.setattr(shutil, "move", fake_move)
    events: list[tuple[str, object]] = []
    mover = FileMover(tmp_path, notify=lambda stage, detail: events.append((stage, detail)))

    result = mover.reorganize_top_level(tmp_path)

    assert [record.source for record in result.moved] == ["/free.txt"]
    assert [error.path for error in result.errors] == ["/locked.pdf"]
    assert "Permission denied" in result.errors[0].message
    assert events == [("tool_error", {"path": "/locked.pdf"})]
    assert (tmp_path / "locked.pdf").exists()


def test_unreadable_root_propagates(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        FileMover(tmp_path).reorganize_top_level(tmp_path / "missing")


def test_unreadable_nested_folder_is_reported(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / "inbox" / "a.txt")
    _write(tmp_path / "locked" / "b.txt")
    real_scandir = os.scandir

    def guarded_scandir(path="."):
        if Path(path).name == "locked":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded_scandir)
    events: list[tuple[str, object]] = []
    mover = FileMover(tmp_path, notify=lambda stage, detail: events.append((stage, detail)))

    result = mover.reorganize_top_level(tmp_path, include_nested=True)

    assert [record.source for record in result.moved] == ["/inbox/a.txt"]
    assert [error.path for error in result.errors] == ["/locked"]
    assert events == [("tool_error", {"path": "/locked"})]
