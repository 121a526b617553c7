from __future__ import annotations

from pathlib import Path

import pytest

from workspace_organizer.folders import create_folder_structure, parse_folder_spec, parse_folder_specs
from workspace_organizer.models import Leaf, Node
from workspace_organizer.utils.fs import WorkspacePathError


def test_parse_folder_spec_variants() -> None:
    assert parse_folder_spec("Docs") == Leaf("Docs")
    assert parse_folder_spec({"name": "Docs"}) == Leaf("Docs")
    assert parse_folder_spec({"name": "Projects", "children": ["A", {"name": "B", "children": ["C"]}]}) == Node(
        "Projects", (Leaf("A"), Node("B", (Leaf("C"),)))
    )


@pytest.mark.parametrize("raw", [42, {"children": []}, {"name": "x", "children": "y"}, "../up", "a/b"])
def test_parse_folder_spec_rejects_bad_input(raw) -> None:
    with pytest.raises(ValueError):
        parse_folder_spec(raw)


def test_create_folder_structure(tmp_path: Path) -> None:
    specs = parse_folder_specs(["Inbox", {"name": "Projects", "children": ["Alpha", "Beta"]}])

    result = create_folder_structure(tmp_path, specs, "Work")

    assert result.created == ["/Work/Inbox", "/Work/Projects", "/Work/Projects/Alpha", "/Work/Projects/Beta"]
    assert result.errors == []
    assert (tmp_path / "Work" / "Projects" / "Beta").is_dir()


def test_create_folder_structure_records_errors(tmp_path: Path) -> None:
    (tmp_path / "Blocked").write_text("a file, not a folder", encoding="utf-8")

    result = create_folder_structure(tmp_path, [Node("Blocked", (Leaf("Child"),)), Leaf("Fine")])

    assert [error.path for error in result.errors] == ["/Blocked"]
    assert result.created == ["/Fine"]


def test_create_folder_structure_rejects_escape(tmp_path: Path) -> None:
    with pytest.raises(WorkspacePathError):
        create_folder_structure(tmp_path, [Leaf("x")], "../elsewhere")
