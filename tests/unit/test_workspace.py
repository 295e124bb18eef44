"""
Unit tests for the sandboxed workspace file helpers.
"""

import pytest
from pathlib import Path

from novel_workspace.workspace import (
    open_project,
    resolve_path,
    list_files,
    read_file,
    write_file as write_workspace_file,
    create_file,
)
from novel_workspace.utils.errors import (
    InvalidFileNameError,
    InvalidInputError,
    InvalidRootError,
    PathEscapeError,
    StorageError,
)


class TestOpenProject:

    def test_open_existing_directory(self, workspace):
        info = open_project(workspace)

        assert info.root == workspace.resolve()
        assert info.name == "project"
        assert info.to_dict() == {"root": str(workspace.resolve()), "name": "project"}

    def test_missing_root(self, tmp_path):
        with pytest.raises(InvalidRootError):
            open_project(tmp_path / "missing")

    def test_file_is_not_a_root(self, tmp_path):
        path = tmp_path / "plain.txt"
        path.write_text("x")

        with pytest.raises(InvalidRootError):
            open_project(path)


class TestResolvePath:

    def test_resolves_inside_root(self, workspace, write_file):
        write_file("sub/file.txt", "x")

        assert resolve_path(workspace, "sub/file.txt") == (workspace / "sub" / "file.txt").resolve()

    def test_root_itself(self, workspace):
        assert resolve_path(workspace, ".") == workspace.resolve()

    def test_parent_escape_rejected(self, workspace, tmp_path):
        (tmp_path / "outside.txt").write_text("x")

        with pytest.raises(PathEscapeError):
            resolve_path(workspace, "../outside.txt")

    def test_missing_escape_still_reported_as_escape(self, workspace):
        with pytest.raises(PathEscapeError):
            resolve_path(workspace, "../../nope")

    def test_symlink_out_of_root_rejected(self, workspace, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (workspace / "link").symlink_to(outside)

        with pytest.raises(PathEscapeError):
            resolve_path(workspace, "link")

    def test_missing_target(self, workspace):
        with pytest.raises(StorageError):
            resolve_path(workspace, "absent.txt")


class TestListFiles:

    def test_lists_sorted_relative_entries(self, workspace, write_file):
        write_file("b.txt", "b")
        write_file("a/inner.txt", "a")

        entries = list_files(workspace)

        assert [(e.path, e.is_dir) for e in entries] == [
            (Path("a"), True),
            (Path("b.txt"), False),
        ]

    def test_lists_subdirectory(self, workspace, write_file):
        write_file("a/inner.txt", "a")

        entries = list_files(workspace, "a")

        assert [e.to_dict() for e in entries] == [{"path": "a/inner.txt", "is_dir": False}]


class TestReadWrite:

    def test_write_then_read(self, workspace):
        write_workspace_file(workspace, "note.txt", "café\n")

        assert read_file(workspace, "note.txt") == "café\n"

    def test_write_overwrites(self, workspace):
        write_workspace_file(workspace, "note.txt", "one")
        write_workspace_file(workspace, "note.txt", "two")

        assert read_file(workspace, "note.txt") == "two"

    def test_write_outside_root_rejected(self, workspace, tmp_path):
        with pytest.raises(PathEscapeError):
            write_workspace_file(workspace, "../evil.txt", "x")

        assert not (tmp_path / "evil.txt").exists()

    def test_write_requires_existing_parent(self, workspace):
        with pytest.raises(StorageError):
            write_workspace_file(workspace, "missing/dir/file.txt", "x")

    def test_write_to_directory_rejected(self, workspace):
        (workspace / "dir").mkdir()

        with pytest.raises(InvalidInputError):
            write_workspace_file(workspace, "dir", "x")

    def test_read_directory_rejected(self, workspace):
        (workspace / "dir").mkdir()

        with pytest.raises(InvalidInputError):
            read_file(workspace, "dir")

    def test_read_non_utf8_raises_storage_error(self, workspace, write_file):
        write_file("latin1.txt", b"caf\xe9\n")

        with pytest.raises(StorageError) as exc_info:
            read_file(workspace, "latin1.txt")

        assert "latin1.txt" in exc_info.value.message
        assert isinstance(exc_info.value.cause, UnicodeDecodeError)

    def test_read_keeps_line_endings(self, workspace, write_file):
        write_file("crlf.txt", "one\r\ntwo")

        assert read_file(workspace, "crlf.txt") == "one\r\ntwo"


class TestCreateFile:

    def test_creates_empty_file(self, workspace):
        (workspace / "chapters").mkdir()

        rel = create_file(workspace, "chapters", "one.md")

        assert rel == Path("chapters/one.md")
        assert (workspace / "chapters" / "one.md").read_text() == ""

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a\\b"])
    def test_invalid_names(self, workspace, name):
        with pytest.raises(InvalidFileNameError):
            create_file(workspace, ".", name)

    def test_existing_file_rejected(self, workspace, write_file):
        write_file("taken.txt", "x")

        with pytest.raises(StorageError):
            create_file(workspace, ".", "taken.txt")

        assert (workspace / "taken.txt").read_text() == "x"

    def test_parent_must_be_directory(self, workspace, write_file):
        write_file("plain.txt", "x")

        with pytest.raises(InvalidInputError):
            create_file(workspace, "plain.txt", "child")
