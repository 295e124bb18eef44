"""
Unit tests for the error hierarchy and error_context translation.
"""

import sqlite3

import pytest

from novel_workspace.utils.errors import (
    WorkspaceError,
    ErrorCategory,
    ErrorSeverity,
    InvalidInputError,
    NotFoundError,
    PathEscapeError,
    InvalidRootError,
    StorageError,
    StorageIntegrityError,
    UnsupportedError,
    error_context,
)


class TestErrorHierarchy:
    """Error classes and their serialized form."""

    def test_invalid_input_message(self):
        error = InvalidInputError("message", "empty commit message")

        assert error.message == "invalid message: empty commit message"
        assert error.field == "message"
        assert error.category == ErrorCategory.VALIDATION

    def test_not_found_names_side(self):
        plain = NotFoundError("abc")
        sided = NotFoundError("abc", side="to")

        assert str(plain) == "node not found: abc"
        assert str(sided) == "to node not found: abc"
        assert sided.node_id == "abc"
        assert sided.side == "to"

    def test_path_errors_share_base(self):
        escape = PathEscapeError("/tmp/x/../../etc")
        root = InvalidRootError("/missing")

        assert escape.code == "PATH_ESCAPE"
        assert root.code == "INVALID_ROOT"
        assert str(root) == "invalid root: /missing"
        assert isinstance(escape, WorkspaceError)

    def test_integrity_error_is_storage_error(self):
        error = StorageIntegrityError("blob missing")

        assert isinstance(error, StorageError)
        assert error.severity == ErrorSeverity.CRITICAL

    def test_unsupported_names_operation(self):
        assert str(UnsupportedError("merge")) == "merge is not implemented"

    def test_to_dict(self):
        error = StorageError("disk full")

        data = error.to_dict()["error"]
        assert data["code"] == "STORAGE_ERROR"
        assert data["message"] == "disk full"
        assert data["category"] == "storage"
        assert data["severity"] == "error"
        assert data["suggestions"]
        assert data["cause"] is None


class TestErrorContext:
    """Translation of low-level failures."""

    def test_os_error_becomes_storage_error(self):
        with pytest.raises(StorageError) as exc_info:
            with error_context("snapshot", "read", path="a.txt"):
                raise PermissionError(13, "Permission denied")

        error = exc_info.value
        assert isinstance(error.cause, PermissionError)
        assert error.__cause__ is error.cause
        assert error.context.component == "snapshot"
        assert error.context.operation == "read"
        assert error.context.metadata == {"path": "a.txt"}
        assert error.context.stack_trace

    def test_sqlite_error_becomes_storage_error(self):
        with pytest.raises(StorageError) as exc_info:
            with error_context("database", "execute"):
                raise sqlite3.OperationalError("database is locked")

        assert "database is locked" in exc_info.value.message

    def test_workspace_errors_pass_through_with_context(self):
        with pytest.raises(NotFoundError) as exc_info:
            with error_context("checkout", "resolve", target="abc"):
                raise NotFoundError("abc")

        assert exc_info.value.context.component == "checkout"
        assert exc_info.value.context.metadata["target"] == "abc"

    def test_other_exceptions_propagate_untouched(self):
        with pytest.raises(KeyError):
            with error_context("diff", "compute"):
                raise KeyError("x")
