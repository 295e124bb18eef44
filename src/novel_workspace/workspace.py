"""
Sandboxed file helpers for tools built around a workspace.

Every relative path is resolved against the canonical root and rejected if
it would land outside it. The version control engine walks the tree itself
and does not go through these helpers.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union, Dict, Any

from .utils.errors import (
    InvalidFileNameError,
    InvalidInputError,
    PathEscapeError,
    PathOutsideRootError,
    StorageError,
    error_context,
)
from .utils.logging import get_logger
from .vcs.repo import canonicalize_root

logger = get_logger("novel-workspace.workspace")


@dataclass(frozen=True)
class ProjectInfo:
    """An opened project directory."""
    root: Path
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"root": str(self.root), "name": self.name}


@dataclass(frozen=True)
class FileEntry:
    """One directory listing entry, relative to the project root."""
    path: Path
    is_dir: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path.as_posix(), "is_dir": self.is_dir}


def open_project(root: Union[str, Path]) -> ProjectInfo:
    """Validate ``root`` and describe it."""
    canonical = canonicalize_root(root)
    return ProjectInfo(root=canonical, name=canonical.name or "project")


def resolve_path(root: Union[str, Path], rel: str) -> Path:
    """
    Resolve ``rel`` against ``root``, refusing anything outside it.

    The target must exist. Symlinks are followed before the check.

    Raises:
        PathEscapeError: The resolved path is outside ``root``
        StorageError: The target does not exist
    """
    canonical_root = canonicalize_root(root)
    joined = canonical_root / rel

    with error_context("workspace", "resolve_path", rel=rel):
        candidate = joined.resolve()

    if candidate != canonical_root and canonical_root not in candidate.parents:
        logger.warning("path_escape_blocked", root=str(canonical_root), rel=rel)
        raise PathEscapeError(joined)

    with error_context("workspace", "resolve_path", rel=rel):
        return candidate.resolve(strict=True)


def list_files(root: Union[str, Path], rel: str = ".") -> List[FileEntry]:
    """List the direct children of a directory inside the workspace."""
    canonical_root = canonicalize_root(root)
    directory = resolve_path(canonical_root, rel)

    entries = []
    with error_context("workspace", "list_files", rel=rel):
        for path in directory.iterdir():
            try:
                rel_path = path.relative_to(canonical_root)
            except ValueError as e:
                raise PathOutsideRootError(path, cause=e) from e
            entries.append(FileEntry(path=rel_path, is_dir=path.is_dir()))

    entries.sort(key=lambda e: e.path)
    return entries


def read_file(root: Union[str, Path], rel: str) -> str:
    """Read a UTF-8 text file inside the workspace."""
    path = resolve_path(root, rel)

    if not path.is_file():
        raise InvalidInputError("path", f"not a file: {rel}")

    with error_context("workspace", "read_file", rel=rel):
        content = path.read_bytes()

    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StorageError(f"read_file failed: {rel} is not valid UTF-8", cause=e) from e


def write_file(root: Union[str, Path], rel: str, content: str) -> None:
    """Write text to a file whose parent directory is inside the workspace."""
    canonical_root = canonicalize_root(root)
    path = canonical_root / rel

    with error_context("workspace", "write_file", rel=rel):
        parent = path.parent.resolve(strict=True)

    if parent != canonical_root and canonical_root not in parent.parents:
        raise PathEscapeError(path)

    target = parent / path.name
    if target.exists() and not target.is_file():
        raise InvalidInputError("path", f"not a file: {rel}")

    with error_context("workspace", "write_file", rel=rel):
        target.write_text(content, encoding="utf-8")


def create_file(root: Union[str, Path], rel: str, name: str) -> Path:
    """
    Create an empty file ``name`` in directory ``rel``.

    Returns:
        Path of the new file relative to the root

    Raises:
        InvalidFileNameError: ``name`` is empty, a relative marker or has a separator
        StorageError: The file already exists
    """
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise InvalidFileNameError(name)

    canonical_root = canonicalize_root(root)
    parent = resolve_path(canonical_root, rel)

    if not parent.is_dir():
        raise InvalidInputError("path", f"not a directory: {rel}")

    path = parent / name
    try:
        rel_path = path.relative_to(canonical_root)
    except ValueError as e:
        raise PathOutsideRootError(path, cause=e) from e

    with error_context("workspace", "create_file", rel=str(rel_path)):
        # Exclusive create fails on an existing file
        with open(path, "x", encoding="utf-8"):
            pass

    return rel_path


__all__ = [
    "ProjectInfo",
    "FileEntry",
    "open_project",
    "resolve_path",
    "list_files",
    "read_file",
    "write_file",
    "create_file",
]
