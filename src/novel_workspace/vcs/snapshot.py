"""Working-tree enumeration for commits and checkouts.

The walker lists regular files only. Symlinks and directories are never
entries, and directories named like the metadata directory are skipped at
any depth. Paths are root-relative, ``/``-separated and sorted.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..storage.cas import blob_id_for_content
from ..utils.errors import PathOutsideRootError, error_context
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_META_DIR = ".novel"


@dataclass(frozen=True)
class SnapshotFile:
    """One file of the working tree, read for a commit"""
    path: str
    blob_id: str
    content: bytes


def normalize_rel_path(rel: str) -> str:
    """Use ``/`` as the only separator."""
    return rel.replace("\\", "/")


def _collect_files_recursive(root: Path, directory: Path, meta_dir_name: str, out: List[str]) -> None:
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if entry.name == meta_dir_name:
                    continue
                _collect_files_recursive(root, Path(entry.path), meta_dir_name, out)
            elif entry.is_file(follow_symlinks=False):
                path = Path(entry.path)
                try:
                    rel = path.relative_to(root)
                except ValueError as e:
                    raise PathOutsideRootError(path, cause=e) from e
                out.append(normalize_rel_path(rel.as_posix()))


def collect_files_in_workspace(root: Path, meta_dir_name: str = DEFAULT_META_DIR) -> List[str]:
    """List every tracked file under ``root``.

    Args:
        root: Canonical workspace root
        meta_dir_name: Name of the private metadata directory to skip

    Returns:
        Sorted root-relative paths

    Raises:
        StorageError: A directory could not be read
        PathOutsideRootError: A path could not be made relative to ``root``
    """
    out: List[str] = []
    with error_context("snapshot", "walk", root=str(root)):
        _collect_files_recursive(root, root, meta_dir_name, out)
    out.sort()
    return out


def read_snapshot(root: Path, meta_dir_name: str = DEFAULT_META_DIR) -> List[SnapshotFile]:
    """Read the full contents of every tracked file and hash it."""
    files = []
    for rel in collect_files_in_workspace(root, meta_dir_name):
        with error_context("snapshot", "read", path=rel):
            content = (root / rel).read_bytes()
        files.append(SnapshotFile(
            path=rel,
            blob_id=blob_id_for_content(content),
            content=content
        ))

    logger.debug("snapshot_read", root=str(root), files=len(files))
    return files


__all__ = [
    "SnapshotFile",
    "DEFAULT_META_DIR",
    "normalize_rel_path",
    "collect_files_in_workspace",
    "read_snapshot",
]
