"""Commit engine

A commit snapshots the whole working tree. The node row, its parent link,
the head update, every blob and every file association are written in one
transaction, so readers either see the complete commit or nothing.
"""

import hashlib
import time
from pathlib import Path
from typing import Optional, Union

from ..utils.config import WorkspaceConfig
from ..utils.errors import InvalidInputError, error_context
from ..utils.logging import get_logger, log_function_call
from .repo import Repository, open_repository, read_head, set_head
from .snapshot import read_snapshot
from .types import NodeId

logger = get_logger(__name__)


def now_unix_ms() -> int:
    """Wall-clock milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def new_node_id(message: str, parent: Optional[NodeId], created_at_ms: int) -> NodeId:
    """Derive a commit id from its message, timestamp and parent.

    Two commits with the same message and parent in the same millisecond
    get the same id; the second insert then fails and rolls back.
    """
    hasher = hashlib.sha256()
    hasher.update(b"v1\n")
    hasher.update(message.encode("utf-8"))
    hasher.update(b"\n")
    hasher.update(str(created_at_ms).encode("ascii"))
    hasher.update(b"\n")
    if parent is not None:
        hasher.update(parent.encode("utf-8"))
    return hasher.hexdigest()


def create_commit(repo: Repository, message: str) -> NodeId:
    """Snapshot the working tree of an open repository.

    Args:
        repo: Open repository handle
        message: Already-trimmed, non-empty commit message

    Returns:
        The new commit id
    """
    files = read_snapshot(repo.root, repo.meta_dir_name)

    with error_context("commit", "write", files=len(files)):
        with repo.db.transaction():
            created_at_ms = now_unix_ms()
            parent = read_head(repo)
            node_id = new_node_id(message, parent, created_at_ms)

            repo.db.execute(
                "INSERT INTO nodes (id, message, created_at_unix_ms) VALUES (?, ?, ?)",
                (node_id, message, created_at_ms)
            )
            if parent is not None:
                repo.db.execute(
                    "INSERT INTO node_parents (node_id, parent_id, ord) VALUES (?, ?, 0)",
                    (node_id, parent)
                )

            set_head(repo, node_id)

            for file in files:
                repo.blobs.put(file.content, blob_id=file.blob_id)
            repo.db.executemany(
                "INSERT INTO node_files (node_id, path, blob_id) VALUES (?, ?, ?)",
                [(node_id, file.path, file.blob_id) for file in files]
            )

    logger.info(
        "commit_created",
        commit_id=node_id,
        parent_id=parent,
        files=len(files),
        message=message
    )
    return node_id


@log_function_call(logger)
def commit(
    root: Union[str, Path],
    message: str,
    config: Optional[WorkspaceConfig] = None
) -> NodeId:
    """Record the current working tree as a new commit on top of head.

    Args:
        root: Workspace root
        message: Commit message; surrounding whitespace is dropped
        config: Engine configuration (defaults when omitted)

    Returns:
        The new commit id

    Raises:
        InvalidInputError: ``message`` is empty after trimming
        StorageError: Reading the tree or writing the store failed; nothing
            was written
    """
    message_text = message.strip()
    if not message_text:
        raise InvalidInputError("message", "empty commit message")

    with open_repository(root, config) as repo:
        return create_commit(repo, message_text)


__all__ = [
    "now_unix_ms",
    "new_node_id",
    "create_commit",
    "commit",
]
