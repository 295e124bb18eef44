"""Commit history reader"""

from pathlib import Path
from typing import Optional, List, Union

from ..utils.config import WorkspaceConfig
from ..utils.logging import get_logger, log_function_call
from .repo import Repository, open_repository
from .types import Commit, NodeId

logger = get_logger(__name__)


def load_parents(repo: Repository, node_id: NodeId) -> List[NodeId]:
    rows = repo.db.fetchall(
        "SELECT parent_id FROM node_parents WHERE node_id = ? ORDER BY ord ASC",
        (node_id,)
    )
    return [row[0] for row in rows]


def read_log(repo: Repository) -> List[Commit]:
    """Commits newest first; equal timestamps keep store order."""
    rows = repo.db.fetchall(
        "SELECT id, message, created_at_unix_ms FROM nodes "
        "ORDER BY created_at_unix_ms DESC"
    )
    return [
        Commit(
            id=node_id,
            message=message,
            created_at_unix_ms=created_at_ms,
            parents=load_parents(repo, node_id)
        )
        for node_id, message, created_at_ms in rows
    ]


@log_function_call(logger)
def log(root: Union[str, Path], config: Optional[WorkspaceConfig] = None) -> List[Commit]:
    """Return the full history of the repository at ``root``."""
    with open_repository(root, config) as repo:
        return read_log(repo)


__all__ = ["load_parents", "read_log", "log"]
