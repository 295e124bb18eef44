"""Checkout engine

Rewrites the working tree to match a commit's snapshot. The filesystem
phase is not transactional: on failure the tree may be partially rewritten,
but head only moves once every delete and write has succeeded.
"""

from pathlib import Path
from typing import Optional, Union, Iterable

from ..utils.config import WorkspaceConfig
from ..utils.errors import error_context
from ..utils.logging import get_logger, log_function_call
from .repo import Repository, open_repository, require_node, set_head
from .snapshot import collect_files_in_workspace
from .types import NodeId

logger = get_logger(__name__)


def _prune_empty_parents(root: Path, deleted: Iterable[str]) -> int:
    """Remove directories left empty by deletions, never ``root`` itself."""
    removed = 0
    candidates = {(root / rel).parent for rel in deleted}
    # Deepest first so children go before their parents
    for directory in sorted(candidates, key=lambda p: len(p.parts), reverse=True):
        while directory != root and root in directory.parents:
            try:
                directory.rmdir()
            except OSError:
                break
            removed += 1
            directory = directory.parent
    return removed


def apply_checkout(repo: Repository, target: NodeId) -> None:
    """Make the working tree of ``repo`` match ``target`` and move head."""
    require_node(repo, target)

    target_files = repo.blobs.load_snapshot(target)
    current = set(collect_files_in_workspace(repo.root, repo.meta_dir_name))
    stale = sorted(current - set(target_files))

    with error_context("checkout", "delete", target=target):
        for rel in stale:
            (repo.root / rel).unlink()
    pruned = _prune_empty_parents(repo.root, stale)

    with error_context("checkout", "write", target=target):
        for rel, content in target_files.items():
            path = repo.root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

    set_head(repo, target)

    logger.info(
        "checkout_completed",
        commit_id=target,
        written=len(target_files),
        deleted=len(stale),
        pruned_dirs=pruned
    )


@log_function_call(logger)
def checkout(
    root: Union[str, Path],
    node_id: NodeId,
    config: Optional[WorkspaceConfig] = None
) -> None:
    """Restore the snapshot of ``node_id`` onto the working tree.

    Raises:
        NotFoundError: ``node_id`` is not in history; nothing was touched
        StorageError: A filesystem or store operation failed; head is
            unchanged
    """
    with open_repository(root, config) as repo:
        apply_checkout(repo, node_id)


__all__ = ["apply_checkout", "checkout"]
