"""Version control engine

This package snapshots a workspace into a content-addressed store with:
- Atomic commits linked into a history (``vcs.commit``)
- History and state readers (``vcs.log``, ``vcs.repo``)
- Checkout of any earlier snapshot onto the working tree (``vcs.checkout``)
- Structured per-file diffs between snapshots (``vcs.diff``)

The public operations are re-exported from the top-level package.
"""

from .types import Commit, RepoState, DiffKind, FileDiff, NodeDiff, NodeId
from .repo import Repository, open_repository

__all__ = [
    "Commit",
    "RepoState",
    "DiffKind",
    "FileDiff",
    "NodeDiff",
    "NodeId",
    "Repository",
    "open_repository",
]
