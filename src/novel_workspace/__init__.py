"""
novel-workspace - an embedded, file-based version control engine.

This package snapshots a project directory into a content-addressed store
kept under ``<root>/.novel/`` and provides:
- Atomic commits linked into a history
- History and repository state queries
- Checkout of earlier snapshots onto the working tree
- Structured per-file diffs between snapshots
- Sandboxed file helpers for tools built around a workspace
"""

__version__ = "0.1.0"

from .vcs.types import Commit, RepoState, DiffKind, FileDiff, NodeDiff, NodeId
from .vcs.repo import init_repo, repo_state, open_repository
from .vcs.commit import commit
from .vcs.log import log
from .vcs.checkout import checkout
from .vcs.diff import diff_nodes
from .utils.config import WorkspaceConfig, load_config
from .utils.errors import (
    WorkspaceError,
    InvalidInputError,
    NotFoundError,
    PathEscapeError,
    PathOutsideRootError,
    InvalidRootError,
    StorageError,
    StorageIntegrityError,
)

__all__ = [
    'init_repo',
    'commit',
    'log',
    'repo_state',
    'checkout',
    'diff_nodes',
    'open_repository',
    'Commit',
    'RepoState',
    'DiffKind',
    'FileDiff',
    'NodeDiff',
    'NodeId',
    'WorkspaceConfig',
    'load_config',
    'WorkspaceError',
    'InvalidInputError',
    'NotFoundError',
    'PathEscapeError',
    'PathOutsideRootError',
    'InvalidRootError',
    'StorageError',
    'StorageIntegrityError',
]
