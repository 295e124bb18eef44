"""Repository handle, initialization and state queries"""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Iterator, Union

from ..storage.database import Database
from ..storage.cas import ContentStore
from ..utils.config import WorkspaceConfig
from ..utils.errors import InvalidRootError, NotFoundError, error_context
from ..utils.logging import get_logger, log_function_call
from .types import NodeId, RepoState

logger = get_logger(__name__)


@dataclass
class Repository:
    """Open repository passed explicitly into every engine step

    Holds the canonical root, the database connection for the current
    operation and a content store sharing that connection.
    """
    root: Path
    meta_dir: Path
    config: WorkspaceConfig
    db: Database
    blobs: ContentStore

    @property
    def meta_dir_name(self) -> str:
        return self.config.storage.meta_dir_name


def canonicalize_root(root: Union[str, Path]) -> Path:
    """Resolve ``root`` to an existing absolute directory."""
    path = Path(root)
    try:
        canonical = path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(path, cause=e) from e

    if not canonical.is_dir():
        raise InvalidRootError(path)
    return canonical


@contextmanager
def open_repository(
    root: Union[str, Path],
    config: Optional[WorkspaceConfig] = None
) -> Iterator[Repository]:
    """Open the repository at ``root`` for the duration of one operation.

    Creates the metadata directory and schema on first use and always
    closes the connection on exit.
    """
    config = config or WorkspaceConfig()
    storage = config.storage
    canonical_root = canonicalize_root(root)

    meta_dir = canonical_root / storage.meta_dir_name
    with error_context("repo", "create_meta_dir", path=str(meta_dir)):
        meta_dir.mkdir(exist_ok=True)

    db = Database(
        meta_dir / storage.db_file,
        timeout=storage.timeout,
        journal_mode=storage.journal_mode,
        synchronous=storage.synchronous
    )
    try:
        db.initialize()
        yield Repository(
            root=canonical_root,
            meta_dir=meta_dir,
            config=config,
            db=db,
            blobs=ContentStore(
                db,
                compression_enabled=storage.compression_enabled,
                compression_level=storage.compression_level
            )
        )
    finally:
        db.close()


def read_head(repo: Repository) -> Optional[NodeId]:
    row = repo.db.fetchone("SELECT node_id FROM head WHERE singleton = 1")
    return row[0] if row else None


def set_head(repo: Repository, node_id: Optional[NodeId]) -> None:
    repo.db.execute("UPDATE head SET node_id = ? WHERE singleton = 1", (node_id,))


def node_exists(repo: Repository, node_id: NodeId) -> bool:
    row = repo.db.fetchone("SELECT 1 FROM nodes WHERE id = ?", (node_id,))
    return row is not None


def require_node(repo: Repository, node_id: NodeId, side: Optional[str] = None) -> None:
    """Raise :class:`NotFoundError` unless ``node_id`` is in history."""
    if not node_exists(repo, node_id):
        raise NotFoundError(node_id, side=side)


def load_snapshot_map(repo: Repository, node_id: NodeId) -> Dict[str, str]:
    """Return ``path -> blob_id`` for a commit."""
    rows = repo.db.fetchall(
        "SELECT path, blob_id FROM node_files WHERE node_id = ?",
        (node_id,)
    )
    return dict(rows)


@log_function_call(logger)
def init_repo(root: Union[str, Path], config: Optional[WorkspaceConfig] = None) -> None:
    """Create the metadata directory and schema. Safe to repeat."""
    with open_repository(root, config) as repo:
        logger.info("repo_initialized", root=str(repo.root), meta_dir=str(repo.meta_dir))


@log_function_call(logger)
def repo_state(root: Union[str, Path], config: Optional[WorkspaceConfig] = None) -> RepoState:
    """Return the head commit id and the number of commits."""
    with open_repository(root, config) as repo:
        count = repo.db.fetchone("SELECT COUNT(*) FROM nodes")[0]
        return RepoState(head=read_head(repo), commit_count=count)


__all__ = [
    "Repository",
    "canonicalize_root",
    "open_repository",
    "read_head",
    "set_head",
    "node_exists",
    "require_node",
    "load_snapshot_map",
    "init_repo",
    "repo_state",
]
