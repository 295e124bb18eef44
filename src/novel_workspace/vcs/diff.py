"""Diff engine

Compares the flat file snapshots of two commits path by path. Unchanged
paths are omitted; binary content is flagged instead of rendered.
"""

import difflib
from pathlib import Path
from typing import Optional, Union, List

from ..utils.config import WorkspaceConfig
from ..utils.logging import get_logger, log_function_call
from .repo import Repository, open_repository, require_node, load_snapshot_map
from .types import DiffKind, FileDiff, NodeDiff, NodeId

logger = get_logger(__name__)


def is_probably_binary(content: bytes) -> bool:
    """NUL bytes or invalid UTF-8 mark content as binary."""
    if b"\x00" in content:
        return True
    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


def normalize_text_for_line_diff(text: str) -> str:
    normalized = text.replace("\r\n", "\n")
    if not normalized.endswith("\n"):
        normalized += "\n"
    return normalized


def split_lines(text: str) -> List[str]:
    """Split normalized text on ``\\n`` only, keeping the terminators.

    Lone ``\\r``, form feeds and Unicode line separators stay inside a line.
    """
    return [line + "\n" for line in normalize_text_for_line_diff(text).split("\n")[:-1]]


def unified_diff(path: str, before: str, after: str) -> str:
    """Line-based unified diff of two texts after newline normalization."""
    before_lines = split_lines(before)
    after_lines = split_lines(after)
    return "".join(difflib.unified_diff(
        before_lines,
        after_lines,
        fromfile=f"a/{path}",
        tofile=f"b/{path}"
    ))


def build_file_diff(
    path: str,
    kind: DiffKind,
    before: Optional[bytes],
    after: Optional[bytes]
) -> FileDiff:
    binary = (
        (before is not None and is_probably_binary(before))
        or (after is not None and is_probably_binary(after))
    )
    if binary:
        return FileDiff(path=path, kind=kind, is_binary=True)

    before_text = before.decode("utf-8") if before is not None else None
    after_text = after.decode("utf-8") if after is not None else None

    unified = None
    if before_text is not None and after_text is not None:
        unified = unified_diff(path, before_text, after_text)

    return FileDiff(
        path=path,
        kind=kind,
        before_text=before_text,
        after_text=after_text,
        unified=unified,
    )


def compute_diff(repo: Repository, from_id: NodeId, to_id: NodeId) -> NodeDiff:
    """Diff two commits of an open repository."""
    require_node(repo, from_id, side="from")
    require_node(repo, to_id, side="to")

    from_map = load_snapshot_map(repo, from_id)
    to_map = load_snapshot_map(repo, to_id)

    files: List[FileDiff] = []
    for path in sorted(set(from_map) | set(to_map)):
        from_blob = from_map.get(path)
        to_blob = to_map.get(path)

        if from_blob is None:
            kind = DiffKind.ADDED
        elif to_blob is None:
            kind = DiffKind.REMOVED
        elif from_blob != to_blob:
            kind = DiffKind.MODIFIED
        else:
            continue

        before = repo.blobs.get(from_blob) if from_blob is not None else None
        after = repo.blobs.get(to_blob) if to_blob is not None else None
        files.append(build_file_diff(path, kind, before, after))

    logger.debug("diff_computed", from_id=from_id, to_id=to_id, files=len(files))
    return NodeDiff(from_id=from_id, to_id=to_id, files=files)


@log_function_call(logger)
def diff_nodes(
    root: Union[str, Path],
    from_id: NodeId,
    to_id: NodeId,
    config: Optional[WorkspaceConfig] = None
) -> NodeDiff:
    """Compare the snapshots of two commits.

    Raises:
        NotFoundError: Either commit is unknown; ``side`` names which one
    """
    with open_repository(root, config) as repo:
        return compute_diff(repo, from_id, to_id)


__all__ = [
    "is_probably_binary",
    "normalize_text_for_line_diff",
    "split_lines",
    "unified_diff",
    "build_file_diff",
    "compute_diff",
    "diff_nodes",
]
