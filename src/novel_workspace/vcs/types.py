"""Data model for commits, repository state and diffs"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List

NodeId = str


@dataclass(frozen=True)
class Commit:
    """Immutable snapshot node in the history graph"""
    id: NodeId
    message: str
    created_at_unix_ms: int
    # Ordered; the commit engine writes at most one, merges may add more
    parents: List[NodeId] = field(default_factory=list)

    @property
    def created_at(self) -> datetime:
        """Creation time as an aware UTC datetime"""
        return datetime.fromtimestamp(self.created_at_unix_ms / 1000, tz=timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "parents": list(self.parents),
            "message": self.message,
            "created_at_unix_ms": self.created_at_unix_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Commit':
        """Create from dictionary"""
        return cls(
            id=data["id"],
            message=data["message"],
            created_at_unix_ms=int(data["created_at_unix_ms"]),
            parents=list(data.get("parents", [])),
        )


@dataclass(frozen=True)
class RepoState:
    """Cheap summary of a repository"""
    head: Optional[NodeId]
    commit_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"head": self.head, "node_count": self.commit_count}


class DiffKind(Enum):
    """How a path changed between two commits"""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass
class FileDiff:
    """Change to a single path"""
    path: str
    kind: DiffKind
    before_text: Optional[str] = None
    after_text: Optional[str] = None
    unified: Optional[str] = None
    is_binary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind.value,
            "before_text": self.before_text,
            "after_text": self.after_text,
            "unified": self.unified,
            "is_binary": self.is_binary,
        }


@dataclass
class NodeDiff:
    """Per-file changes between two commits, sorted by path"""
    from_id: NodeId
    to_id: NodeId
    files: List[FileDiff] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "files": [f.to_dict() for f in self.files],
        }


__all__ = [
    "NodeId",
    "Commit",
    "RepoState",
    "DiffKind",
    "FileDiff",
    "NodeDiff",
]
