"""Content-addressable blob store backed by the metadata database"""

import hashlib
from typing import Optional, Dict, Any, Iterable

import zstandard as zstd

from .database import Database
from ..utils.logging import get_logger
from ..utils.errors import StorageIntegrityError

logger = get_logger(__name__)

BLOB_PREFIX = b"blob "


def blob_id_for_content(content: bytes) -> str:
    """Return ``hex(sha256(b"blob " + content))``."""
    hasher = hashlib.sha256()
    hasher.update(BLOB_PREFIX)
    hasher.update(content)
    return hasher.hexdigest()


class ContentStore:
    """Content-addressable storage with optional zstd compression

    Blobs are keyed by :func:`blob_id_for_content` over their raw bytes and
    are write-once: storing an id that already exists does nothing. Content
    is compressed at rest only when that makes it smaller.
    """

    def __init__(
        self,
        db: Database,
        compression_enabled: bool = True,
        compression_level: int = 3
    ):
        """Initialize the store

        Args:
            db: Open database handle shared with the calling operation
            compression_enabled: Compress blobs at rest
            compression_level: Zstd compression level (1-22)
        """
        self.db = db
        self.compression_enabled = compression_enabled
        self.compression_level = compression_level

        self._compressor = zstd.ZstdCompressor(level=compression_level)
        self._decompressor = zstd.ZstdDecompressor()

        self._stats = {
            "blobs_written": 0,
            "dedup_hits": 0,
            "bytes_written": 0,
            "bytes_stored": 0,
        }

    def put(self, content: bytes, blob_id: Optional[str] = None) -> str:
        """Store content and return its blob id

        Args:
            content: Raw bytes
            blob_id: Precomputed id for ``content``, if the caller has one

        Returns:
            Blob id
        """
        if blob_id is None:
            blob_id = blob_id_for_content(content)

        if self.exists(blob_id):
            self._stats["dedup_hits"] += 1
            logger.debug("blob_dedup_hit", blob_id=blob_id)
            return blob_id

        stored, compressed = self._encode(content)

        self.db.execute(
            "INSERT INTO blobs (id, content, size, compressed) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(id) DO NOTHING",
            (blob_id, stored, len(content), int(compressed))
        )

        self._stats["blobs_written"] += 1
        self._stats["bytes_written"] += len(content)
        self._stats["bytes_stored"] += len(stored)
        logger.debug(
            "blob_stored",
            blob_id=blob_id,
            size=len(content),
            stored_size=len(stored)
        )
        return blob_id

    def get(self, blob_id: str) -> bytes:
        """Return the raw bytes of a blob

        Raises:
            StorageIntegrityError: The blob is missing or unreadable
        """
        row = self.db.fetchone(
            "SELECT content, compressed FROM blobs WHERE id = ?",
            (blob_id,)
        )
        if row is None:
            raise StorageIntegrityError(f"blob missing from store: {blob_id}")
        return self._decode(blob_id, row[0], bool(row[1]))

    def get_many(self, blob_ids: Iterable[str]) -> Dict[str, bytes]:
        """Fetch several blobs, keyed by id"""
        return {blob_id: self.get(blob_id) for blob_id in set(blob_ids)}

    def exists(self, blob_id: str) -> bool:
        """Check if a blob exists"""
        row = self.db.fetchone("SELECT 1 FROM blobs WHERE id = ?", (blob_id,))
        return row is not None

    def load_snapshot(self, node_id: str) -> Dict[str, bytes]:
        """Return ``path -> content`` for every file of a commit"""
        rows = self.db.fetchall(
            "SELECT nf.path, nf.blob_id, b.content, b.compressed "
            "FROM node_files nf LEFT JOIN blobs b ON b.id = nf.blob_id "
            "WHERE nf.node_id = ? ORDER BY nf.path",
            (node_id,)
        )

        files = {}
        for path, blob_id, stored, compressed in rows:
            if stored is None:
                raise StorageIntegrityError(
                    f"blob {blob_id} missing for {path} in node {node_id}"
                )
            files[path] = self._decode(blob_id, stored, bool(compressed))
        return files

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics for this store handle"""
        row = self.db.fetchone(
            "SELECT COUNT(*), COALESCE(SUM(size), 0), COALESCE(SUM(LENGTH(content)), 0) FROM blobs"
        )
        return {
            **self._stats,
            "blob_count": row[0],
            "total_size": row[1],
            "stored_size": row[2],
            "compression_enabled": self.compression_enabled,
        }

    def _encode(self, content: bytes) -> tuple:
        if not self.compression_enabled or not content:
            return content, False

        compressed = self._compressor.compress(content)
        if len(compressed) < len(content):
            return compressed, True
        return content, False

    def _decode(self, blob_id: str, stored: bytes, compressed: bool) -> bytes:
        if not compressed:
            return bytes(stored)

        try:
            return self._decompressor.decompress(stored)
        except zstd.ZstdError as e:
            raise StorageIntegrityError(
                f"blob {blob_id} could not be decompressed: {e}",
                cause=e
            ) from e


__all__ = [
    "ContentStore",
    "blob_id_for_content",
]
