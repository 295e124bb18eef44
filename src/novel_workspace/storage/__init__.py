"""
Storage components for the novel workspace engine.

This package provides:
- A sqlite3 database wrapper with explicit transactions
- Content-addressable blob storage
"""

from .database import Database, SCHEMA_VERSION
from .cas import ContentStore, blob_id_for_content

__all__ = [
    'Database',
    'SCHEMA_VERSION',
    'ContentStore',
    'blob_id_for_content',
]
