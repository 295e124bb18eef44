"""
Utility modules for the novel workspace engine.

This package contains shared utilities including:
- Configuration management
- Logging setup
- Error handling
"""

from .config import WorkspaceConfig, load_config
from .logging import setup_logging, get_logger
from .errors import (
    WorkspaceError,
    InvalidInputError,
    NotFoundError,
    StorageError,
    error_context,
)

__all__ = [
    'WorkspaceConfig',
    'load_config',
    'setup_logging',
    'get_logger',
    'WorkspaceError',
    'InvalidInputError',
    'NotFoundError',
    'StorageError',
    'error_context',
]
