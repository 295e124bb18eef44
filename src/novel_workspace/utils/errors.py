"""
Error handling framework for the novel workspace engine.

This module provides:
- Hierarchical exception classes mirroring the engine's failure taxonomy
- Error context preservation
- Translation of sqlite3 and OS errors into storage failures
- Structured error responses for external callers
"""

from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from contextlib import contextmanager
import sqlite3
import traceback

from .logging import get_logger


logger = get_logger("novel-workspace.errors")


class ErrorSeverity(Enum):
    """Error severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PATH = "path"
    STORAGE = "storage"
    CONFIGURATION = "configuration"
    UNSUPPORTED = "unsupported"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context information for an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component: Optional[str] = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None


class WorkspaceError(Exception):
    """Base exception for all workspace engine errors."""

    code: str = "WORKSPACE_ERROR"
    default_message: str = "An error occurred in the workspace engine"
    severity: ErrorSeverity = ErrorSeverity.ERROR
    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        **kwargs
    ):
        """Initialize workspace error."""
        self.message = message or self.default_message
        self.context = context or ErrorContext()
        self.cause = cause
        self.kwargs = kwargs

        # Capture stack trace
        if not self.context.stack_trace and cause is not None:
            self.context.stack_trace = "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

        super().__init__(self.message)

    def get_suggestions(self) -> List[str]:
        """Get error resolution suggestions."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "severity": self.severity.value,
                "category": self.category.value,
                "suggestions": self.get_suggestions(),
                "cause": str(self.cause) if self.cause else None,
                "context": {
                    "timestamp": self.context.timestamp.isoformat(),
                    "component": self.context.component,
                    "operation": self.context.operation,
                    "metadata": self.context.metadata
                }
            }
        }


# Input errors

class InvalidInputError(WorkspaceError):
    """Caller supplied an unusable value (e.g. a blank commit message)."""
    code = "INVALID_INPUT"
    default_message = "Invalid input"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(self, field: str, constraint: str, **kwargs):
        self.field = field
        self.constraint = constraint
        super().__init__(f"invalid {field}: {constraint}", **kwargs)

    def get_suggestions(self) -> List[str]:
        return [f"Check the value of '{self.field}': {self.constraint}"]


class NotFoundError(WorkspaceError):
    """A referenced commit does not exist in history."""
    code = "NOT_FOUND"
    default_message = "Not found"
    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.WARNING

    def __init__(self, node_id: str, side: Optional[str] = None, **kwargs):
        self.node_id = node_id
        self.side = side
        message = f"node not found: {node_id}"
        if side:
            message = f"{side} node not found: {node_id}"
        super().__init__(message, **kwargs)

    def get_suggestions(self) -> List[str]:
        return ["Run the log command to list known commit ids"]


# Path errors

class PathError(WorkspaceError):
    """Base class for workspace path boundary errors."""
    code = "PATH_ERROR"
    default_message = "Path error"
    category = ErrorCategory.PATH
    severity = ErrorSeverity.WARNING

    def __init__(self, path: Any, **kwargs):
        self.path = Path(path) if not isinstance(path, Path) else path
        super().__init__(f"{self.label}: {self.path}", **kwargs)

    label = "path error"


class InvalidRootError(PathError):
    """Workspace root is missing or is not a directory."""
    code = "INVALID_ROOT"
    label = "invalid root"


class PathEscapeError(PathError):
    """A resolved path would leave the workspace root."""
    code = "PATH_ESCAPE"
    label = "path escape"


class PathOutsideRootError(PathError):
    """A discovered path cannot be expressed relative to the root."""
    code = "PATH_OUTSIDE_ROOT"
    label = "path is outside root"


class InvalidFileNameError(WorkspaceError):
    """File name contains separators or is a relative marker."""
    code = "INVALID_FILE_NAME"
    default_message = "Invalid file name"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(self, name: str, **kwargs):
        self.name = name
        super().__init__(f"invalid file name: {name}", **kwargs)


# Storage errors

class StorageError(WorkspaceError):
    """Persistent store or filesystem I/O failure."""
    code = "STORAGE_ERROR"
    default_message = "Storage error occurred"
    category = ErrorCategory.STORAGE
    severity = ErrorSeverity.ERROR

    def get_suggestions(self) -> List[str]:
        return [
            "Check available disk space",
            "Verify permissions on the workspace and its metadata directory"
        ]


class StorageIntegrityError(StorageError):
    """Stored data references content that is missing."""
    code = "STORAGE_INTEGRITY_ERROR"
    default_message = "Storage integrity violated"
    severity = ErrorSeverity.CRITICAL


# Configuration errors

class ConfigurationError(WorkspaceError):
    """Configuration errors."""
    code = "CONFIG_ERROR"
    default_message = "Configuration error"
    category = ErrorCategory.CONFIGURATION

    def get_suggestions(self) -> List[str]:
        return [
            "Check your configuration file syntax",
            "Verify NOVEL_* environment variables"
        ]


class UnsupportedError(WorkspaceError):
    """Operation is not implemented."""
    code = "UNSUPPORTED"
    default_message = "Operation is not supported"
    category = ErrorCategory.UNSUPPORTED

    def __init__(self, operation: str, **kwargs):
        self.operation = operation
        super().__init__(f"{operation} is not implemented", **kwargs)


# Error Context Manager

@contextmanager
def error_context(component: str, operation: str, **metadata):
    """
    Translate low-level failures raised inside the block.

    ``sqlite3.Error`` and ``OSError`` become :class:`StorageError`;
    workspace errors get the component/operation filled in and propagate.

    Args:
        component: Component name
        operation: Operation name
        **metadata: Additional context metadata
    """
    try:
        yield
    except WorkspaceError as e:
        e.context.component = e.context.component or component
        e.context.operation = e.context.operation or operation
        e.context.metadata.update(metadata)
        raise
    except (sqlite3.Error, OSError) as e:
        context = ErrorContext(
            component=component,
            operation=operation,
            metadata=metadata
        )
        storage_error = StorageError(
            message=f"{operation} failed: {e}",
            context=context,
            cause=e
        )
        logger.error(
            "storage_error",
            component=component,
            operation=operation,
            error=str(e),
            error_type=type(e).__name__
        )
        raise storage_error from e


# Export public API
__all__ = [
    'WorkspaceError',
    'ErrorContext',
    'ErrorSeverity',
    'ErrorCategory',
    'InvalidInputError',
    'NotFoundError',
    'PathError',
    'InvalidRootError',
    'PathEscapeError',
    'PathOutsideRootError',
    'InvalidFileNameError',
    'StorageError',
    'StorageIntegrityError',
    'ConfigurationError',
    'UnsupportedError',
    'error_context',
]
