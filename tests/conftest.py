"""
Pytest configuration and shared fixtures for novel-workspace tests.
"""

import pytest
from pathlib import Path
from typing import Callable, Union

from novel_workspace.utils.config import WorkspaceConfig, StorageConfig
from novel_workspace.vcs.repo import init_repo
import novel_workspace.vcs.commit as commit_module


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty workspace directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def config() -> WorkspaceConfig:
    """Default configuration with compression on."""
    return WorkspaceConfig(storage=StorageConfig(compression_enabled=True))


@pytest.fixture
def repo_root(workspace: Path, config: WorkspaceConfig) -> Path:
    """A workspace with an initialized repository."""
    init_repo(workspace, config)
    return workspace


@pytest.fixture
def write_file(workspace: Path) -> Callable[[str, Union[str, bytes]], Path]:
    """Write text or bytes to a workspace-relative path, creating parents."""
    def _write(rel: str, content: Union[str, bytes]) -> Path:
        path = workspace / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            # newline="" keeps \r\n exactly as given
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        return path

    return _write


@pytest.fixture
def clock(monkeypatch):
    """Deterministic, strictly increasing commit timestamps."""
    state = {"now": 1_700_000_000_000}

    def _now() -> int:
        state["now"] += 1000
        return state["now"]

    monkeypatch.setattr(commit_module, "now_unix_ms", _now)
    return state
