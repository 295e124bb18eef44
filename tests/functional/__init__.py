"""
Functional tests for novel-workspace.

These tests run the public operations and the CLI against real temporary
workspaces: real files, a real SQLite store, no mocks of the engine.

Test Categories:
- VCS operations: init, commit, log, status, checkout and diff end to end
- CLI: every novel-ws command through click's CliRunner

Usage:
    pytest tests/functional/  # Run all functional tests
    pytest tests/functional/test_cli.py  # Run specific test
"""
