#!/usr/bin/env python3
"""
novel-workspace - Main entry point for python -m novel_workspace
"""

from novel_workspace.cli import main


if __name__ == "__main__":
    main(prog_name="novel-ws")
