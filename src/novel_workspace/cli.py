"""
Command-line interface for the novel workspace engine.

A thin adapter: each command loads configuration, calls one public
operation and renders the result as text, a rich table or JSON.
"""

import functools
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .utils.config import load_config, WorkspaceConfig
from .utils.errors import WorkspaceError
from .utils.logging import setup_logging
from .vcs.types import DiffKind
from .vcs.repo import init_repo, repo_state
from .vcs.commit import commit as commit_op
from .vcs.log import log as log_op
from .vcs.checkout import checkout as checkout_op
from .vcs.diff import diff_nodes
from . import workspace


KIND_STYLES = {
    DiffKind.ADDED: "green",
    DiffKind.REMOVED: "red",
    DiffKind.MODIFIED: "yellow",
}


def _console() -> Console:
    # Resolved per call so click's output capture sees it
    return Console(file=sys.stdout, highlight=False)


def _emit_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def reports_errors(func):
    """Print workspace errors as ``error: <message>`` and exit 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WorkspaceError as e:
            click.echo(f"error: {e.message}", err=True)
            sys.exit(1)
    return wrapper


class Context:
    """Shared state for subcommands."""

    def __init__(self, root: Path, config: WorkspaceConfig):
        self.root = root
        self.config = config


pass_context = click.make_pass_decorator(Context)


@click.group()
@click.version_option(__version__, prog_name="novel-ws")
@click.option(
    "--root", "-C",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root directory."
)
@click.option(
    "--config", "config_paths",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Extra configuration file (YAML, JSON or TOML)."
)
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
@reports_errors
def main(ctx: click.Context, root: Path, config_paths, log_level: Optional[str]):
    """Version control for a single project workspace."""
    extra = {"logging": {"level": log_level}} if log_level else None
    config = load_config(root=root, config_paths=list(config_paths), extra_config=extra)

    setup_logging(
        app_name=config.app_name,
        log_level=config.logging.level,
        log_dir=config.logging.directory,
        enable_json=config.logging.format == "json",
        enable_file=config.logging.enable_file,
        enable_sentry=config.logging.enable_sentry,
        sentry_dsn=config.logging.sentry_dsn,
        max_size=config.logging.max_size,
        backup_count=config.logging.backup_count
    )

    ctx.obj = Context(root=root, config=config)


@main.command()
@pass_context
@reports_errors
def init(ctx: Context):
    """Create the repository metadata in the workspace."""
    init_repo(ctx.root, ctx.config)
    click.echo(f"initialized repository in {ctx.root.resolve()}")


@main.command()
@click.option("--message", "-m", required=True, help="Commit message.")
@pass_context
@reports_errors
def commit(ctx: Context, message: str):
    """Snapshot the working tree."""
    node_id = commit_op(ctx.root, message, ctx.config)
    click.echo(node_id)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print JSON.")
@pass_context
@reports_errors
def log(ctx: Context, as_json: bool):
    """Show commit history, newest first."""
    commits = log_op(ctx.root, ctx.config)

    if as_json:
        _emit_json([c.to_dict() for c in commits])
        return

    if not commits:
        click.echo("No commits yet.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Commit", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Parents")
    table.add_column("Message")
    for c in commits:
        table.add_row(
            c.id[:12],
            c.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            ", ".join(p[:12] for p in c.parents),
            c.message
        )
    _console().print(table)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print JSON.")
@pass_context
@reports_errors
def status(ctx: Context, as_json: bool):
    """Show the head commit and commit count."""
    state = repo_state(ctx.root, ctx.config)

    if as_json:
        _emit_json(state.to_dict())
        return

    click.echo(f"head: {state.head or '(none)'}")
    click.echo(f"commits: {state.commit_count}")


@main.command()
@click.argument("node_id")
@pass_context
@reports_errors
def checkout(ctx: Context, node_id: str):
    """Restore the working tree to NODE_ID."""
    checkout_op(ctx.root, node_id, ctx.config)
    click.echo(f"checked out {node_id}")


@main.command()
@click.argument("from_id")
@click.argument("to_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON.")
@pass_context
@reports_errors
def diff(ctx: Context, from_id: str, to_id: str, as_json: bool):
    """Show per-file changes from FROM_ID to TO_ID."""
    result = diff_nodes(ctx.root, from_id, to_id, ctx.config)

    if as_json:
        _emit_json(result.to_dict())
        return

    console = _console()
    if result.is_empty:
        console.print("No changes.")
        return

    for file in result.files:
        style = KIND_STYLES[file.kind]
        console.print(f"[{style}]{file.kind.value:<8}[/{style}] {file.path}", markup=True)
        if file.is_binary:
            console.print("  (binary content)")
        elif file.unified:
            console.print(file.unified, markup=False, end="")


@main.command("ls")
@click.argument("rel", default=".")
@pass_context
@reports_errors
def list_dir(ctx: Context, rel: str):
    """List a directory inside the workspace."""
    for entry in workspace.list_files(ctx.root, rel):
        suffix = "/" if entry.is_dir else ""
        click.echo(f"{entry.path.as_posix()}{suffix}")


@main.command("cat")
@click.argument("rel")
@pass_context
@reports_errors
def cat_file(ctx: Context, rel: str):
    """Print a text file inside the workspace."""
    click.echo(workspace.read_file(ctx.root, rel), nl=False)


if __name__ == "__main__":
    main()
