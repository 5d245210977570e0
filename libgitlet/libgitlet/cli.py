"""Command-line interface for libgitlet."""

import logging
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any

import click

from .constants import DEFAULT_REPO_DIR, SHORT_HASH_LENGTH
from .exceptions import MergeNotNeededError, RepositoryError
from .repository import LogEntry, Repository, Status

CHECKOUT_SEPARATOR = '--'


def format_log_entry(entry: LogEntry) -> str:
    """Render one commit the way `log` and `global-log` print it."""
    commit = entry.commit
    lines = ['===', f'commit {entry.commit_id}']
    if commit.is_merge:
        first, second = commit.parents
        lines.append(f'Merge: {first[:SHORT_HASH_LENGTH]} {second[:SHORT_HASH_LENGTH]}')

    date = datetime.fromtimestamp(commit.timestamp).astimezone()
    lines.append(f'Date: {date.strftime("%a %b %d %H:%M:%S %Y %z")}')
    lines.append(commit.message)
    return '\n'.join(lines) + '\n'


def format_status(status: Status) -> str:
    sections = [
        ('Branches', [f'*{b}' if b == status.current_branch else b for b in status.branches]),
        ('Staged Files', status.staged),
        ('Removed Files', status.removed),
        ('Modifications Not Staged For Commit', [f'{name} ({kind})' for name, kind in status.modified]),
        ('Untracked Files', status.untracked),
    ]
    return '\n'.join(f'=== {title} ===\n' + ''.join(f'{line}\n' for line in lines) for title, lines in sections)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Print repository errors as plain messages and exit non-zero."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except MergeNotNeededError as e:
            click.echo(str(e))
        except (RepositoryError, ValueError) as e:
            click.echo(str(e))
            click.get_current_context().exit(1)

    return wrapper


class CheckoutCommand(click.Command):
    """Remember where `--` appeared, since click strips it before arguments are bound."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta['separator_index'] = args.index(CHECKOUT_SEPARATOR) if CHECKOUT_SEPARATOR in args else None
        return super().parse_args(ctx, args)


@click.group()
@click.option('--work-tree', type=click.Path(file_okay=False, path_type=Path), default=Path('.'),
              envvar='GITLET_WORK_TREE', show_default=True, help='Working directory of the repository.')
@click.option('--repo-dir', default=DEFAULT_REPO_DIR, envvar='GITLET_REPO_DIR', show_default=True,
              help='Name of the repository directory inside the working directory.')
@click.option('-v', '--verbose', is_flag=True, help='Log repository operations to stderr.')
@click.pass_context
def cli(ctx: click.Context, work_tree: Path, repo_dir: str, verbose: bool) -> None:
    """A small version-control system."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    ctx.obj = Repository(work_tree, repo_dir)


@cli.command()
@click.pass_obj
@handle_errors
def init(repo: Repository) -> None:
    """Create a repository with an initial commit."""
    repo.init()


@cli.command()
@click.argument('filename')
@click.pass_obj
@handle_errors
def add(repo: Repository, filename: str) -> None:
    """Stage a file for addition."""
    repo.add(filename)


@cli.command()
@click.argument('message')
@click.pass_obj
@handle_errors
def commit(repo: Repository, message: str) -> None:
    """Commit the staged changes."""
    repo.commit(message)


@cli.command()
@click.argument('filename')
@click.pass_obj
@handle_errors
def rm(repo: Repository, filename: str) -> None:
    """Unstage a file or stage it for removal."""
    repo.remove(filename)


@cli.command()
@click.pass_obj
@handle_errors
def log(repo: Repository) -> None:
    """Show the history of the current branch."""
    for entry in repo.log():
        click.echo(format_log_entry(entry))


@cli.command('global-log')
@click.pass_obj
@handle_errors
def global_log(repo: Repository) -> None:
    """Show every commit ever made."""
    for entry in repo.global_log():
        click.echo(format_log_entry(entry))


@cli.command()
@click.argument('message')
@click.pass_obj
@handle_errors
def find(repo: Repository, message: str) -> None:
    """Print the ids of commits with the given message."""
    for commit_id in repo.find(message):
        click.echo(commit_id)


@cli.command()
@click.pass_obj
@handle_errors
def status(repo: Repository) -> None:
    """Show branches, staged files and working-directory changes."""
    click.echo(format_status(repo.status()), nl=False)


@cli.command(cls=CheckoutCommand)
@click.argument('operands', nargs=-1, required=True)
@click.pass_context
@handle_errors
def checkout(ctx: click.Context, operands: tuple[str, ...]) -> None:
    """Check out a branch, or restore a file.

    \b
      gitlet checkout BRANCH
      gitlet checkout -- FILE
      gitlet checkout COMMIT -- FILE
    """
    repo: Repository = ctx.obj
    separator_index = ctx.meta.get('separator_index')

    match (separator_index, operands):
        case (None, (branch,)):
            repo.checkout_branch(branch)
        case (0, (filename,)):
            repo.checkout_file_from_head(filename)
        case (1, (commit_id, filename)):
            repo.checkout_file_from_commit(commit_id, filename)
        case _:
            click.echo('Incorrect operands.')
            ctx.exit(1)


@cli.command()
@click.argument('name')
@click.pass_obj
@handle_errors
def branch(repo: Repository, name: str) -> None:
    """Create a branch at the current commit."""
    repo.new_branch(name)


@cli.command('rm-branch')
@click.argument('name')
@click.pass_obj
@handle_errors
def rm_branch(repo: Repository, name: str) -> None:
    """Delete a branch."""
    repo.remove_branch(name)


@cli.command()
@click.argument('commit_id')
@click.pass_obj
@handle_errors
def reset(repo: Repository, commit_id: str) -> None:
    """Check out a commit and move the current branch to it."""
    repo.reset_to_commit(commit_id)


@cli.command()
@click.argument('branch_name')
@click.pass_obj
@handle_errors
def merge(repo: Repository, branch_name: str) -> None:
    """Merge a branch into the current branch."""
    result = repo.merge(branch_name)
    if result.has_conflicts:
        click.echo('Encountered a merge conflict.')


def main() -> None:
    cli(prog_name='gitlet')
