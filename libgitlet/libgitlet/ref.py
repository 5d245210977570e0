"""Branch references and the HEAD pointer."""

import logging
from pathlib import Path

from .exceptions import (BranchExistsError, BranchNotFoundError, CorruptRepositoryError, InvalidOperationError,
                         RepositoryNotFoundError)

logger = logging.getLogger(__name__)


def read_ref(ref_file: Path) -> str:
    """Read the single-line value stored in a ref file."""
    return ref_file.read_text(encoding='utf-8').strip()


def write_ref(ref_file: Path, value: str) -> None:
    ref_file.write_text(value, encoding='utf-8')


def is_valid_branch_name(name: str) -> bool:
    """Check that a branch name maps to a single file directly inside the branches directory."""
    return bool(name) and '/' not in name and '\\' not in name and name not in {'.', '..'}


def validate_branch_name(name: str) -> None:
    if not name:
        msg = 'Branch name is required'
        raise ValueError(msg)
    if not is_valid_branch_name(name):
        msg = f'Invalid branch name: {name}'
        raise ValueError(msg)


class RefStore:
    """Branch name -> commit id pointers, plus HEAD naming the current branch.

    :param head_file: The file holding the current branch name.
    :param branches_dir: The directory holding one file per branch."""

    def __init__(self, head_file: Path | str, branches_dir: Path | str) -> None:
        self.head_file = Path(head_file)
        self.branches_dir = Path(branches_dir)

    def create(self) -> None:
        self.branches_dir.mkdir(parents=True)

    def current_branch(self) -> str:
        """Return the name of the checked-out branch.

        :raises RepositoryNotFoundError: If HEAD has not been set."""
        if not self.head_file.is_file():
            msg = 'HEAD is not set'
            raise RepositoryNotFoundError(msg)

        name = read_ref(self.head_file)
        if not name:
            msg = 'HEAD is not set'
            raise RepositoryNotFoundError(msg)

        return name

    def set_head(self, name: str) -> None:
        validate_branch_name(name)
        write_ref(self.head_file, name)
        logger.debug('HEAD -> %s', name)

    def branch_exists(self, name: str) -> bool:
        # Names that would escape the branches directory never exist
        return is_valid_branch_name(name) and (self.branches_dir / name).is_file()

    def get_branch_head(self, name: str) -> str:
        """Return the commit id a branch points to.

        :raises BranchNotFoundError: If the branch does not exist.
        :raises CorruptRepositoryError: If the branch file is empty."""
        if not self.branch_exists(name):
            msg = 'No such branch exists.'
            raise BranchNotFoundError(msg)

        commit_id = read_ref(self.branches_dir / name)
        if not commit_id:
            msg = f'Branch "{name}" does not point to a commit'
            raise CorruptRepositoryError(msg)

        return commit_id

    def set_branch_head(self, name: str, commit_id: str) -> None:
        """Point a branch at a commit, creating the branch if needed."""
        validate_branch_name(name)
        write_ref(self.branches_dir / name, commit_id)
        logger.debug('Branch %s -> %s', name, commit_id)

    def create_branch(self, name: str, commit_id: str) -> None:
        """Create a new branch pointing at a commit.

        :raises ValueError: If the branch name is empty or invalid.
        :raises BranchExistsError: If the branch already exists."""
        validate_branch_name(name)
        if self.branch_exists(name):
            msg = 'A branch with that name already exists.'
            raise BranchExistsError(msg)

        self.set_branch_head(name, commit_id)

    def delete_branch(self, name: str) -> None:
        """Delete a branch pointer. The commits it pointed to are kept.

        :raises BranchNotFoundError: If the branch does not exist.
        :raises InvalidOperationError: If the branch is the current branch."""
        if not self.branch_exists(name):
            msg = 'A branch with that name does not exist.'
            raise BranchNotFoundError(msg)
        if name == self.current_branch():
            msg = 'Cannot remove the current branch.'
            raise InvalidOperationError(msg)

        (self.branches_dir / name).unlink()
        logger.debug('Deleted branch %s', name)

    def list_branches(self) -> set[str]:
        return {path.name for path in self.branches_dir.iterdir() if path.is_file()}
