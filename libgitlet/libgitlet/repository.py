"""libgitlet repository management."""

import logging
import shutil
from collections.abc import Callable, Generator, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Concatenate, ParamSpec, TypeVar

from . import Blob, Commit, TrackedFiles
from .constants import (BRANCHES_DIR, DEFAULT_BRANCH, DEFAULT_REPO_DIR, HEAD_FILE, INDEX_FILE, OBJECTS_SUBDIR,
                        REFS_DIR)
from .exceptions import (BlobNotFoundError, BranchNotFoundError, CommitNotFoundError, CorruptRepositoryError,
                         CurrentBranchFastForwardError, EmptyMessageError, FileNotInCommitError,
                         GivenBranchIsAncestorError, InvalidOperationError, NothingToCommitError,
                         NothingToRemoveError, RepositoryExistsError, RepositoryNotFoundError,
                         UncommittedChangesError, UntrackedFileConflictError)
from .graph import find_split_point, first_parent_history
from .index import StagingArea, load_index, save_index
from .merge import MergeActionType, MergeResult, conflict_content, plan_merge
from .objects import hash_blob
from .plumbing import ObjectStore
from .ref import RefStore
from .workdir import WorkingDir

logger = logging.getLogger(__name__)

P = ParamSpec('P')
R = TypeVar('R')


@dataclass
class LogEntry:
    """A class representing a log entry for a branch or commit history."""

    commit_id: str
    commit: Commit


@dataclass
class Status:
    """A snapshot of branches, the staging area and the working directory."""

    current_branch: str
    branches: list[str]
    staged: list[str]
    removed: list[str]
    modified: list[tuple[str, str]]
    untracked: list[str]


class Repository:
    """Represents a libgitlet repository.

    This class provides methods to initialize a repository, stage and commit
    files, manage branches, check out snapshots and merge branches."""

    def __init__(self, working_dir: Path | str, repo_dir: Path | str | None = None) -> None:
        """Initialize a Repository instance. The repository is not created on disk until `init()` is called.

        :param working_dir: The working directory where the repository will be located.
        :param repo_dir: The name of the repository directory within the working directory. Defaults to '.gitlet'."""
        self.working_dir = Path(working_dir)

        if repo_dir is None:
            self.repo_dir = Path(DEFAULT_REPO_DIR)
        else:
            self.repo_dir = Path(repo_dir)

        self.objects = ObjectStore(self.objects_dir())
        self.refs = RefStore(self.head_file(), self.branches_dir())
        self.working = WorkingDir(self.working_dir, {self.repo_dir.name})

    def init(self, default_branch: str = DEFAULT_BRANCH) -> str:
        """Initialize a new repository with a single root commit.

        :param default_branch: The name of the first branch. Defaults to 'master'.
        :return: The id of the root commit.
        :raises RepositoryExistsError: If the repository already exists."""
        if self.exists():
            msg = 'A Gitlet version-control system already exists in the current directory.'
            raise RepositoryExistsError(msg)

        self.repo_path().mkdir(parents=True)
        self.objects.create()
        self.refs.create()

        initial_commit = Commit.initial()
        self.objects.put_commit(initial_commit)
        self.refs.set_branch_head(default_branch, initial_commit.id)
        self.refs.set_head(default_branch)
        save_index(self.index_file(), StagingArea())

        logger.info('Initialized repository at %s', self.repo_path())
        return initial_commit.id

    def exists(self) -> bool:
        """Check if the repository exists in the working directory.

        :return: True if the repository exists, False otherwise."""
        return self.repo_path().exists()

    def repo_path(self) -> Path:
        return self.working_dir / self.repo_dir

    def objects_dir(self) -> Path:
        return self.repo_path() / OBJECTS_SUBDIR

    def refs_dir(self) -> Path:
        return self.repo_path() / REFS_DIR

    def branches_dir(self) -> Path:
        return self.refs_dir() / BRANCHES_DIR

    def head_file(self) -> Path:
        return self.repo_path() / HEAD_FILE

    def index_file(self) -> Path:
        return self.repo_path() / INDEX_FILE

    @staticmethod
    def requires_repo(func: Callable[Concatenate['Repository', P], R]) -> \
            Callable[Concatenate['Repository', P], R]:
        """Decorate a Repository method to ensure that the repository exists before executing the method.

        :param func: The method to decorate.
        :return: A wrapper function that checks for the repository's existence."""

        @wraps(func)
        def _verify_repo(self: 'Repository', *args: P.args, **kwargs: P.kwargs) -> R:
            if not self.exists():
                msg = 'Not in an initialized Gitlet directory.'
                raise RepositoryNotFoundError(msg)

            return func(self, *args, **kwargs)

        return _verify_repo

    @requires_repo
    def delete_repo(self) -> None:
        """Delete the repository directory, leaving the working files alone."""
        shutil.rmtree(self.repo_path())

    @requires_repo
    def current_branch(self) -> str:
        return self.refs.current_branch()

    @requires_repo
    def head_commit_id(self) -> str:
        """Return the id of the commit the current branch points to.

        :raises CorruptRepositoryError: If HEAD names a branch that does not exist."""
        branch = self.refs.current_branch()
        try:
            return self.refs.get_branch_head(branch)
        except BranchNotFoundError as e:
            msg = f'HEAD points to missing branch "{branch}"'
            raise CorruptRepositoryError(msg) from e

    @requires_repo
    def head_commit(self) -> Commit:
        return self._load_referenced_commit(self.head_commit_id())

    @requires_repo
    def staging_area(self) -> StagingArea:
        return load_index(self.index_file())

    def _load_referenced_commit(self, commit_id: str) -> Commit:
        # The id came from a ref or a parent pointer, so a miss means corruption
        try:
            return self.objects.get_commit(commit_id)
        except CommitNotFoundError as e:
            msg = f'Missing commit {commit_id}'
            raise CorruptRepositoryError(msg) from e

    def _load_referenced_blob(self, blob_id: str) -> Blob:
        try:
            return self.objects.get_blob(blob_id)
        except BlobNotFoundError as e:
            msg = f'Missing blob {blob_id}'
            raise CorruptRepositoryError(msg) from e

    def _get_parents(self, commit_id: str) -> Sequence[str]:
        return self._load_referenced_commit(commit_id).parents

    def _committed_blobs(self) -> set[tuple[str, str]]:
        """Return every (filename, blob id) pair tracked by any stored commit."""
        return {pair
                for commit_id in self.objects.list_all_commit_ids()
                for pair in self.objects.get_commit(commit_id).tracked_files.items()}

    def _discard_staged_blob(self, filename: str, blob_id: str | None,
                             committed: set[tuple[str, str]] | None = None) -> None:
        if blob_id is None or not self.objects.has_blob(blob_id):
            return

        # Blob ids are shared with any commit that tracks the same name and bytes
        if committed is None:
            committed = self._committed_blobs()
        if (filename, blob_id) in committed:
            return

        self.objects.delete_blob(blob_id)

    def _stage_file(self, staging_area: StagingArea, filename: str, head_files: Mapping[str, str]) -> None:
        contents = self.working.read_file(filename)
        candidate_id = hash_blob(filename, contents)
        head_id = head_files.get(filename)
        staged_id = staging_area.added.get(filename)

        if head_id == candidate_id:
            if staged_id != candidate_id:
                staging_area.unstage_addition(filename)
                staging_area.unstage_removal(filename)
                self._discard_staged_blob(filename, staged_id)
            return

        if staged_id is not None and staged_id != candidate_id:
            self._discard_staged_blob(filename, staged_id)

        self.objects.put_blob(Blob(filename, contents))
        staging_area.stage_for_addition(filename, candidate_id)

    def _unstage_file(self, staging_area: StagingArea, filename: str, head_files: Mapping[str, str]) -> None:
        staged_id = staging_area.added.get(filename)
        head_id = head_files.get(filename)

        if staged_id is None and head_id is None:
            msg = 'No reason to remove the file.'
            raise NothingToRemoveError(msg)

        if staged_id is not None:
            staging_area.unstage_addition(filename)
            self._discard_staged_blob(filename, staged_id)
            return

        staging_area.stage_for_removal(filename)
        if self.working.exists(filename):
            if hash_blob(filename, self.working.read_file(filename)) == head_id:
                self.working.delete_file(filename)

    def _create_commit(self, message: str, parents: tuple[str, ...], staging_area: StagingArea,
                       allow_empty: bool = False) -> str:
        if not message:
            msg = 'Please enter a commit message.'
            raise EmptyMessageError(msg)
        if staging_area.is_empty() and not allow_empty:
            msg = 'No changes added to the commit.'
            raise NothingToCommitError(msg)

        parent_commit = self._load_referenced_commit(parents[0])
        tracked_files = staging_area.apply_to(parent_commit.tracked_files)

        commit = Commit(message, int(datetime.now().timestamp()), parents, tracked_files)
        self.objects.put_commit(commit)

        branch = self.refs.current_branch()
        self.refs.set_branch_head(branch, commit.id)

        staging_area.clear()
        save_index(self.index_file(), staging_area)

        logger.info('Committed %s on %s: %s', commit.id, branch, message)
        return commit.id

    def _check_untracked(self, head: Commit, destination: Commit, staging_area: StagingArea) -> None:
        head_files = head.tracked_files
        destination_files = destination.tracked_files

        for filename in self.working.list_files():
            if filename in head_files or staging_area.is_staged(filename):
                continue
            if destination_files.get(filename) != head_files.get(filename):
                msg = 'There is an untracked file in the way; delete it, or add and commit it first.'
                raise UntrackedFileConflictError(msg)

    def _restore_snapshot(self, head: Commit, destination: Commit) -> None:
        for filename, blob_id in sorted(destination.tracked_files.items()):
            self.working.write_file(filename, self._load_referenced_blob(blob_id).contents)

        for filename in sorted(set(head.tracked_files) - set(destination.tracked_files)):
            self.working.delete_file(filename)

    def _clear_staging_area(self, staging_area: StagingArea) -> None:
        committed = self._committed_blobs() if staging_area.added else set()
        for filename, blob_id in sorted(staging_area.added.items()):
            self._discard_staged_blob(filename, blob_id, committed)

        staging_area.clear()
        save_index(self.index_file(), staging_area)

    @requires_repo
    def add(self, filename: str) -> None:
        """Stage a working file for addition.

        The staging area keeps only the difference against HEAD: adding a file
        whose content HEAD already tracks unstages it instead.

        :param filename: The name of the working file.
        :raises WorkingFileNotFoundError: If the file does not exist."""
        staging_area = self.staging_area()
        self._stage_file(staging_area, filename, self.head_commit().tracked_files)
        save_index(self.index_file(), staging_area)

    @requires_repo
    def commit(self, message: str) -> str:
        """Commit the staging area on top of HEAD and advance the current branch.

        :param message: The commit message.
        :return: The id of the new commit.
        :raises EmptyMessageError: If the message is empty.
        :raises NothingToCommitError: If nothing is staged."""
        return self._create_commit(message, (self.head_commit_id(),), self.staging_area())

    @requires_repo
    def remove(self, filename: str) -> None:
        """Unstage a file, or stage a tracked file for removal and delete its unmodified working copy.

        :param filename: The name of the file.
        :raises NothingToRemoveError: If the file is neither staged nor tracked by HEAD."""
        staging_area = self.staging_area()
        self._unstage_file(staging_area, filename, self.head_commit().tracked_files)
        save_index(self.index_file(), staging_area)

    @requires_repo
    def log(self, tip: str | None = None) -> Generator[LogEntry, None, None]:
        """Generate the first-parent history starting at a commit, newest first.

        :param tip: A full or abbreviated commit id to start from. Defaults to HEAD.
        :return: A generator of LogEntry objects.
        :raises CommitNotFoundError: If the tip does not name a commit.
        :raises CorruptRepositoryError: If a commit in the history is missing."""
        start = self.objects.resolve_commit_id(tip) if tip else self.head_commit_id()
        for commit_id in first_parent_history(start, self._get_parents):
            yield LogEntry(commit_id, self._load_referenced_commit(commit_id))

    @requires_repo
    def global_log(self) -> Generator[LogEntry, None, None]:
        """Generate every commit ever made, newest first."""
        commits = [self.objects.get_commit(commit_id) for commit_id in self.objects.list_all_commit_ids()]
        for commit in sorted(commits, key=lambda c: (c.timestamp, c.id), reverse=True):
            yield LogEntry(commit.id, commit)

    @requires_repo
    def find(self, message: str) -> list[str]:
        """Return the sorted ids of all commits with exactly the given message.

        :raises CommitNotFoundError: If no commit has that message."""
        commit_ids = sorted(entry.commit_id for entry in self.global_log() if entry.commit.message == message)
        if not commit_ids:
            msg = 'Found no commit with that message.'
            raise CommitNotFoundError(msg)

        return commit_ids

    @requires_repo
    def status(self) -> Status:
        """Describe branches, staged changes and working-directory differences against HEAD."""
        staging_area = self.staging_area()
        head_files = self.head_commit().tracked_files
        working_files = set(self.working.list_files())

        modified: list[tuple[str, str]] = []
        for filename in sorted(set(head_files) | set(staging_area.added)):
            if staging_area.is_staged_for_removal(filename):
                continue

            expected_id = staging_area.added.get(filename, head_files.get(filename))
            if filename not in working_files:
                modified.append((filename, 'deleted'))
            elif hash_blob(filename, self.working.read_file(filename)) != expected_id:
                modified.append((filename, 'modified'))

        untracked = [filename for filename in sorted(working_files)
                     if not staging_area.is_staged_for_addition(filename)
                     and (filename not in head_files or staging_area.is_staged_for_removal(filename))]

        return Status(current_branch=self.refs.current_branch(),
                      branches=sorted(self.refs.list_branches()),
                      staged=sorted(staging_area.added),
                      removed=sorted(staging_area.removed),
                      modified=modified,
                      untracked=untracked)

    @requires_repo
    def checkout_file_from_head(self, filename: str) -> None:
        """Overwrite a working file with the version tracked by HEAD.

        :raises FileNotInCommitError: If HEAD does not track the file."""
        self._checkout_file(self.head_commit(), filename)

    @requires_repo
    def checkout_file_from_commit(self, commit_id: str, filename: str) -> None:
        """Overwrite a working file with the version tracked by a commit.

        :param commit_id: A full or abbreviated commit id.
        :raises CommitNotFoundError: If no commit matches the id.
        :raises FileNotInCommitError: If the commit does not track the file."""
        commit = self.objects.get_commit(self.objects.resolve_commit_id(commit_id))
        self._checkout_file(commit, filename)

    def _checkout_file(self, commit: Commit, filename: str) -> None:
        blob_id = commit.tracked_files.get(filename)
        if blob_id is None:
            msg = 'File does not exist in that commit.'
            raise FileNotInCommitError(msg)

        self.working.write_file(filename, self._load_referenced_blob(blob_id).contents)

    @requires_repo
    def checkout_branch(self, name: str) -> None:
        """Switch to another branch, replacing the working files with its head snapshot.

        :raises BranchNotFoundError: If the branch does not exist.
        :raises InvalidOperationError: If the branch is already checked out.
        :raises UntrackedFileConflictError: If an untracked file would be overwritten."""
        if not self.refs.branch_exists(name):
            msg = 'No such branch exists.'
            raise BranchNotFoundError(msg)
        if name == self.refs.current_branch():
            msg = 'No need to checkout the current branch.'
            raise InvalidOperationError(msg)

        head = self.head_commit()
        destination = self._load_referenced_commit(self.refs.get_branch_head(name))
        staging_area = self.staging_area()
        self._check_untracked(head, destination, staging_area)

        self._restore_snapshot(head, destination)
        self._clear_staging_area(staging_area)
        self.refs.set_head(name)

        logger.info('Checked out branch %s at %s', name, destination.id)

    @requires_repo
    def new_branch(self, name: str) -> None:
        """Create a branch pointing at the HEAD commit. HEAD is not moved.

        :raises BranchExistsError: If the branch already exists."""
        self.refs.create_branch(name, self.head_commit_id())
        logger.info('Created branch %s', name)

    @requires_repo
    def remove_branch(self, name: str) -> None:
        """Delete a branch pointer.

        :raises BranchNotFoundError: If the branch does not exist.
        :raises InvalidOperationError: If the branch is the current branch."""
        self.refs.delete_branch(name)
        logger.info('Removed branch %s', name)

    @requires_repo
    def reset_to_commit(self, commit_id: str) -> str:
        """Check out an arbitrary commit and move the current branch to it.

        :param commit_id: A full or abbreviated commit id.
        :return: The full id of the commit.
        :raises CommitNotFoundError: If no commit matches the id.
        :raises UntrackedFileConflictError: If an untracked file would be overwritten."""
        destination = self.objects.get_commit(self.objects.resolve_commit_id(commit_id))
        head = self.head_commit()
        staging_area = self.staging_area()
        self._check_untracked(head, destination, staging_area)

        self._restore_snapshot(head, destination)
        self._clear_staging_area(staging_area)

        branch = self.refs.current_branch()
        self.refs.set_branch_head(branch, destination.id)

        logger.info('Reset %s to %s', branch, destination.id)
        return destination.id

    @requires_repo
    def split_point(self, commit_id1: str, commit_id2: str) -> str | None:
        """Find the merge base used when merging `commit_id2` into `commit_id1`."""
        return find_split_point(commit_id1, commit_id2, self._get_parents)

    @requires_repo
    def merge(self, branch_name: str) -> MergeResult:
        """Merge another branch into the current branch and commit the result.

        Conflicting files are written with conflict markers, staged and
        committed; they are listed in the returned result.

        :param branch_name: The branch to merge in.
        :return: The merge commit id and the conflicted filenames.
        :raises BranchNotFoundError: If the branch does not exist.
        :raises InvalidOperationError: If the branch is the current branch.
        :raises UncommittedChangesError: If the staging area is not empty.
        :raises UntrackedFileConflictError: If an untracked file would be overwritten.
        :raises GivenBranchIsAncestorError: If the branch is already contained in HEAD.
        :raises CurrentBranchFastForwardError: If HEAD is an ancestor of the branch."""
        if not self.refs.branch_exists(branch_name):
            msg = 'A branch with that name does not exist.'
            raise BranchNotFoundError(msg)

        current_branch = self.refs.current_branch()
        if branch_name == current_branch:
            msg = 'Cannot merge a branch with itself.'
            raise InvalidOperationError(msg)

        staging_area = self.staging_area()
        if not staging_area.is_empty():
            msg = 'You have uncommitted changes.'
            raise UncommittedChangesError(msg)

        current = self.head_commit()
        other = self._load_referenced_commit(self.refs.get_branch_head(branch_name))
        self._check_untracked(current, other, staging_area)

        split_id = find_split_point(current.id, other.id, self._get_parents)
        if split_id is None:
            msg = f'No common ancestor between {current.id} and {other.id}'
            raise CorruptRepositoryError(msg)
        if split_id == other.id:
            msg = 'Given branch is an ancestor of the current branch.'
            raise GivenBranchIsAncestorError(msg)
        if split_id == current.id:
            msg = 'Current branch fast-forwarded.'
            raise CurrentBranchFastForwardError(msg)

        split = self._load_referenced_commit(split_id)
        conflicts = self._apply_merge(split.tracked_files, current.tracked_files, other.tracked_files, staging_area)

        message = f'Merged {branch_name} into {current_branch}.'
        commit_id = self._create_commit(message, (current.id, other.id), staging_area, allow_empty=True)

        if conflicts:
            logger.warning('Merge of %s into %s left conflicts in %s',
                           branch_name, current_branch, ', '.join(conflicts))
        return MergeResult(commit_id, conflicts)

    def _apply_merge(self, split_files: TrackedFiles, current_files: TrackedFiles, other_files: TrackedFiles,
                     staging_area: StagingArea) -> list[str]:
        conflicts: list[str] = []

        for action in plan_merge(split_files, current_files, other_files):
            match action.type:
                case MergeActionType.REMOVE:
                    self._unstage_file(staging_area, action.filename, current_files)
                case MergeActionType.TAKE_OTHER:
                    blob = self._load_referenced_blob(action.other_id)
                    self.working.write_file(action.filename, blob.contents)
                    self._stage_file(staging_area, action.filename, current_files)
                case MergeActionType.CONFLICT:
                    current = self._load_referenced_blob(action.current_id).contents if action.current_id else None
                    other = self._load_referenced_blob(action.other_id).contents if action.other_id else None
                    self.working.write_file(action.filename, conflict_content(current, other))
                    self._stage_file(staging_area, action.filename, current_files)
                    conflicts.append(action.filename)

        return conflicts

