"""Exceptions raised by libgitlet."""


class RepositoryError(Exception):
    """Exception raised for repository-related errors."""


class RepositoryNotFoundError(RepositoryError):
    """Exception raised when a repository is not found or HEAD is unset."""


class RepositoryExistsError(RepositoryError):
    """Exception raised when initializing over an existing repository."""


class NotFoundError(RepositoryError):
    """Base class for user-supplied names or ids that do not resolve."""


class BlobNotFoundError(NotFoundError):
    pass


class CommitNotFoundError(NotFoundError):
    pass


class BranchNotFoundError(NotFoundError):
    pass


class WorkingFileNotFoundError(NotFoundError):
    """Raised when a file is missing from the working directory."""


class FileNotInCommitError(NotFoundError):
    """Raised when a commit does not track the requested file."""


class BranchExistsError(RepositoryError):
    pass


class InvalidOperationError(RepositoryError):
    """Raised for self-merges, removing or checking out the current branch."""


class NothingToCommitError(RepositoryError):
    pass


class NothingToRemoveError(RepositoryError):
    pass


class EmptyMessageError(RepositoryError):
    pass


class UntrackedFileConflictError(RepositoryError):
    """Raised when an operation would overwrite an untracked working file."""


class UncommittedChangesError(RepositoryError):
    pass


class MergeNotNeededError(RepositoryError):
    """Raised when one branch head already contains the other."""


class GivenBranchIsAncestorError(MergeNotNeededError):
    pass


class CurrentBranchFastForwardError(MergeNotNeededError):
    pass


class CorruptRepositoryError(RepositoryError):
    """Raised when a ref or commit points at an object that is missing or unreadable.

    Kept apart from NotFoundError so a bad id typed by the user is never
    confused with an inconsistent repository."""
