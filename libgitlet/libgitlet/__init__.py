"""libgitlet: a single-user version-control engine."""

from .objects import Blob, Commit, TrackedFiles, hash_blob, hash_commit

__all__ = ['Blob', 'Commit', 'TrackedFiles', 'hash_blob', 'hash_commit']
