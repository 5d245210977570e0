"""Immutable content objects stored by libgitlet."""

import hashlib
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TypeAlias

from .constants import INITIAL_COMMIT_MESSAGE, INITIAL_COMMIT_TIMESTAMP

# Filename -> blob id. Shared by Commit snapshots and the staging area.
TrackedFiles: TypeAlias = dict[str, str]


def hash_blob(filename: str, contents: bytes) -> str:
    """Return the content id of a file's name and bytes.

    The filename is length-prefixed so that no two (filename, contents) pairs
    share a hash input."""
    name = filename.encode('utf-8')
    digest = hashlib.sha1(b'blob %d\0' % len(name))
    digest.update(name)
    digest.update(contents)
    return digest.hexdigest()


def hash_commit(message: str, timestamp: int, parents: Iterable[str], tracked_files: Mapping[str, str]) -> str:
    """Return the content id of a commit's message, timestamp, parents and snapshot."""
    canonical = json.dumps({'message': message,
                            'timestamp': timestamp,
                            'parents': list(parents),
                            'tracked_files': dict(tracked_files)},
                           sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    return hashlib.sha1(b'commit\0' + canonical.encode('utf-8')).hexdigest()


@dataclass(frozen=True)
class Blob:
    """A file's name and contents, identified by a hash of both."""

    filename: str
    contents: bytes
    id: str = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'id', hash_blob(self.filename, self.contents))


@dataclass(frozen=True)
class Commit:
    """A full snapshot of tracked files plus message, timestamp and 0-2 parent ids."""

    message: str
    timestamp: int
    parents: tuple[str, ...]
    tracked_files: TrackedFiles
    id: str = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.parents) > 2:
            msg = f'A commit has at most two parents, got {len(self.parents)}'
            raise ValueError(msg)

        object.__setattr__(self, 'parents', tuple(self.parents))
        object.__setattr__(self, 'tracked_files', dict(self.tracked_files))
        object.__setattr__(self, 'id', hash_commit(self.message, self.timestamp, self.parents, self.tracked_files))

    @property
    def parent(self) -> str | None:
        """The first parent, or None for the root commit."""
        return self.parents[0] if self.parents else None

    @property
    def is_merge(self) -> bool:
        return len(self.parents) == 2

    @classmethod
    def initial(cls) -> 'Commit':
        """Build the root commit every repository starts from."""
        return cls(INITIAL_COMMIT_MESSAGE, INITIAL_COMMIT_TIMESTAMP, (), {})
