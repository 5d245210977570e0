"""The staging area (index) between commits."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from .constants import FORMAT_VERSION
from .exceptions import CorruptRepositoryError
from .objects import TrackedFiles


@dataclass
class StagingArea:
    """Pending additions and removals relative to the HEAD commit.

    A filename is never staged for addition and removal at the same time:
    staging it on one side always clears it from the other."""

    added: TrackedFiles = field(default_factory=dict)
    removed: set[str] = field(default_factory=set)

    def stage_for_addition(self, filename: str, blob_id: str) -> None:
        self.added[filename] = blob_id
        self.removed.discard(filename)

    def stage_for_removal(self, filename: str) -> None:
        self.removed.add(filename)
        self.added.pop(filename, None)

    def unstage_addition(self, filename: str) -> None:
        self.added.pop(filename, None)

    def unstage_removal(self, filename: str) -> None:
        self.removed.discard(filename)

    def is_staged_for_addition(self, filename: str) -> bool:
        return filename in self.added

    def is_staged_for_removal(self, filename: str) -> bool:
        return filename in self.removed

    def is_staged(self, filename: str) -> bool:
        return filename in self.added or filename in self.removed

    def is_empty(self) -> bool:
        return not self.added and not self.removed

    def clear(self) -> None:
        self.added.clear()
        self.removed.clear()

    def apply_to(self, tracked_files: TrackedFiles) -> TrackedFiles:
        """Return a copy of a snapshot with additions applied, then removals."""
        snapshot = dict(tracked_files)
        for filename, blob_id in self.added.items():
            snapshot[filename] = blob_id
        for filename in self.removed:
            snapshot.pop(filename, None)

        return snapshot


def encode_index(staging_area: StagingArea) -> bytes:
    document = {'type': 'index',
                'format': FORMAT_VERSION,
                'added': staging_area.added,
                'removed': sorted(staging_area.removed)}
    return json.dumps(document, sort_keys=True, indent=2, ensure_ascii=False).encode('utf-8')


def decode_index(data: bytes) -> StagingArea:
    try:
        document = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        msg = 'Unreadable index'
        raise CorruptRepositoryError(msg) from e

    if not isinstance(document, dict) or document.get('type') != 'index':
        msg = 'Expected an index document'
        raise CorruptRepositoryError(msg)
    if document.get('format') != FORMAT_VERSION:
        msg = f'Unsupported index format version: {document.get("format")!r}'
        raise CorruptRepositoryError(msg)

    added = document.get('added', {})
    removed = document.get('removed', [])
    if not isinstance(added, dict) or not isinstance(removed, list):
        msg = 'Malformed index document'
        raise CorruptRepositoryError(msg)

    return StagingArea(dict(added), set(removed))


def load_index(index_file: Path) -> StagingArea:
    """Load the staging area, treating a missing index file as empty."""
    if not index_file.exists():
        return StagingArea()

    return decode_index(index_file.read_bytes())


def save_index(index_file: Path, staging_area: StagingArea) -> None:
    index_file.write_bytes(encode_index(staging_area))
