"""Three-way merge case analysis for libgitlet."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from .constants import CONFLICT_END_MARKER, CONFLICT_HEAD_MARKER, CONFLICT_SEPARATOR


class MergeActionType(Enum):
    KEEP = 'keep'
    REMOVE = 'remove'
    TAKE_OTHER = 'take-other'
    CONFLICT = 'conflict'


@dataclass(frozen=True)
class MergeAction:
    """What a merge does to one filename, with the blob id on each side (None if untracked)."""

    filename: str
    type: MergeActionType
    split_id: str | None
    current_id: str | None
    other_id: str | None


@dataclass
class MergeResult:
    """Represents the output of a merge: the merge commit and the conflicted filenames."""

    commit_id: str
    conflicts: list[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def classify(split_id: str | None, current_id: str | None, other_id: str | None) -> MergeActionType:
    """Decide what to do with one file given its blob id at the split point, current head and other head."""
    # Both sides agree, or only the current side changed since the split
    if current_id == other_id or split_id == other_id:
        return MergeActionType.KEEP

    # Only the other side changed since the split
    if split_id == current_id:
        return MergeActionType.REMOVE if other_id is None else MergeActionType.TAKE_OTHER

    return MergeActionType.CONFLICT


def plan_merge(split_files: Mapping[str, str],
               current_files: Mapping[str, str],
               other_files: Mapping[str, str]) -> list[MergeAction]:
    """Classify every filename tracked by any of the three snapshots.

    :return: One MergeAction per filename that needs work, sorted by filename."""
    actions: list[MergeAction] = []
    for filename in sorted(set(split_files) | set(current_files) | set(other_files)):
        split_id = split_files.get(filename)
        current_id = current_files.get(filename)
        other_id = other_files.get(filename)

        action_type = classify(split_id, current_id, other_id)
        if action_type is not MergeActionType.KEEP:
            actions.append(MergeAction(filename, action_type, split_id, current_id, other_id))

    return actions


def conflict_content(current: bytes | None, other: bytes | None) -> bytes:
    """Build the working-file content for a conflicted file.

    A side that does not track the file contributes nothing between its markers."""
    return b''.join([CONFLICT_HEAD_MARKER,
                     current or b'',
                     CONFLICT_SEPARATOR,
                     other or b'',
                     CONFLICT_END_MARKER])
