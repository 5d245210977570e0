"""Ancestry traversal over the commit graph.

These functions never touch storage. They walk the graph through a
`get_parents(commit_id)` callable, so any mapping of ids to parent ids can
stand in for the object store."""

from collections import deque
from collections.abc import Callable, Generator, Sequence
from typing import TypeAlias

ParentsFn: TypeAlias = Callable[[str], Sequence[str]]


def ancestors_bfs(start: str, get_parents: ParentsFn) -> Generator[str, None, None]:
    """Yield `start` and all of its ancestors in breadth-first order.

    Parents are enqueued in their stored order (first parent before the
    merged-in parent). Each id is yielded once, at its first visit."""
    seen = {start}
    fringe = deque([start])

    while fringe:
        commit_id = fringe.popleft()
        yield commit_id

        for parent_id in get_parents(commit_id):
            if parent_id not in seen:
                seen.add(parent_id)
                fringe.append(parent_id)


def find_split_point(commit_a: str, commit_b: str, get_parents: ParentsFn) -> str | None:
    """Find the merge base of two commits.

    The result is the first commit in `commit_b`'s breadth-first order that
    lies anywhere in `commit_a`'s ancestor closure. In criss-cross histories
    this can be an ancestor of the deepest common ancestor; merges are
    defined relative to this rule.

    :return: The split point id, or None if the histories are disjoint."""
    closure_of_a = set(ancestors_bfs(commit_a, get_parents))

    for commit_id in ancestors_bfs(commit_b, get_parents):
        if commit_id in closure_of_a:
            return commit_id

    return None


def first_parent_history(start: str, get_parents: ParentsFn) -> Generator[str, None, None]:
    """Yield `start` and its first-parent ancestors, newest first."""
    current: str | None = start
    while current:
        yield current
        parents = get_parents(current)
        current = parents[0] if parents else None
