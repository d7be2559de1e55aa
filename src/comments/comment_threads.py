"""Reconstruct review comment reply threads.

GitHub returns review comments as a flat list where replies point at the comment they answer
through `in_reply_to_id`. This module rebuilds the reply forest and groups the thread roots by
the review they were submitted with.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from src.github.github_api_models import GitHubReviewComment


@dataclass(frozen=True)
class CommentThread:
    """A comment and its replies, replies ordered as they appeared in the input."""

    comment: GitHubReviewComment
    replies: list[CommentThread] = field(default_factory=list)

    def walk(self) -> Iterator[tuple[int, GitHubReviewComment]]:
        """Yield (depth, comment) for this thread, depth-first, parents before replies."""
        stack: list[tuple[int, CommentThread]] = [(0, self)]
        while stack:
            depth, thread = stack.pop()
            yield depth, thread.comment
            stack.extend((depth + 1, reply) for reply in reversed(thread.replies))


@dataclass(frozen=True)
class CommentForest:
    """Threads of a pull request's review comments.

    `roots` holds every thread in input order. The same threads are also partitioned into
    `standalone` (not attached to a review) and `by_review` (review id -> threads, review ids in
    order of first appearance).
    """

    roots: list[CommentThread]
    standalone: list[CommentThread]
    by_review: dict[int, list[CommentThread]]


def assemble_threads(comments: list[GitHubReviewComment]) -> CommentForest:
    """Build the reply forest for a flat list of review comments.

    A comment is a root when its `in_reply_to_id` is absent, points at itself, or points at a
    comment missing from `comments`. Replies follow their parent regardless of their own
    `pull_request_review_id`. Comments caught in a reply cycle are never reachable from a root,
    the first of them in input order is promoted to a root so every comment lands in exactly one
    thread.
    """
    # Arena of comments, linked by index
    index_by_id: dict[int, int] = {}
    for position, comment in enumerate(comments):
        index_by_id.setdefault(comment.id, position)

    parent_of: list[int | None] = []
    for position, comment in enumerate(comments):
        parent = index_by_id.get(comment.in_reply_to_id) if comment.in_reply_to_id else None
        parent_of.append(None if parent == position else parent)

    children: list[list[int]] = [[] for _ in comments]
    for position, parent in enumerate(parent_of):
        if parent is not None:
            children[parent].append(position)

    root_positions = [position for position, parent in enumerate(parent_of) if parent is None]

    reachable: set[int] = set()
    for root in root_positions:
        _mark_reachable(root, children, reachable)

    for position in range(len(comments)):
        if position in reachable:
            continue
        parent = parent_of[position]
        if parent is not None:
            children[parent].remove(position)
        parent_of[position] = None
        root_positions.append(position)
        _mark_reachable(position, children, reachable)

    root_positions.sort()

    roots = [_build_thread(position, comments, children) for position in root_positions]

    standalone: list[CommentThread] = []
    by_review: dict[int, list[CommentThread]] = {}
    for thread in roots:
        review_id = thread.comment.pull_request_review_id
        if review_id is None:
            standalone.append(thread)
        else:
            by_review.setdefault(review_id, []).append(thread)

    return CommentForest(roots=roots, standalone=standalone, by_review=by_review)


def _mark_reachable(root: int, children: list[list[int]], reachable: set[int]) -> None:
    stack = [root]
    while stack:
        position = stack.pop()
        if position in reachable:
            continue
        reachable.add(position)
        stack.extend(children[position])


def _build_thread(
    root: int, comments: list[GitHubReviewComment], children: list[list[int]]
) -> CommentThread:
    # Iterative so that very long reply chains cannot exhaust the stack
    threads: dict[int, CommentThread] = {}
    order: list[int] = []
    stack = [root]
    while stack:
        position = stack.pop()
        if position in threads:
            continue
        threads[position] = CommentThread(comment=comments[position])
        order.append(position)
        stack.extend(children[position])

    for position in order:
        threads[position].replies.extend(
            threads[child] for child in children[position] if child in threads
        )

    return threads[root]
