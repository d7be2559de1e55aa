"""Tests for review comment reply thread reconstruction."""

from __future__ import annotations

from itertools import permutations

from src.comments.comment_threads import CommentThread, assemble_threads
from src.github.github_api_models import GitHubReviewComment
from tests.github_api_fakes import review_comment_payload


def _comment(comment_id: int, **kwargs) -> GitHubReviewComment:
    return GitHubReviewComment.model_validate(review_comment_payload(comment_id, **kwargs))


def _shape(thread: CommentThread) -> tuple:
    """(id, [reply shapes...]) for easy comparison."""
    return (thread.comment.id, [_shape(reply) for reply in thread.replies])


class TestAssembleThreads:
    """Test forest construction and review grouping."""

    def test_reply_grouped_with_root_for_every_input_order(self):
        a = _comment(1)
        b = _comment(2, in_reply_to_id=1, review_id=9)
        c = _comment(3, review_id=5)

        for ordering in permutations([a, b, c]):
            forest = assemble_threads(list(ordering))

            assert [_shape(t) for t in forest.standalone] == [(1, [(2, [])])]
            assert [_shape(t) for t in forest.by_review[5]] == [(3, [])]
            # Replies follow their parent, not their own review id
            assert 9 not in forest.by_review

    def test_empty_input(self):
        forest = assemble_threads([])

        assert forest.roots == []
        assert forest.standalone == []
        assert forest.by_review == {}

    def test_unresolved_parent_makes_a_root(self):
        forest = assemble_threads([_comment(1, in_reply_to_id=999)])

        assert [_shape(t) for t in forest.roots] == [(1, [])]

    def test_self_reply_makes_a_root(self):
        forest = assemble_threads([_comment(1, in_reply_to_id=1)])

        assert [_shape(t) for t in forest.roots] == [(1, [])]

    def test_reply_cycle_is_broken(self):
        comments = [
            _comment(1, in_reply_to_id=2),
            _comment(2, in_reply_to_id=1),
            _comment(3),
        ]

        forest = assemble_threads(comments)

        assert [_shape(t) for t in forest.roots] == [(1, [(2, [])]), (3, [])]
        seen = [comment.id for thread in forest.roots for _, comment in thread.walk()]
        assert sorted(seen) == [1, 2, 3]

    def test_replies_keep_input_order_at_every_depth(self):
        comments = [
            _comment(1, review_id=5),
            _comment(2, in_reply_to_id=1),
            _comment(3, in_reply_to_id=2),
            _comment(4, in_reply_to_id=1),
            _comment(5, review_id=5),
        ]

        forest = assemble_threads(comments)

        assert [_shape(t) for t in forest.by_review[5]] == [
            (1, [(2, [(3, [])]), (4, [])]),
            (5, []),
        ]

    def test_review_groups_keep_first_appearance_order(self):
        comments = [_comment(1, review_id=8), _comment(2, review_id=3), _comment(3, review_id=8)]

        forest = assemble_threads(comments)

        assert list(forest.by_review) == [8, 3]
        assert [t.comment.id for t in forest.by_review[8]] == [1, 3]

    def test_long_reply_chain(self):
        comments = [_comment(1)] + [_comment(i, in_reply_to_id=i - 1) for i in range(2, 3001)]

        forest = assemble_threads(comments)

        depths = [depth for depth, _ in forest.roots[0].walk()]
        assert len(forest.roots) == 1
        assert depths == list(range(3000))


class TestCommentThreadWalk:
    def test_walk_is_depth_first_parents_before_replies(self):
        thread = CommentThread(
            comment=_comment(1),
            replies=[
                CommentThread(comment=_comment(2), replies=[CommentThread(comment=_comment(3))]),
                CommentThread(comment=_comment(4)),
            ],
        )

        assert [(depth, comment.id) for depth, comment in thread.walk()] == [
            (0, 1),
            (1, 2),
            (2, 3),
            (1, 4),
        ]
