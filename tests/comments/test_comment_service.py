"""Tests for request validation, fetch selection and comment-number selection."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from src.comments.comment_markdown import CommentFormattingOptions
from src.comments.comment_service import (
    get_issue_comments,
    get_pull_comments,
    parse_formatting_options,
    parse_ordinal,
)
from src.comments.errors import (
    AuthError,
    OrdinalOutOfRangeError,
    RequestTimeoutError,
    ValidationError,
)
from src.github.github_api_errors import UpstreamError
from src.github.github_client import GitHubClient
from tests.github_api_fakes import (
    API_URL,
    FakeGitHubTransport,
    issue_comment_payload,
    issue_comments_path,
    issue_path,
    issue_payload,
    pull_comments_path,
    pull_reviews_path,
    review_comment_payload,
    review_payload,
)


@pytest.fixture(autouse=True)
def char_token_counter(monkeypatch: pytest.MonkeyPatch):
    """Count characters instead of loading a tokenizer."""
    monkeypatch.setattr(
        "src.comments.comment_markdown.count_tokens_safely",
        lambda text, model=None: len(text or ""),
    )


@pytest.fixture
def transport() -> FakeGitHubTransport:
    return FakeGitHubTransport(
        {
            pull_comments_path(): [
                [
                    review_comment_payload(1, body="first comment"),
                    review_comment_payload(2, body="second comment", review_id=5),
                    review_comment_payload(3, body="third comment", in_reply_to_id=1),
                ]
            ],
            pull_reviews_path(): [[review_payload(5, state="CHANGES_REQUESTED")]],
            issue_path(): issue_payload(),
            issue_comments_path(): [
                [issue_comment_payload(11, body="issue one"), issue_comment_payload(12, body="issue two")]
            ],
        }
    )


@pytest.fixture
def client_factory(transport: FakeGitHubTransport):
    def factory(token: str) -> GitHubClient:
        return GitHubClient(token, api_url=API_URL, transport=transport)

    return factory


async def _pull(client_factory, pull_request_id="142", comment_number=None, token="t", **flags):
    return await get_pull_comments(
        "octocat",
        "Hello-World",
        pull_request_id,
        comment_number,
        token,
        CommentFormattingOptions(**flags),
        client_factory=client_factory,
    )


class TestValidation:
    """Test that bad requests are rejected before GitHub is contacted."""

    @pytest.mark.asyncio
    async def test_missing_token_wins_over_invalid_parameters(self, client_factory, transport):
        with pytest.raises(AuthError):
            await get_pull_comments(
                "", "", "not-a-number", "x", None, CommentFormattingOptions(), client_factory
            )
        with pytest.raises(AuthError):
            await get_issue_comments("octocat", "Hello-World", "7", None, "", client_factory)

        assert transport.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pull_request_id", ["abc", "12abc", "-3", "0", "1.5"])
    async def test_invalid_pull_request_id(self, client_factory, transport, pull_request_id):
        with pytest.raises(ValidationError) as exc_info:
            await _pull(client_factory, pull_request_id=pull_request_id)

        assert exc_info.value.status_code == 400
        assert f"**Received:** {pull_request_id}" in exc_info.value.to_markdown()
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_missing_owner(self, client_factory, transport):
        with pytest.raises(ValidationError, match="Missing required parameters"):
            await get_pull_comments(
                " ", "Hello-World", "142", None, "t", CommentFormattingOptions(), client_factory
            )

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_non_numeric_comment_number(self, client_factory, transport):
        with pytest.raises(ValidationError, match="Invalid comment number"):
            await get_issue_comments("octocat", "Hello-World", "7", "first", "t", client_factory)

        assert transport.requests == []

    def test_parse_ordinal(self):
        assert parse_ordinal(None) is None
        assert parse_ordinal("3") == 3
        assert parse_ordinal("-1") == -1

    def test_formatting_flags_are_true_only_for_literal_true(self):
        options = parse_formatting_options("true", "yes", None)

        assert options == CommentFormattingOptions(include_reviews=True, show_threading=False)

    def test_resolved_accepts_true_and_false_only(self):
        assert parse_formatting_options(None, None, "true").resolved is True
        assert parse_formatting_options(None, None, "false").resolved is False
        with pytest.raises(ValidationError):
            parse_formatting_options(None, None, "maybe")


class TestPullComments:
    """Test fetch selection and comment-number selection for pull requests."""

    @pytest.mark.asyncio
    async def test_flags_off_fetches_comments_only(self, client_factory, transport):
        markdown = await _pull(client_factory)

        assert transport.paths == [pull_comments_path()]
        assert "**Total Comments:** 3" in markdown
        assert "**Total Tokens:** 40" in markdown

    @pytest.mark.asyncio
    async def test_reviews_fetched_when_requested(self, client_factory, transport):
        markdown = await _pull(client_factory, include_reviews=True, show_threading=True)

        assert sorted(transport.paths) == sorted([pull_comments_path(), pull_reviews_path()])
        assert "## Review 1 - CHANGES_REQUESTED" in markdown
        assert "## Standalone Comments" in markdown

    @pytest.mark.asyncio
    async def test_comment_number_selects_one_comment(self, client_factory):
        markdown = await _pull(client_factory, comment_number="2")

        assert "second comment" in markdown
        assert "first comment" not in markdown
        assert "third comment" not in markdown
        assert "**Total Comments:** 1" in markdown

    @pytest.mark.asyncio
    @pytest.mark.parametrize("comment_number", ["0", "4", "-1"])
    async def test_comment_number_out_of_range(self, client_factory, comment_number):
        with pytest.raises(OrdinalOutOfRangeError) as exc_info:
            await _pull(client_factory, comment_number=comment_number)

        markdown = exc_info.value.to_markdown()
        assert exc_info.value.status_code == 404
        assert "between 1 and 3" in markdown
        assert "**Pull Request:** #142" in markdown

    @pytest.mark.asyncio
    async def test_resolved_has_no_effect(self, client_factory):
        unfiltered = await _pull(client_factory)
        resolved = await _pull(client_factory, resolved=True)
        unresolved = await _pull(client_factory, resolved=False)

        assert unfiltered == resolved == unresolved

    @pytest.mark.asyncio
    async def test_upstream_not_found_is_not_an_ordinal_error(self, client_factory):
        with pytest.raises(UpstreamError) as exc_info:
            await _pull(client_factory, pull_request_id="999", comment_number="1")

        assert not isinstance(exc_info.value, OrdinalOutOfRangeError)
        assert exc_info.value.status_code == 404


class TestIssueComments:
    """Test the issue flow."""

    @pytest.mark.asyncio
    async def test_full_view_fetches_issue(self, client_factory, transport):
        markdown = await get_issue_comments("octocat", "Hello-World", "7", None, "t", client_factory)

        assert sorted(transport.paths) == sorted([issue_path(), issue_comments_path()])
        assert "## Issue Description" in markdown
        assert "issue one" in markdown
        assert "issue two" in markdown

    @pytest.mark.asyncio
    async def test_comment_number_skips_issue_fetch(self, client_factory, transport):
        markdown = await get_issue_comments("octocat", "Hello-World", "7", "2", "t", client_factory)

        assert transport.paths == [issue_comments_path()]
        assert "issue two" in markdown
        assert "issue one" not in markdown
        assert "## Issue Description" not in markdown

    @pytest.mark.asyncio
    async def test_comment_number_out_of_range(self, client_factory):
        with pytest.raises(OrdinalOutOfRangeError) as exc_info:
            await get_issue_comments("octocat", "Hello-World", "7", "3", "t", client_factory)

        assert "**Issue:** #7" in exc_info.value.to_markdown()
        assert "between 1 and 2" in exc_info.value.to_markdown()


class _SlowTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=[])


class TestDeadline:
    @pytest.mark.asyncio
    async def test_slow_upstream_times_out(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "0.05")

        def factory(token: str) -> GitHubClient:
            return GitHubClient(token, api_url=API_URL, transport=_SlowTransport())

        with pytest.raises(RequestTimeoutError) as exc_info:
            await get_issue_comments("octocat", "Hello-World", "7", None, "t", factory)

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_malformed_deadline_fails_before_a_client_is_created(
        self, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "soon")
        created: list[str] = []

        def factory(token: str) -> GitHubClient:
            created.append(token)
            return GitHubClient(token, api_url=API_URL, transport=FakeGitHubTransport())

        with pytest.raises(ValueError):
            await _pull(factory)
        with pytest.raises(ValueError):
            await get_issue_comments("octocat", "Hello-World", "7", None, "t", factory)

        assert created == []
