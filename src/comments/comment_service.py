"""Request orchestration for the comments endpoints.

Validates raw path/query values, decides which GitHub fetches and which markdown view a request
needs, applies comment-number selection, and bounds the whole request with a deadline. All
validation happens before any network call.
"""

import re
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from src.comments.comment_markdown import (
    CommentFormattingOptions,
    render_flat_comments,
    render_issue,
    render_with_reviews,
)
from src.comments.errors import AuthError, OrdinalOutOfRangeError, RequestTimeoutError, ValidationError
from src.github.github_api_models import GitHubIssue
from src.github.github_client import GitHubClient
from src.utils.config import get_request_timeout_seconds
from src.utils.logging import LogContext, get_logger
from src.utils.timeout import OperationTimeoutError, with_timeout

logger = get_logger(__name__)

T = TypeVar("T")

GitHubClientFactory = Callable[[str], GitHubClient]

_INTEGER_RE = re.compile(r"^-?\d+$")

PULL_REQUEST_ROUTE = "/:owner/:repo/pull/:pullRequestId"
ISSUE_ROUTE = "/:owner/:repo/issues/:issueNumber"


def parse_flag(value: str | None) -> bool:
    """Query flags are on only for the literal `true`."""
    return value == "true"


def parse_resolved(value: str | None) -> bool | None:
    if value is None:
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValidationError(
        "Invalid resolved filter.", received=value, hint="resolved must be `true` or `false`."
    )


def parse_formatting_options(
    include_reviews: str | None, show_threading: str | None, resolved: str | None
) -> CommentFormattingOptions:
    return CommentFormattingOptions(
        include_reviews=parse_flag(include_reviews),
        show_threading=parse_flag(show_threading),
        resolved=parse_resolved(resolved),
    )


def parse_number(value: str, label: str) -> int:
    """Parse a pull request or issue number from a path segment."""
    if not _INTEGER_RE.match(value.strip()) or int(value) < 1:
        raise ValidationError(
            f"Invalid {label}.",
            received=value,
            hint=f"{label[0].upper()}{label[1:]} must be a positive number.",
        )
    return int(value)


def parse_ordinal(value: str | None) -> int | None:
    """Parse an optional comment number. Range is checked once the comments are fetched."""
    if value is None:
        return None
    if not _INTEGER_RE.match(value.strip()):
        raise ValidationError(
            "Invalid comment number.",
            received=value,
            hint="Comment number must be a number.",
        )
    return int(value)


def select_comment(comments: Sequence[T], ordinal: int, subject: str, number: int) -> list[T]:
    """Return the single comment at 1-based `ordinal` of the fetched comments."""
    if ordinal < 1 or ordinal > len(comments):
        raise OrdinalOutOfRangeError(ordinal, len(comments), subject, number)
    return [comments[ordinal - 1]]


def require_token(token: str | None) -> str:
    if not token:
        raise AuthError()
    return token


def _require_segments(expected_route: str, *segments: str | None) -> None:
    if not all(segment and segment.strip() for segment in segments):
        raise ValidationError("Missing required parameters.", hint=f"Expected: `{expected_route}`")


async def get_pull_comments(
    owner: str,
    repo: str,
    pull_request_id: str,
    comment_number: str | None,
    token: str | None,
    options: CommentFormattingOptions,
    client_factory: GitHubClientFactory = GitHubClient,
) -> str:
    """Render the review comments (and optionally reviews) of a pull request as markdown."""
    token = require_token(token)
    _require_segments(PULL_REQUEST_ROUTE, owner, repo, pull_request_id)
    pr_number = parse_number(pull_request_id, "pull request ID")
    ordinal = parse_ordinal(comment_number)

    with LogContext(owner=owner, repo=repo, pr_number=pr_number):
        if options.resolved is not None:
            # The review comments endpoint has no resolution status to filter on
            logger.info("resolved filter requested, it has no effect", resolved=options.resolved)

        timeout = get_request_timeout_seconds()
        return await _with_deadline(
            _fetch_and_render_pull(client_factory, token, owner, repo, pr_number, ordinal, options),
            timeout,
            f"pull request {owner}/{repo}#{pr_number}",
        )


async def get_issue_comments(
    owner: str,
    repo: str,
    issue_number: str,
    comment_number: str | None,
    token: str | None,
    client_factory: GitHubClientFactory = GitHubClient,
) -> str:
    """Render an issue's description and comments as markdown."""
    token = require_token(token)
    _require_segments(ISSUE_ROUTE, owner, repo, issue_number)
    number = parse_number(issue_number, "issue number")
    ordinal = parse_ordinal(comment_number)

    with LogContext(owner=owner, repo=repo, issue_number=number):
        timeout = get_request_timeout_seconds()
        return await _with_deadline(
            _fetch_and_render_issue(client_factory, token, owner, repo, number, ordinal),
            timeout,
            f"issue {owner}/{repo}#{number}",
        )


async def _with_deadline(coro: Awaitable[str], timeout: float, operation_name: str) -> str:
    try:
        return await with_timeout(coro, timeout, operation_name)
    except OperationTimeoutError as e:
        raise RequestTimeoutError(timeout) from e


async def _fetch_and_render_pull(
    client_factory: GitHubClientFactory,
    token: str,
    owner: str,
    repo: str,
    pr_number: int,
    ordinal: int | None,
    options: CommentFormattingOptions,
) -> str:
    async with client_factory(token) as client:
        if options.needs_reviews:
            reviews, comments = await client.get_pull_request_reviews_and_comments(
                owner, repo, pr_number
            )
            if ordinal is not None:
                comments = select_comment(comments, ordinal, "Pull Request", pr_number)
            logger.info(
                "Rendering pull request with reviews",
                reviews=len(reviews),
                comments=len(comments),
                include_reviews=options.include_reviews,
                show_threading=options.show_threading,
            )
            return render_with_reviews(owner, repo, pr_number, reviews, comments, options)

        comments = await client.get_pull_request_review_comments(owner, repo, pr_number)
        if ordinal is not None:
            comments = select_comment(comments, ordinal, "Pull Request", pr_number)
        logger.info("Rendering pull request comments", comments=len(comments))
        return render_flat_comments(owner, repo, pr_number, comments)


async def _fetch_and_render_issue(
    client_factory: GitHubClientFactory,
    token: str,
    owner: str,
    repo: str,
    issue_number: int,
    ordinal: int | None,
) -> str:
    async with client_factory(token) as client:
        comments = await client.get_issue_comments(owner, repo, issue_number)
        issue: GitHubIssue | None = None

        if ordinal is not None:
            comments = select_comment(comments, ordinal, "Issue", issue_number)
        else:
            # The description is only shown in the full view
            issue = await client.get_issue(owner, repo, issue_number)

        logger.info("Rendering issue comments", comments=len(comments), with_issue=issue is not None)
        return render_issue(owner, repo, issue_number, issue, comments)
