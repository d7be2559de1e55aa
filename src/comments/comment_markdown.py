"""
Render pull request and issue comments into Markdown for LLM agents.

Every renderer is a pure function of its arguments: the same inputs (and a deterministic token
counter) always produce byte-identical output. Token totals are informational, a failing token
counter counts as zero and never aborts a render.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from src.comments.comment_threads import CommentForest, CommentThread, assemble_threads
from src.github.github_api_models import (
    GitHubIssue,
    GitHubIssueComment,
    GitHubReview,
    GitHubReviewComment,
)
from src.utils.token_counting import TokenCounter, count_tokens_safely, make_safe_counter

SEPARATOR = "---\n\n"
NO_PULL_REQUEST_COMMENTS = "*No comments found for this pull request.*\n"
NO_ISSUE_COMMENTS = "*No comments found for this issue.*\n"
DEFAULT_SIDE = "RIGHT"


@dataclass(frozen=True)
class CommentFormattingOptions:
    """Formatting flags for the pull request views.

    `resolved` is parsed and carried for API compatibility only. The review comments endpoint
    does not expose whether a thread is resolved, so it does not filter anything.
    """

    include_reviews: bool = False
    show_threading: bool = False
    resolved: bool | None = None

    @property
    def needs_reviews(self) -> bool:
        return self.include_reviews or self.show_threading


def render_flat_comments(
    owner: str,
    repo: str,
    pr_number: int,
    comments: list[GitHubReviewComment],
    token_counter: TokenCounter | None = None,
) -> str:
    """Render review comments as a flat list labelled Comment 1..N in input order."""
    count = _resolve_counter(token_counter)
    total_tokens = sum(count(comment.body) for comment in comments)

    parts = [
        _header(
            f"Pull Request #{pr_number} Comments",
            [
                ("Repository", f"{owner}/{repo}"),
                ("Total Comments", str(len(comments))),
                ("Total Tokens", _format_count(total_tokens)),
            ],
        )
    ]

    if not comments:
        parts.append(NO_PULL_REQUEST_COMMENTS)
        return "".join(parts)

    parts.append(_format_flat_review_comments(comments))
    return "".join(parts)


def render_issue(
    owner: str,
    repo: str,
    issue_number: int,
    issue: GitHubIssue | None,
    comments: list[GitHubIssueComment],
    token_counter: TokenCounter | None = None,
) -> str:
    """Render an issue's description (when fetched) followed by its comments."""
    count = _resolve_counter(token_counter)
    total_tokens = sum(count(comment.body) for comment in comments)
    if issue is not None and issue.body:
        total_tokens += count(issue.body)

    parts = [
        _header(
            f"Issue #{issue_number} Comments",
            [
                ("Repository", f"{owner}/{repo}"),
                ("Total Comments", str(len(comments))),
                ("Total Tokens", _format_count(total_tokens)),
            ],
        )
    ]

    if issue is not None:
        parts.append(_format_issue_description(issue))
        parts.append(SEPARATOR)

    if not comments and issue is None:
        parts.append(NO_ISSUE_COMMENTS)
        return "".join(parts)

    for index, comment in enumerate(comments):
        parts.append(_format_issue_comment(index + 1, comment))
        if index < len(comments) - 1:
            parts.append(SEPARATOR)

    return "".join(parts)


def render_with_reviews(
    owner: str,
    repo: str,
    pr_number: int,
    reviews: list[GitHubReview],
    comments: list[GitHubReviewComment],
    options: CommentFormattingOptions,
    token_counter: TokenCounter | None = None,
) -> str:
    """Render a pull request's reviews and review comments.

    | include_reviews | show_threading | output                                              |
    |-----------------|----------------|-----------------------------------------------------|
    | False           | False          | flat comment list                                   |
    | True            | False          | every review, then the flat comment list            |
    | False           | True           | reply threads in root order                         |
    | True            | True           | threads grouped under their review, then standalone |
    """
    count = _resolve_counter(token_counter)
    total_tokens = sum(count(review.body) for review in reviews if review.body)
    total_tokens += sum(count(comment.body) for comment in comments)

    parts = [
        _header(
            f"Pull Request #{pr_number} Comments",
            [
                ("Repository", f"{owner}/{repo}"),
                ("Total Reviews", str(len(reviews))),
                ("Total Comments", str(len(comments))),
                ("Total Tokens", _format_count(total_tokens)),
            ],
        )
    ]

    show_reviews = options.include_reviews and bool(reviews)

    if not comments and not show_reviews:
        parts.append(NO_PULL_REQUEST_COMMENTS)
        return "".join(parts)

    if options.show_threading:
        forest = assemble_threads(comments)
        if show_reviews:
            parts.append(_format_grouped_threads(reviews, forest))
        else:
            for index, thread in enumerate(forest.roots):
                parts.append(_format_thread(thread))
                if index < len(forest.roots) - 1:
                    parts.append(SEPARATOR)
        return "".join(parts)

    if show_reviews:
        for index, review in enumerate(reviews):
            parts.append(_format_review(index + 1, review, body_heading="Comment"))
            if index < len(reviews) - 1 or comments:
                parts.append(SEPARATOR)

    parts.append(_format_flat_review_comments(comments))
    return "".join(parts)


def _resolve_counter(token_counter: TokenCounter | None) -> TokenCounter:
    if token_counter is None:
        return count_tokens_safely
    return make_safe_counter(token_counter)


def _format_count(value: int) -> str:
    return f"{value:,}"


def _format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "Unknown"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


def _header(title: str, fields: list[tuple[str, str]]) -> str:
    lines = [f"# {title}", ""]
    lines.extend(f"**{label}:** {value}" for label, value in fields)
    return "\n".join(lines) + "\n\n" + SEPARATOR


def _format_line_range(comment: GitHubReviewComment) -> str | None:
    side = comment.side or DEFAULT_SIDE
    if comment.start_line and comment.line:
        return f"**Lines:** {comment.start_line}-{comment.line} ({side} side)"
    if comment.line:
        return f"**Line:** {comment.line} ({side} side)"
    return None


def _review_comment_fields(comment: GitHubReviewComment) -> list[str]:
    fields = [
        f"**Author:** @{comment.user.login}",
        f"**Created:** {_format_timestamp(comment.created_at)}",
        f"**File:** `{comment.path}`",
    ]
    line_range = _format_line_range(comment)
    if line_range:
        fields.append(line_range)
    fields.append(f"**[View on GitHub]({comment.html_url})**")
    return fields


def _format_flat_review_comments(comments: list[GitHubReviewComment]) -> str:
    parts: list[str] = []
    for index, comment in enumerate(comments):
        parts.append(f"## Comment {index + 1}\n\n")
        parts.append("\n".join(_review_comment_fields(comment)) + "\n\n")
        parts.append(f"### Comment\n\n{comment.body}\n\n")
        if index < len(comments) - 1:
            parts.append(SEPARATOR)
    return "".join(parts)


def _format_thread(thread: CommentThread) -> str:
    """Render a reply thread depth-first.

    The root gets a `## Comment {id}` heading, replies a `↳ Reply` marker. Every line of a reply
    is indented two spaces per level and bodies are blockquoted.
    """
    parts: list[str] = []
    for depth, comment in thread.walk():
        indent = "  " * depth
        if depth == 0:
            parts.append(f"## Comment {comment.id}\n\n")
        else:
            parts.append(f"{indent}**↳ Reply**\n\n")

        parts.append("".join(f"{indent}{field}\n" for field in _review_comment_fields(comment)))
        parts.append("\n")

        quoted = f"\n{indent}> ".join(comment.body.split("\n"))
        parts.append(f"{indent}> {quoted}\n\n")
    return "".join(parts)


def _format_review(position: int, review: GitHubReview, body_heading: str) -> str:
    lines = [
        f"## Review {position} - {review.state}",
        "",
        f"**Author:** @{review.user.login}",
        f"**Submitted:** {_format_timestamp(review.submitted_at)}",
        f"**[View on GitHub]({review.html_url})**",
        "",
    ]
    if review.body:
        lines.extend([f"### {body_heading}", "", review.body, ""])
    return "\n".join(lines) + "\n"


def _format_thread_group(threads: list[CommentThread]) -> str:
    return "".join(_format_thread(thread) + SEPARATOR for thread in threads)


def _format_grouped_threads(reviews: list[GitHubReview], forest: CommentForest) -> str:
    parts: list[str] = []
    for index, review in enumerate(reviews):
        parts.append(_format_review(index + 1, review, body_heading="Review Comment"))
        threads = forest.by_review.get(review.id, [])
        if threads:
            parts.append(f"### Code Comments ({len(threads)})\n\n")
            parts.append(_format_thread_group(threads))
        parts.append(SEPARATOR)

    review_ids = {review.id for review in reviews}
    # Threads whose review was not returned with the reviews list (e.g. deleted reviews)
    unlisted = [
        thread
        for thread in forest.roots
        if thread.comment.pull_request_review_id is not None
        and thread.comment.pull_request_review_id not in review_ids
    ]

    if forest.standalone:
        parts.append("## Standalone Comments\n\n")
        parts.append(_format_thread_group(forest.standalone))

    if unlisted:
        parts.append("## Other Review Comments\n\n")
        parts.append(_format_thread_group(unlisted))

    return "".join(parts)


def _format_issue_description(issue: GitHubIssue) -> str:
    lines = [
        "## Issue Description",
        "",
        f"**Title:** {issue.title}",
        f"**Author:** @{issue.user.login}",
        f"**Created:** {_format_timestamp(issue.created_at)}",
        f"**State:** {issue.state}",
        f"**[View on GitHub]({issue.html_url})**",
        "",
        "### Description",
        "",
        issue.body or "*No description*",
        "",
    ]
    return "\n".join(lines) + "\n"


def _format_issue_comment(position: int, comment: GitHubIssueComment) -> str:
    lines = [
        f"## Comment {position}",
        "",
        f"**Author:** @{comment.user.login}",
        f"**Created:** {_format_timestamp(comment.created_at)}",
        f"**[View on GitHub]({comment.html_url})**",
        "",
        "### Comment",
        "",
        comment.body,
        "",
    ]
    return "\n".join(lines) + "\n"
