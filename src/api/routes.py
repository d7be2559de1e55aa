"""Comment routes: pull request review comments and issue comments as markdown."""

from fastapi import APIRouter, Depends, Response

from src.comments.comment_service import (
    GitHubClientFactory,
    get_issue_comments,
    get_pull_comments,
    parse_formatting_options,
    require_token,
)
from src.comments.errors import MARKDOWN_CONTENT_TYPE
from src.github.github_client import GitHubClient
from src.utils.config import get_github_token

router = APIRouter(tags=["comments"])


def get_github_client_factory() -> GitHubClientFactory:
    """Dependency returning how a per-request GitHub client is built."""
    return GitHubClient


def _markdown(content: str) -> Response:
    return Response(content=content, media_type=MARKDOWN_CONTENT_TYPE)


@router.get("/{owner}/{repo}/pull/{pull_request_id}")
@router.get("/{owner}/{repo}/pull/{pull_request_id}/{comment_number}")
async def pull_request_comments(
    owner: str,
    repo: str,
    pull_request_id: str,
    comment_number: str | None = None,
    token: str | None = None,
    include_reviews: str | None = None,
    show_threading: str | None = None,
    resolved: str | None = None,
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
):
    """Review comments of a pull request, optionally with reviews and reply threads."""
    # A missing token wins over malformed flags
    token = require_token(token or get_github_token())
    markdown = await get_pull_comments(
        owner,
        repo,
        pull_request_id,
        comment_number,
        token,
        parse_formatting_options(include_reviews, show_threading, resolved),
        client_factory=client_factory,
    )
    return _markdown(markdown)


@router.get("/{owner}/{repo}/issues/{issue_number}")
@router.get("/{owner}/{repo}/issues/{issue_number}/{comment_number}")
async def issue_comments(
    owner: str,
    repo: str,
    issue_number: str,
    comment_number: str | None = None,
    token: str | None = None,
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
):
    """An issue's description and comments."""
    markdown = await get_issue_comments(
        owner,
        repo,
        issue_number,
        comment_number,
        token or get_github_token(),
        client_factory=client_factory,
    )
    return _markdown(markdown)
