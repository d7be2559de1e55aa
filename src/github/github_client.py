"""Async GitHub REST API client for pull request and issue comments.

Read-only: only the four endpoints the markdown views need are implemented. List endpoints
are paginated by following the `Link: <...>; rel="next"` header until GitHub stops
advertising a next page.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.github.github_api_errors import GitHubPageLimitError, UpstreamError
from src.github.github_api_models import (
    GitHubIssue,
    GitHubIssueComment,
    GitHubReview,
    GitHubReviewComment,
)
from src.utils.config import get_github_api_url, get_github_max_pages
from src.utils.error_handling import extract_first_exception
from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

GITHUB_API_VERSION = "2022-11-28"

# GitHub caps per_page at 100 for every endpoint we use
DEFAULT_PER_PAGE = 100
MAX_PER_PAGE = 100

CLIENT_TIMEOUT = httpx.Timeout(10, read=30)


class GitHubClient:
    """Async client for the GitHub REST API, authenticated with a bearer token."""

    def __init__(
        self,
        token: str,
        api_url: str | None = None,
        per_page: int = DEFAULT_PER_PAGE,
        max_pages: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub token sent as `Authorization: Bearer <token>`
            api_url: API base URL, defaults to GITHUB_API_URL config
            per_page: Items per page for list endpoints, 0 < per_page <= 100
            max_pages: Maximum pages followed for one list, defaults to GITHUB_MAX_PAGES config
            transport: Optional httpx transport (used by tests to stub GitHub)
        """
        if per_page <= 0 or per_page > MAX_PER_PAGE:
            raise ValueError(f"per_page must be in range (0, {MAX_PER_PAGE}]")

        self.api_url = api_url or get_github_api_url()
        self.per_page = per_page
        self.max_pages = max_pages if max_pages is not None else get_github_max_pages()

        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout=CLIENT_TIMEOUT,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Make a GET request, raising UpstreamError for anything but a 2xx response."""
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"GitHub GET {url} failed: {type(e).__name__}: {e}")
            raise UpstreamError(f"Failed to reach GitHub: {type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(
                f"GitHub GET {url} returned {response.status_code}",
                status_code=response.status_code,
            )
            raise UpstreamError(
                f"GitHub API request failed: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
                body=response.text,
            )

        return response

    async def _list_pages(self, path: str) -> AsyncIterator[list[dict[str, Any]]]:
        """Yield the JSON array of each page of a list endpoint, in page order.

        The next page's URL is only known once the current page has arrived, so pages are
        fetched strictly one after another.
        """
        url: str | None = path
        params: dict[str, Any] | None = {"per_page": self.per_page}
        page_count = 0

        while url is not None:
            if page_count >= self.max_pages:
                logger.error(f"GitHub list {path} exceeded {self.max_pages} pages")
                raise GitHubPageLimitError(path, self.max_pages)

            response = await self._get(url, params)
            page_count += 1

            data = _json(response, path)
            if not isinstance(data, list):
                raise UpstreamError(
                    f"GitHub returned {type(data).__name__} for {path}, expected a list"
                )

            yield data

            # The next URL already carries per_page and page in its query string
            url = response.links.get("next", {}).get("url")
            params = None

    async def _get_list(self, model: type[T], path: str) -> list[T]:
        items: list[T] = []
        async for page in self._list_pages(path):
            items.extend(_validate(model, item, path) for item in page)

        logger.info(f"Fetched {len(items)} items from {path}")
        return items

    async def get_pull_request_review_comments(
        self, owner: str, repo: str, pr_number: int
    ) -> list[GitHubReviewComment]:
        """Get every review comment on a pull request, oldest first."""
        return await self._get_list(
            GitHubReviewComment, f"/repos/{owner}/{repo}/pulls/{pr_number}/comments"
        )

    async def get_pull_request_reviews(
        self, owner: str, repo: str, pr_number: int
    ) -> list[GitHubReview]:
        """Get every review on a pull request, in submission order."""
        return await self._get_list(
            GitHubReview, f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews"
        )

    async def get_pull_request_reviews_and_comments(
        self, owner: str, repo: str, pr_number: int
    ) -> tuple[list[GitHubReview], list[GitHubReviewComment]]:
        """Fetch reviews and review comments concurrently.

        If either fetch fails the other is cancelled and the failing fetch's error is raised.
        """
        try:
            async with asyncio.TaskGroup() as tg:
                reviews_task = tg.create_task(self.get_pull_request_reviews(owner, repo, pr_number))
                comments_task = tg.create_task(
                    self.get_pull_request_review_comments(owner, repo, pr_number)
                )
        except ExceptionGroup as e_group:
            # Both tasks may fail, surface the first failure like a sequential fetch would
            upstream_error = extract_first_exception(e_group, UpstreamError)
            if upstream_error is None:
                raise
            raise upstream_error from e_group

        return reviews_task.result(), comments_task.result()

    async def get_issue(self, owner: str, repo: str, issue_number: int) -> GitHubIssue:
        path = f"/repos/{owner}/{repo}/issues/{issue_number}"
        response = await self._get(path)
        return _validate(GitHubIssue, _json(response, path), path)

    async def get_issue_comments(
        self, owner: str, repo: str, issue_number: int
    ) -> list[GitHubIssueComment]:
        """Get every comment on an issue (or on a pull request's conversation tab)."""
        return await self._get_list(
            GitHubIssueComment, f"/repos/{owner}/{repo}/issues/{issue_number}/comments"
        )


def _validate(model: type[T], data: Any, path: str) -> T:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        logger.error(f"Unexpected {model.__name__} payload from {path}: {e}")
        raise UpstreamError(
            f"GitHub returned an unexpected {model.__name__} payload for {path}",
            body=str(e),
        ) from e


def _json(response: httpx.Response, path: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(f"GitHub returned a non-JSON response for {path}") from e
