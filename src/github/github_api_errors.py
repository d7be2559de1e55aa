from src.comments.errors import CommentsError


class UpstreamError(CommentsError):
    """
    Exception raised when the GitHub API cannot serve a request: a non-2xx status, a
    transport failure, or a payload that does not have the expected shape.
    Never retried, the request fails with whatever diagnostic detail is available.
    """

    def __init__(
        self, message: str, upstream_status: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body

    @property
    def status_code(self) -> int:  # type: ignore[override]
        # Auth and not-found failures are actionable by the caller, pass them through
        if self.upstream_status in (401, 403, 404):
            return self.upstream_status
        return 502

    def _details(self) -> list[str]:
        details: list[str] = []
        if self.upstream_status is not None:
            details.append(f"**GitHub Status:** {self.upstream_status}")
        if self.upstream_status == 404:
            details.extend(
                [
                    "",
                    "The repository, pull request or issue was not found on GitHub. "
                    "Check the owner, repository name and number, and that the token can read the repository.",
                ]
            )
        elif self.upstream_status in (401, 403):
            details.extend(
                [
                    "",
                    "GitHub rejected the token. Check that it is valid, has not expired, "
                    "and has read access to the repository.",
                ]
            )
        if self.body:
            details.extend(["", "**Details:**", "", "```", self.body.strip(), "```"])
        return details


class GitHubPageLimitError(UpstreamError):
    """
    Exception raised when a paginated list keeps advertising a next page beyond the
    configured page cap.
    """

    def __init__(self, path: str, max_pages: int) -> None:
        super().__init__(f"GitHub returned more than {max_pages} pages for {path}.")
        self.path = path
        self.max_pages = max_pages
