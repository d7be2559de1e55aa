"""Error taxonomy for comment requests.

Every error knows the HTTP status it maps to and renders itself as a markdown document, so a
reader (human or LLM) of a failed response learns what was wrong and how to fix the request.
"""

MARKDOWN_CONTENT_TYPE = "text/markdown; charset=utf-8"

EXPECTED_FORMATS = """**Expected formats:**
- `/:repoOwner/:repoName/pull/:id` - Get all comments
- `/:repoOwner/:repoName/pull/:id/:commentNumber` - Get specific comment by number (1, 2, 3...)
- `/:repoOwner/:repoName/issues/:id` - Get all issue comments
- `/:repoOwner/:repoName/issues/:id/:commentNumber` - Get specific issue comment by number (1, 2, 3...)

**Pull request options:**
- `?include_reviews=true` - Include review summaries
- `?show_threading=true` - Nest replies under the comment they answer
- `?resolved=true|false` - Accepted for compatibility, currently has no effect"""


class CommentsError(Exception):
    """Base class for errors that terminate a comments request."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def _details(self) -> list[str]:
        return []

    def to_markdown(self) -> str:
        lines = [f"# Error {self.status_code}", "", self.message]
        details = self._details()
        if details:
            lines.extend([""] + details)
        return "\n".join(lines)


class ValidationError(CommentsError):
    """A path segment or query parameter is missing or malformed. Detected before any fetch."""

    status_code = 400

    def __init__(self, message: str, received: str | None = None, hint: str | None = None) -> None:
        super().__init__(message)
        self.received = received
        self.hint = hint

    def _details(self) -> list[str]:
        details: list[str] = []
        if self.received is not None:
            details.extend([f"**Received:** {self.received}", ""])
        if self.hint:
            details.extend([self.hint, ""])
        details.append(EXPECTED_FORMATS)
        return details


class AuthError(CommentsError):
    status_code = 401

    def __init__(self, message: str = "Missing GitHub token.") -> None:
        super().__init__(message)

    def _details(self) -> list[str]:
        return [
            "**Options:**",
            "- Set `GITHUB_TOKEN` environment variable",
            "- Pass token as query parameter: `?token=your_token`",
        ]


class OrdinalOutOfRangeError(CommentsError):
    """The requested comment number is outside [1, number of fetched comments]."""

    status_code = 404

    def __init__(self, ordinal: int, total: int, subject: str, number: int) -> None:
        super().__init__("Comment not found.")
        self.ordinal = ordinal
        self.total = total
        self.subject = subject
        self.number = number

    def _details(self) -> list[str]:
        return [
            f"**Comment Number:** {self.ordinal}",
            f"**{self.subject}:** #{self.number}",
            f"**Total Comments:** {self.total}",
            "",
            f"Comment number must be between 1 and {self.total}.",
        ]


class RequestTimeoutError(CommentsError):
    status_code = 504

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Fetching comments from GitHub took longer than {timeout:g}s.")
        self.timeout = timeout

    def _details(self) -> list[str]:
        return [
            "Very large pull requests or issues can exceed the request deadline. "
            "Request a single comment by number, or try again later."
        ]


class RouteNotFoundError(CommentsError):
    status_code = 404

    def __init__(self, path: str) -> None:
        super().__init__("Route not found.")
        self.path = path

    def _details(self) -> list[str]:
        return [
            f"**Received:** `{self.path}`",
            "",
            EXPECTED_FORMATS,
            "",
            "**Examples:**",
            "- `/octocat/Hello-World/pull/142` - Get all comments",
            "- `/octocat/Hello-World/pull/142/5` - Get the 5th comment",
            "- `/octocat/Hello-World/issues/7` - Get the issue and all its comments",
        ]
