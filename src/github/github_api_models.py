"""Pydantic models for the GitHub REST API resources we read.

Only the fields the markdown views use are declared, everything else GitHub sends is ignored.
All models are frozen: a fetched snapshot is never modified while serving a request.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

ReviewState = Literal["APPROVED", "CHANGES_REQUESTED", "COMMENTED", "DISMISSED", "PENDING"]
Side = Literal["LEFT", "RIGHT"]


class GitHubModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class GitHubUser(GitHubModel):
    login: str


class GitHubReviewComment(GitHubModel):
    """A pull request review comment (a comment on a line of the diff)."""

    id: int
    body: str = ""
    user: GitHubUser
    path: str
    line: int | None = None
    start_line: int | None = None
    side: Side | None = None
    created_at: datetime
    html_url: str
    pull_request_review_id: int | None = None
    in_reply_to_id: int | None = None

    @field_validator("body", mode="before")
    @classmethod
    def _null_body_is_empty(cls, value: str | None) -> str:
        return value or ""


class GitHubReview(GitHubModel):
    id: int
    state: ReviewState
    user: GitHubUser
    body: str | None = None
    # Pending reviews have not been submitted yet
    submitted_at: datetime | None = None
    html_url: str


class GitHubIssue(GitHubModel):
    number: int
    title: str
    body: str | None = None
    user: GitHubUser
    state: str
    created_at: datetime
    html_url: str


class GitHubIssueComment(GitHubModel):
    id: int
    body: str = ""
    user: GitHubUser
    created_at: datetime
    html_url: str

    @field_validator("body", mode="before")
    @classmethod
    def _null_body_is_empty(cls, value: str | None) -> str:
        return value or ""
